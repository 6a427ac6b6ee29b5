"""Marketplace bounded context: catalogue, carts, orders, accounts, and visitor stats.

A single domain keeps checkout inside one unit of work: the order insert,
the stock decrements, the stock history records, and the cart removal all
commit together.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
