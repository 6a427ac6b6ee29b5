"""Business rule violations raised by the marketplace domain.

Field-level input problems are raised as Protean ``ValidationError`` instead;
these exceptions cover stock, state, ownership, and lookup failures.
"""


class MarketplaceError(Exception):
    """Base exception for all marketplace rule violations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Conflicts (stock and state)
# ---------------------------------------------------------------------------
class StockExceededError(MarketplaceError):
    """Raised when a cart line would hold more units than the product has in stock."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__("Quantity exceeds available stock")


class InsufficientStockError(MarketplaceError):
    """Raised at checkout when a product no longer has enough stock for a cart line."""

    def __init__(self, product_id: str, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_name}: requested {requested}, available {available}"
        )


class EmptyCartError(MarketplaceError):
    """Raised when checking out a cart that is missing or has no items."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("Cart is empty")


class InvalidTransitionError(MarketplaceError):
    """Raised when an order cannot move from its current status to the requested one."""

    def __init__(self, order_id: str, current: str, target: str):
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(f"Order with status '{current}' cannot be changed to '{target}'")


class StaleCartError(MarketplaceError):
    """Raised when a cart mutation was based on an outdated cart version."""

    def __init__(self, user_id: str, expected: int, actual: int):
        self.user_id = user_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Cart was modified concurrently (expected version {expected}, found {actual})")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
class CartNotFoundError(MarketplaceError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("Cart not found")


class CartItemNotFoundError(MarketplaceError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Item not found in cart")


class ProductNotFoundError(MarketplaceError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class OrderNotFoundError(MarketplaceError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Order not found")


class UserNotFoundError(MarketplaceError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("User not found")


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------
class AuthenticationError(MarketplaceError):
    """Raised when a request carries no valid bearer token."""


class ForbiddenError(MarketplaceError):
    """Raised when the caller is authenticated but not allowed to act on a resource."""
