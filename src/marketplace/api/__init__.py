"""Marketplace API package."""

from marketplace.api.routes import cart_router, order_router, product_router, stats_router, user_router

__all__ = ["cart_router", "order_router", "product_router", "stats_router", "user_router"]
