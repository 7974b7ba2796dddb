"""Marketplace HTTP API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import cart_router, item_router, order_router, user_router

__all__ = ["user_router", "item_router", "cart_router", "order_router", "register_error_handlers"]
