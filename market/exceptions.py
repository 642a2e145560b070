"""Market exceptions.

Raised by the cart service when a referenced cart, product or order
does not exist. The HTTP layer maps every ``NotFoundError`` to a 404.
"""

from typing import Any


class MarketError(Exception):
    """Base class for all market exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize market error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(MarketError):
    """Base class for lookups of missing entities."""

    pass


class CartNotFoundError(NotFoundError):
    """Raised when a cart ID is unknown."""

    def __init__(self, cart_id: str) -> None:
        super().__init__("Cart not found", details={"cart_id": cart_id})


class ProductNotFoundError(NotFoundError):
    """Raised when a product ID is not in the catalog."""

    def __init__(self, product_id: str) -> None:
        super().__init__("Product not found", details={"product_id": product_id})


class OrderNotFoundError(NotFoundError):
    """Raised when an order ID is unknown."""

    def __init__(self, order_id: str) -> None:
        super().__init__("Order not found", details={"order_id": order_id})
