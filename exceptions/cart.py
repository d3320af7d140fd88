"""
Cart-related exceptions.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class CartPersistenceCorruptedException(CartException):
    """Raised when stored cart data cannot be parsed back into cart lines."""

    def __init__(self, storage_key: str, reason: str):
        super().__init__(
            f"Stored cart under '{storage_key}' is corrupt: {reason}",
            details={'storage_key': storage_key, 'reason': reason}
        )
        self.storage_key = storage_key
        self.reason = reason


class ProductUnavailableException(CartException):
    """Raised when a product cannot be added to the cart (unknown, inactive or out of stock)."""

    user_visible = True

    def __init__(self, product_id: str, reason: str):
        super().__init__(
            f"Product {product_id} cannot be added to the cart: {reason}",
            details={'product_id': product_id, 'reason': reason}
        )
        self.product_id = product_id
        self.reason = reason
