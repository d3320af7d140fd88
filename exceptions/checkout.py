"""
Checkout-related exceptions.
"""

from .base import StorefrontException


class CheckoutException(StorefrontException):
    """Base exception for checkout-related errors."""
    pass


class CheckoutValidationException(CheckoutException):
    """Raised when checkout form data is incomplete or malformed."""

    user_visible = True

    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid checkout field '{field}': {reason}",
            details={'field': field, 'reason': reason}
        )
        self.field = field
        self.reason = reason
