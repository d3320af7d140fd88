"""
Coupon-related exceptions.

An unknown or expired code is NOT an exception (the resolver returns None).
Only a failing data store is.
"""

from .base import StorefrontException


class CouponException(StorefrontException):
    """Base exception for coupon-related errors."""
    pass


class CouponLookupFailedException(CouponException):
    """Raised when the data store cannot be reached to look up a coupon code."""

    user_visible = True

    def __init__(self, code: str, reason: str):
        super().__init__(
            f"Coupon lookup for '{code}' failed: {reason}",
            details={'code': code, 'reason': reason}
        )
        self.code = code
        self.reason = reason
