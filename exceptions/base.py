"""
Root of the storefront exception tree.
"""


class StorefrontException(Exception):
    """
    Common parent of every checkout-core error.

    Attributes:
        message: Text for logs (and for the customer when user_visible)
        details: Context for logs, e.g. product id, coupon code, HTTP status
        user_visible: Whether the storefront shows this error to the customer.
            Internal errors are logged and recovered from where they occur.
    """

    user_visible = False

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if not self.details:
            return f"{type(self).__name__}('{self.message}')"
        context = ', '.join(f"{key}={value}" for key, value in self.details.items())
        return f"{type(self).__name__}('{self.message}', {context})"
