"""
Webhook relay exceptions.
"""

from .base import StorefrontException


class WebhookException(StorefrontException):
    """Base exception for webhook relay errors."""
    pass


class WebhookDeliveryException(WebhookException):
    """Raised when a webhook event could not be delivered to the relay."""

    def __init__(self, event: str, reason: str, status: int | None = None):
        message = f"Delivery of '{event}' failed: {reason}"
        details = {'event': event, 'reason': reason}
        if status is not None:
            message = f"Delivery of '{event}' failed with HTTP {status}: {reason}"
            details['status'] = status
        super().__init__(message, details)
        self.event = event
        self.reason = reason
        self.status = status
