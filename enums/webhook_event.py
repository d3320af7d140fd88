from enum import Enum


class WebhookEvent(str, Enum):
    CHECKOUT_STARTED = "checkout_started"
    PURCHASE_COMPLETED = "purchase_completed"
