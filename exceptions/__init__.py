"""
Custom exceptions for the storefront checkout core.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── CartException
│   ├── CartPersistenceCorruptedException
│   └── ProductUnavailableException
├── CouponException
│   └── CouponLookupFailedException
├── CheckoutException
│   └── CheckoutValidationException
└── WebhookException
    └── WebhookDeliveryException

Propagation:
------------
Exceptions with user_visible = True are shown to the customer:
CheckoutValidationException (blocked checkout step), CouponLookupFailedException
("coupon service unavailable, try again") and ProductUnavailableException.
CartPersistenceCorruptedException and WebhookDeliveryException are logged and
recovered from inside the services that raise them.

Usage:
------
    try:
        discount = await CouponService.resolve(code, session)
    except CouponLookupFailedException:
        show_retry_message()
"""

from .base import StorefrontException
from .cart import CartException, CartPersistenceCorruptedException, ProductUnavailableException
from .checkout import CheckoutException, CheckoutValidationException
from .coupon import CouponException, CouponLookupFailedException
from .webhook import WebhookException, WebhookDeliveryException

__all__ = [
    # Base
    'StorefrontException',

    # Cart
    'CartException',
    'CartPersistenceCorruptedException',
    'ProductUnavailableException',

    # Checkout
    'CheckoutException',
    'CheckoutValidationException',

    # Coupon
    'CouponException',
    'CouponLookupFailedException',

    # Webhook
    'WebhookException',
    'WebhookDeliveryException',
]
