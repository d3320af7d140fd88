"""
Checkout Form Validation Utility

Decides whether the checkout form holds enough data to open a checkout session:
- name, email and phone present
- email looks like an address
- phone has a minimum number of digits
- cart is not empty
"""

import logging
import re

import config
from exceptions.checkout import CheckoutValidationException
from models.checkout_session import CustomerContactDTO

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def count_phone_digits(phone: str | None) -> int:
    """
    Count the digits in a phone number, ignoring spaces, dashes, brackets and "+".

    Example:
        >>> count_phone_digits("+27 (82) 123-4567")
        11
    """
    if not phone:
        return 0
    return sum(1 for char in phone if char.isdigit())


def is_valid_email(email: str | None) -> bool:
    if not email:
        return False
    return EMAIL_PATTERN.match(email.strip()) is not None


def validate_checkout_contact(
    contact: CustomerContactDTO,
    cart_line_count: int,
    min_phone_digits: int = config.CHECKOUT_PHONE_MIN_DIGITS
) -> None:
    """
    Validate the checkout form for session tracking.

    Address fields are optional at this stage, only the contact needed for a
    follow-up is required.

    Args:
        contact: Current checkout form snapshot
        cart_line_count: Number of lines in the cart
        min_phone_digits: Minimum digits in the phone number

    Raises:
        CheckoutValidationException: On the first failing field
    """
    if not contact.name or not contact.name.strip():
        raise CheckoutValidationException("name", "is required")

    if not contact.email or not contact.email.strip():
        raise CheckoutValidationException("email", "is required")

    if not contact.phone or not contact.phone.strip():
        raise CheckoutValidationException("phone", "is required")

    if not is_valid_email(contact.email):
        raise CheckoutValidationException("email", "is not a valid email address")

    digits = count_phone_digits(contact.phone)
    if digits < min_phone_digits:
        raise CheckoutValidationException("phone", f"needs at least {min_phone_digits} digits, got {digits}")

    if cart_line_count < 1:
        raise CheckoutValidationException("cart", "is empty")


def is_checkout_contact_complete(
    contact: CustomerContactDTO,
    cart_line_count: int,
    min_phone_digits: int = config.CHECKOUT_PHONE_MIN_DIGITS
) -> bool:
    """Boolean form of validate_checkout_contact(), logs the failing field at DEBUG."""
    try:
        validate_checkout_contact(contact, cart_line_count, min_phone_digits)
    except CheckoutValidationException as e:
        logger.debug(f"Checkout form incomplete: {e}")
        return False
    return True
