"""
Tests for the storefront exception hierarchy.
"""

import pytest

from exceptions import (
    StorefrontException,
    CartException,
    CartPersistenceCorruptedException,
    ProductUnavailableException,
    CheckoutException,
    CheckoutValidationException,
    CouponException,
    CouponLookupFailedException,
    WebhookException,
    WebhookDeliveryException,
)


class TestHierarchy:

    @pytest.mark.parametrize("exception,parent", [
        (CartPersistenceCorruptedException("k", "bad json"), CartException),
        (ProductUnavailableException("prod-1", "out of stock"), CartException),
        (CheckoutValidationException("email", "is required"), CheckoutException),
        (CouponLookupFailedException("SAVE10", "timeout"), CouponException),
        (WebhookDeliveryException("checkout_started", "refused"), WebhookException),
    ])
    def test_inherits_from_domain_and_base(self, exception, parent):
        assert isinstance(exception, parent)
        assert isinstance(exception, StorefrontException)

    def test_catch_all_with_base(self):
        with pytest.raises(StorefrontException):
            raise CouponLookupFailedException("SAVE10", "database is locked")


class TestMessagesAndDetails:

    def test_coupon_lookup_failed(self):
        e = CouponLookupFailedException("SAVE10", "database is locked")

        assert str(e) == "Coupon lookup for 'SAVE10' failed: database is locked"
        assert e.details == {'code': 'SAVE10', 'reason': 'database is locked'}

    def test_checkout_validation(self):
        e = CheckoutValidationException("phone", "needs at least 10 digits, got 9")

        assert e.field == "phone"
        assert "phone" in str(e)

    def test_webhook_delivery_with_status(self):
        e = WebhookDeliveryException("purchase_completed", "Bad Gateway", status=502)

        assert e.status == 502
        assert e.details["status"] == 502
        assert "HTTP 502" in str(e)

    def test_webhook_delivery_without_status(self):
        e = WebhookDeliveryException("checkout_started", "Connection refused")

        assert e.status is None
        assert "status" not in e.details

    def test_repr_includes_details(self):
        e = ProductUnavailableException("prod-1", "not found")
        assert repr(e).startswith("ProductUnavailableException(")
        assert "product_id=prod-1" in repr(e)

    def test_base_without_details(self):
        e = StorefrontException("boom")
        assert e.details == {}
        assert repr(e) == "StorefrontException('boom')"


class TestUserVisibility:

    @pytest.mark.parametrize("exception,visible", [
        (CheckoutValidationException("email", "is required"), True),
        (CouponLookupFailedException("SAVE10", "timeout"), True),
        (ProductUnavailableException("prod-1", "out of stock"), True),
        (CartPersistenceCorruptedException("k", "bad json"), False),
        (WebhookDeliveryException("checkout_started", "refused"), False),
        (StorefrontException("boom"), False),
    ])
    def test_only_customer_facing_errors_are_visible(self, exception, visible):
        assert exception.user_visible is visible
