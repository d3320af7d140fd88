"""
Unit Tests: CouponService

Resolves affiliate coupon codes against an in-memory SQLite database.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from enums.discount_scope import DiscountScope
from enums.discount_type import DiscountType
from exceptions.coupon import CouponLookupFailedException
from models.affiliate import Affiliate
from services.cart import CartStore
from services.coupon import CouponService


@pytest_asyncio.fixture
async def affiliates(test_session, now):
    test_session.add_all([
        Affiliate(name="Clinic partner", email="partner@example.com", coupon_code="SAVE10", discount_percentage=10.0),
        Affiliate(name="Paused partner", email="paused@example.com", coupon_code="PAUSED", discount_percentage=15.0,
                  is_active=False),
        Affiliate(name="Old partner", email="old@example.com", coupon_code="OLD20", discount_percentage=20.0,
                  expires_at=now - timedelta(days=1)),
        Affiliate(name="Future partner", email="future@example.com", coupon_code="LATER25", discount_percentage=25.0,
                  expires_at=now + timedelta(days=30)),
    ])
    await test_session.flush()
    return test_session


class TestCouponResolve:

    @pytest.mark.asyncio
    async def test_known_code_resolves_to_storewide_percentage(self, affiliates, now):
        discount = await CouponService.resolve("SAVE10", affiliates, now)

        assert discount is not None
        assert discount.kind == DiscountType.PERCENTAGE
        assert discount.discount_value == 10.0
        assert discount.apply_to == DiscountScope.ALL
        assert discount.id is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("typed", ["save10", "  Save10 ", "SAVE10\n"])
    async def test_code_is_trimmed_and_case_insensitive(self, affiliates, now, typed):
        discount = await CouponService.resolve(typed, affiliates, now)
        assert discount is not None
        assert discount.discount_value == 10.0

    @pytest.mark.asyncio
    async def test_code_with_future_expiry_resolves(self, affiliates, now):
        discount = await CouponService.resolve("LATER25", affiliates, now)
        assert discount.discount_value == 25.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["NOPE", "PAUSED", "OLD20", "", "   ", None])
    async def test_unusable_codes_return_none(self, affiliates, now, code):
        assert await CouponService.resolve(code, affiliates, now) is None

    @pytest.mark.asyncio
    async def test_data_store_failure_raises_lookup_failed(self, test_session):
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch("services.coupon.AffiliateRepository.get_by_coupon_code", side_effect=error):
            with pytest.raises(CouponLookupFailedException) as exc_info:
                await CouponService.resolve("save10", test_session)

        assert exc_info.value.code == "SAVE10"
        assert "database is locked" in exc_info.value.reason


class TestCouponApply:

    @pytest.mark.asyncio
    async def test_apply_twice_recomputes_instead_of_stacking(self, affiliates, redis_client, product, now):
        cart = await CartStore.load(redis_client, "test:coupon-cart")
        await cart.add(product)

        await CouponService.apply("SAVE10", cart, affiliates, now)
        await CouponService.apply("save10", cart, affiliates, now)

        assert cart.total() == pytest.approx(135.0)

    @pytest.mark.asyncio
    async def test_invalid_code_leaves_cart_unchanged(self, affiliates, redis_client, product, now):
        cart = await CartStore.load(redis_client, "test:coupon-cart")
        await cart.add(product)

        assert await CouponService.apply("NOPE", cart, affiliates, now) is None
        assert cart.coupon is None
        assert cart.get(product.id).discount is None
        assert cart.total() == 150.0
