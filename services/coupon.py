import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.discount_scope import DiscountScope
from enums.discount_type import DiscountType
from exceptions.coupon import CouponLookupFailedException
from models.discount import DiscountDTO
from repositories.affiliate import AffiliateRepository
from services.cart import CartStore

logger = logging.getLogger(__name__)


class CouponService:
    """Resolves affiliate coupon codes into storewide percentage discounts."""

    @staticmethod
    def normalize_code(code: str | None) -> str:
        return (code or "").strip().upper()

    @staticmethod
    async def resolve(
        code: str,
        session: AsyncSession | Session,
        now: datetime | None = None
    ) -> DiscountDTO | None:
        """
        Look up a coupon code.

        Unknown, inactive and expired codes are a normal outcome and return
        None ("invalid coupon"). Only an unreachable data store is an error.

        Args:
            code: Code as typed by the customer (trimmed, case-insensitive)
            session: Database session
            now: Reference time for the expiry check

        Returns:
            DiscountDTO for the code, or None if the code is not usable

        Raises:
            CouponLookupFailedException: If the data store lookup fails
        """
        normalized = CouponService.normalize_code(code)
        if not normalized:
            return None

        try:
            affiliate = await AffiliateRepository.get_by_coupon_code(normalized, session)
        except SQLAlchemyError as e:
            logger.error(f"Coupon lookup failed for code {normalized}: {e}")
            raise CouponLookupFailedException(normalized, str(e)) from e

        if affiliate is None:
            logger.info(f"Unknown coupon code {normalized}")
            return None

        if not affiliate.is_active:
            logger.info(f"Coupon code {normalized} belongs to an inactive affiliate")
            return None

        now = now or datetime.now()
        if affiliate.expires_at is not None and affiliate.expires_at < now:
            logger.info(f"Coupon code {normalized} expired at {affiliate.expires_at}")
            return None

        return DiscountDTO(
            name=f"Coupon {normalized}",
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=affiliate.discount_percentage,
            apply_to=DiscountScope.ALL,
        )

    @staticmethod
    async def apply(
        code: str,
        cart: CartStore,
        session: AsyncSession | Session,
        now: datetime | None = None
    ) -> DiscountDTO | None:
        """
        Resolve a code and apply it to the cart.

        The code becomes the cart coupon. Re-applying it replaces the coupon
        instead of stacking it.

        Returns:
            The applied discount, or None if the code is not usable (cart unchanged)

        Raises:
            CouponLookupFailedException: If the data store lookup fails
        """
        discount = await CouponService.resolve(code, session, now)
        if discount is None:
            return None
        await cart.apply_discount(discount)
        return discount
