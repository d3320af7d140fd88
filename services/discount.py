import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from models.discount import DiscountDTO
from repositories.discount import DiscountRepository
from services.pricing import PricingService

logger = logging.getLogger(__name__)


class DiscountCatalog:
    """
    In-memory cache of running discounts for one customer session.

    Discounts are read once from the data store and reused until refresh()
    is called. Activity windows are re-checked against the current time on
    every lookup, so a discount that ends mid-session stops applying.
    """

    def __init__(self):
        self._discounts: list[DiscountDTO] | None = None

    async def refresh(self, session: AsyncSession | Session, now: datetime | None = None) -> list[DiscountDTO]:
        now = now or datetime.now()
        self._discounts = await DiscountRepository.get_active(now, session)
        logger.info(f"Loaded {len(self._discounts)} active discount(s)")
        return self._discounts

    async def get_active(self, session: AsyncSession | Session, now: datetime | None = None) -> list[DiscountDTO]:
        now = now or datetime.now()
        if self._discounts is None:
            await self.refresh(session, now)
        return [discount for discount in self._discounts if discount.is_running(now)]

    async def discount_for(
        self,
        product_id: str,
        session: AsyncSession | Session,
        now: datetime | None = None
    ) -> DiscountDTO | None:
        """Discount a product gets when it is added to the cart, if any."""
        discounts = await self.get_active(session, now)
        return PricingService.find_applicable_discount(product_id, discounts)
