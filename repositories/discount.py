from datetime import datetime

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.discount import Discount, DiscountDTO


class DiscountRepository:
    """Read-only access to discounts (managed from the admin dashboard)."""

    @staticmethod
    async def get_active(now: datetime, session: AsyncSession | Session) -> list[DiscountDTO]:
        """
        Get discounts that are switched on and whose window contains `now`.

        Missing start/end dates mean an open window on that side.
        Newest discounts come first, so the first match wins when several apply.

        Args:
            now: Reference time (naive, same zone as stored dates)
            session: Database session

        Returns:
            List of DiscountDTO ordered by created_at descending
        """
        stmt = (
            select(Discount)
            .where(Discount.is_active == True)
            .where(or_(Discount.start_date.is_(None), Discount.start_date <= now))
            .where(or_(Discount.end_date.is_(None), Discount.end_date >= now))
            .order_by(Discount.created_at.desc(), Discount.id.desc())
        )
        result = await session_execute(stmt, session)
        discounts = result.scalars().all()
        return [DiscountDTO.model_validate(discount, from_attributes=True) for discount in discounts]
