from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.affiliate import Affiliate, AffiliateDTO


class AffiliateRepository:

    @staticmethod
    async def get_by_coupon_code(coupon_code: str, session: AsyncSession | Session) -> AffiliateDTO | None:
        """
        Look up an affiliate by coupon code (case-insensitive).

        Inactive and expired affiliates are returned as well, the caller
        decides whether the code is still usable.
        """
        stmt = select(Affiliate).where(func.upper(Affiliate.coupon_code) == coupon_code.upper())
        affiliate = await session_execute(stmt, session)
        affiliate = affiliate.scalar()
        if affiliate is not None:
            return AffiliateDTO.model_validate(affiliate, from_attributes=True)
        else:
            return affiliate
