# Affiliate partners hand out coupon codes. A code grants the customer a
# storewide percentage discount while it is active and not expired.
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, CheckConstraint, func

from models.base import Base


class Affiliate(Base):
    __tablename__ = 'affiliates'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    coupon_code = Column(String(32), nullable=False, unique=True, index=True)  # Stored upper-case
    discount_percentage = Column(Float, nullable=False, default=10.0)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime, nullable=True)
    total_sales = Column(Float, nullable=False, default=0.0)
    total_commission = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('discount_percentage >= 0 AND discount_percentage <= 100',
                        name='check_discount_percentage_range'),
    )


class AffiliateDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    email: str | None = None
    coupon_code: str
    discount_percentage: float
    is_active: bool = True
    expires_at: datetime | None = None
