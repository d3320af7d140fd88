from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON, func

from enums.discount_scope import DiscountScope
from enums.discount_type import DiscountType
from models.base import Base


class Discount(Base):
    """
    Storewide or product-specific discount managed from the admin dashboard.

    discount_type is stored as free text: values other than "percentage" and
    "fixed_amount" are kept as-is and priced as no discount.
    """
    __tablename__ = 'discounts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    discount_type = Column(String(32), nullable=False, default=DiscountType.PERCENTAGE.value)
    discount_value = Column(Float, nullable=True)
    min_quantity = Column(Integer, nullable=True)
    apply_to = Column(String(16), nullable=False, default=DiscountScope.ALL.value)
    product_ids = Column(JSON, nullable=False, default=list)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())


class DiscountDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    discount_type: str = DiscountType.PERCENTAGE.value
    discount_value: float | None = None
    min_quantity: int | None = None
    apply_to: DiscountScope = DiscountScope.ALL
    product_ids: list[str] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool = True

    @property
    def kind(self) -> DiscountType:
        return DiscountType.from_string(self.discount_type)

    def covers(self, product_id: str) -> bool:
        """True if the discount's scope includes the given product."""
        if self.apply_to == DiscountScope.ALL:
            return True
        return str(product_id) in {str(pid) for pid in self.product_ids}

    def is_running(self, now: datetime) -> bool:
        """Active flag set and now inside the optional [start_date, end_date] window."""
        if not self.is_active:
            return False
        if self.start_date is not None and now < self.start_date:
            return False
        if self.end_date is not None and now > self.end_date:
            return False
        return True
