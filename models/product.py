from pydantic import BaseModel
from sqlalchemy import Column, String, Float, Boolean, Integer, CheckConstraint

from models.base import Base


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String, nullable=True)
    requires_prescription = Column(Boolean, nullable=False, default=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, default="active")  # active, out_of_stock, inactive

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
    )


class ProductDTO(BaseModel):
    id: str
    name: str
    price: float
    category: str | None = None
    requires_prescription: bool = False
    stock_quantity: int | None = None
    status: str | None = None
