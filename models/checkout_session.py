from datetime import datetime

from pydantic import BaseModel, Field

from models.cart_line import CartLineDTO
from models.discount import DiscountDTO


class CustomerContactDTO(BaseModel):
    """Snapshot of the checkout form."""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    notes: str | None = None


class CheckoutSessionDTO(BaseModel):
    session_id: str
    customer: CustomerContactDTO
    lines: list[CartLineDTO] = Field(default_factory=list)
    coupon: DiscountDTO | None = None           # Cart-level coupon, priced per line against line.discount
    subtotal: float = 0.0
    shipping: float = 0.0
    total: float = 0.0
    started_sent: bool = False
    created_at: datetime | None = None
