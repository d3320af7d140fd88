# A cart line lives only in client-side storage (redis), never in the data
# store. The discount is the snapshot attached when the product was added,
# so pricing keeps working after the discount ends or the store is offline.
from pydantic import BaseModel, Field

from models.discount import DiscountDTO


class CartLineDTO(BaseModel):
    product_id: str
    name: str | None = None
    price: float                                # Unit base price, discounts are applied on read
    quantity: int = Field(default=1, ge=1)
    discount: DiscountDTO | None = None
    original_price: float | None = None         # List price locked at add-time (display only)
