import logging

from pydantic import TypeAdapter, ValidationError
from redis.asyncio import Redis

import config
from exceptions.cart import CartPersistenceCorruptedException
from models.cart_line import CartLineDTO
from models.discount import DiscountDTO
from models.product import ProductDTO
from services.pricing import PricingService

logger = logging.getLogger(__name__)

_cart_lines_adapter = TypeAdapter(list[CartLineDTO])


class CartStore:
    """
    Shopping cart of one customer session.

    Lines are kept in memory in insertion order and written to redis as a
    single JSON array after every mutation. A coupon applies to the whole
    cart and is stored next to the lines under "<storage_key>:coupon".
    Totals are never stored, they are recomputed by PricingService on every
    read.

    Usage:
        cart = await CartStore.load(redis)
        await cart.add(product, discount)
        await cart.set_quantity(product.id, 3)
        cart.total()
    """

    def __init__(
        self,
        redis: Redis,
        storage_key: str = config.CART_STORAGE_KEY,
        shipping_fee: float = config.SHIPPING_FLAT_FEE
    ):
        self.redis = redis
        self.storage_key = storage_key
        self.shipping_fee = shipping_fee
        self._lines: dict[str, CartLineDTO] = {}
        self.coupon: DiscountDTO | None = None

    @property
    def coupon_key(self) -> str:
        return f"{self.storage_key}:coupon"

    @classmethod
    async def load(
        cls,
        redis: Redis,
        storage_key: str = config.CART_STORAGE_KEY,
        shipping_fee: float = config.SHIPPING_FLAT_FEE
    ) -> 'CartStore':
        """Create a cart and rehydrate it from redis."""
        cart = cls(redis, storage_key, shipping_fee)
        await cart.rehydrate()
        return cart

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @staticmethod
    def serialize(lines: list[CartLineDTO]) -> bytes:
        return _cart_lines_adapter.dump_json(lines)

    @staticmethod
    def deserialize(raw: str | bytes, storage_key: str = config.CART_STORAGE_KEY) -> list[CartLineDTO]:
        """
        Parse a stored cart.

        Raises:
            CartPersistenceCorruptedException: If raw is not a JSON array of cart lines
        """
        try:
            return _cart_lines_adapter.validate_json(raw)
        except ValidationError as e:
            raise CartPersistenceCorruptedException(storage_key, f"{e.error_count()} validation error(s)") from e

    async def rehydrate(self) -> None:
        """
        Replace the in-memory lines with the stored ones.

        Corrupt data is discarded (and deleted from redis) and the cart starts
        empty instead of failing startup. The coupon is restored separately.
        """
        raw = await self.redis.get(self.storage_key)
        if raw is None:
            self._lines = {}
            await self._rehydrate_coupon()
            return

        try:
            lines = self.deserialize(raw, self.storage_key)
        except CartPersistenceCorruptedException as e:
            logger.warning(f"Discarding stored cart: {e}")
            self._lines = {}
            await self.redis.delete(self.storage_key)
            await self._rehydrate_coupon()
            return

        # Duplicate product ids are merged, quantities add up
        self._lines = {}
        for line in lines:
            existing = self._lines.get(line.product_id)
            if existing is not None:
                self._lines[line.product_id] = existing.model_copy(
                    update={"quantity": existing.quantity + line.quantity}
                )
            else:
                self._lines[line.product_id] = line
        logger.debug(f"Cart rehydrated with {len(self._lines)} line(s)")
        await self._rehydrate_coupon()

    async def _rehydrate_coupon(self) -> None:
        self.coupon = None
        raw = await self.redis.get(self.coupon_key)
        if raw is None:
            return
        try:
            self.coupon = DiscountDTO.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding stored coupon under '{self.coupon_key}': {e.error_count()} validation error(s)")
            await self.redis.delete(self.coupon_key)

    async def _persist(self) -> None:
        await self.redis.set(self.storage_key, self.serialize(self.lines))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, product: ProductDTO, discount: DiscountDTO | None = None) -> CartLineDTO:
        """
        Add one unit of a product.

        A product already in the cart gets its quantity increased by 1 and
        keeps the discount it was added with. A new product is inserted with
        quantity 1 and the given discount.

        Returns:
            The resulting cart line
        """
        existing = self._lines.get(product.id)
        if existing is not None:
            line = existing.model_copy(update={"quantity": existing.quantity + 1})
        else:
            line = CartLineDTO(
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=1,
                discount=discount,
                original_price=product.price,
            )
        self._lines[product.id] = line
        await self._persist()
        return line

    async def remove(self, product_id: str) -> None:
        """Remove a line. Removing a product that is not in the cart is a no-op."""
        if self._lines.pop(product_id, None) is None:
            return
        await self._persist()

    async def set_quantity(self, product_id: str, quantity: int) -> None:
        """
        Set the quantity of a line.

        A quantity below 1 removes the line. Unknown product ids are ignored.
        """
        if quantity < 1:
            await self.remove(product_id)
            return

        existing = self._lines.get(product_id)
        if existing is None:
            return
        self._lines[product_id] = existing.model_copy(update={"quantity": quantity})
        await self._persist()

    async def clear(self) -> None:
        """Empty the cart and drop the coupon."""
        self._lines = {}
        self.coupon = None
        await self._persist()
        await self.redis.delete(self.coupon_key)

    async def apply_discount(self, discount: DiscountDTO) -> int:
        """
        Apply a cart-level (coupon) discount.

        The coupon replaces any previous coupon and covers every line in its
        scope, including lines added later. Add-time product discounts stay on
        their lines; each line is priced at the lower of the two. Applying the
        same coupon again yields the same state.

        Returns:
            Number of lines currently in the coupon's scope
        """
        self.coupon = discount
        await self.redis.set(self.coupon_key, discount.model_dump_json())
        applied = sum(1 for product_id in self._lines if discount.covers(product_id))
        logger.info(f"Coupon {discount.name or discount.id} applied, covering {applied} cart line(s)")
        return applied

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def lines(self) -> list[CartLineDTO]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get(self, product_id: str) -> CartLineDTO | None:
        return self._lines.get(product_id)

    def count(self) -> int:
        """Total number of units in the cart."""
        return sum(line.quantity for line in self._lines.values())

    def total(self) -> float:
        """Sum of line totals with the coupon applied where it is cheaper (subtotal, without shipping)."""
        subtotal = sum(
            PricingService.line_total(line, self.coupon)
            for line in self._lines.values()
        ) if self._lines else 0.0
        return round(subtotal, 2)

    def shipping_total(self) -> float:
        """Flat shipping rate for a non-empty cart."""
        return self.shipping_fee if self._lines else 0.0

    def grand_total(self) -> float:
        return round(self.total() + self.shipping_total(), 2)
