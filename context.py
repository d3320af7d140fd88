"""
Storefront checkout context.

Holds the per-customer-session collaborators (cart, discount cache, checkout
tracker) as one explicit object instead of module-level singletons. Handlers
receive the context and call its methods.

Usage:
    redis = Redis(host=config.REDIS_HOST, password=config.REDIS_PASSWORD)
    context = await StorefrontContext.create(redis)
    async with get_db_session() as session:
        await context.add_to_cart("prod-1", session)
        await context.apply_coupon("SAVE10", session)
    await context.checkout.update_contact(contact)
"""

import logging
from datetime import datetime

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import get_db_session
from exceptions.cart import ProductUnavailableException
from models.cart_line import CartLineDTO
from models.discount import DiscountDTO
from repositories.product import ProductRepository
from services.cart import CartStore
from services.checkout_session import CheckoutSessionTracker
from services.coupon import CouponService
from services.discount import DiscountCatalog
from services.pricing import PricingService
from services.webhook import WebhookRelayService

logger = logging.getLogger(__name__)


class StorefrontContext:

    def __init__(
        self,
        cart: CartStore,
        discounts: DiscountCatalog,
        checkout: CheckoutSessionTracker
    ):
        self.cart = cart
        self.discounts = discounts
        self.checkout = checkout

    @classmethod
    async def create(
        cls,
        redis: Redis,
        relay: WebhookRelayService | None = None,
        save_leads: bool = True
    ) -> 'StorefrontContext':
        """Rehydrate the cart and checkout session from redis and wire the services."""
        cart = await CartStore.load(redis, config.CART_STORAGE_KEY, config.SHIPPING_FLAT_FEE)
        relay = relay or WebhookRelayService()
        checkout = await CheckoutSessionTracker.load(
            cart, relay, redis,
            db_session_factory=get_db_session if save_leads else None
        )
        return cls(cart, DiscountCatalog(), checkout)

    async def add_to_cart(
        self,
        product_id: str,
        session: AsyncSession | Session,
        now: datetime | None = None
    ) -> CartLineDTO:
        """
        Add one unit of a product, with the discount running for it right now.

        Raises:
            ProductUnavailableException: If the product is unknown, inactive or out of stock
        """
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductUnavailableException(product_id, "not found")
        if product.status in ("inactive", "out_of_stock"):
            raise ProductUnavailableException(product_id, product.status)
        if product.stock_quantity is not None and product.stock_quantity <= 0:
            raise ProductUnavailableException(product_id, "out of stock")

        discount = await self.discounts.discount_for(product.id, session, now)
        line = await self.cart.add(product, discount)
        logger.info(f"Product {product.id} added to cart, quantity {line.quantity}")
        return line

    async def apply_coupon(
        self,
        code: str,
        session: AsyncSession | Session,
        now: datetime | None = None
    ) -> DiscountDTO | None:
        """
        Raises:
            CouponLookupFailedException: If the data store lookup fails
        """
        return await CouponService.apply(code, self.cart, session, now)

    def cart_summary(self) -> list[str]:
        """Display lines for the cart drawer, one per cart line plus shipping and total."""
        symbol = config.CURRENCY_SYMBOL
        summary = [
            f"{line.name or line.product_id}: {PricingService.format_line(line, symbol, self.cart.coupon)}"
            for line in self.cart.lines
        ]
        if not self.cart.is_empty:
            summary.append(f"Shipping: {symbol}{self.cart.shipping_total():.2f}")
            summary.append(f"Total: {symbol}{self.cart.grand_total():.2f}")
        return summary
