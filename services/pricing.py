import logging

from enums.discount_type import DiscountType
from models.cart_line import CartLineDTO
from models.discount import DiscountDTO

logger = logging.getLogger(__name__)


def _floor_at_zero(price: float) -> float:
    # NaN is not < 0 and passes through unchanged
    return 0.0 if price < 0 else price


class PricingService:
    """Pure discount arithmetic for cart lines. No I/O, never raises."""

    @staticmethod
    def effective_price(line: CartLineDTO, discount: DiscountDTO | None) -> float:
        """
        Calculate the effective unit price of a cart line.

        Rules, in order:
        1. No discount                          -> base price
        2. Discount scope excludes the product  -> base price
        3. min_quantity set and not reached     -> base price
        4. percentage                           -> base - base * value / 100, floored at 0
        5. fixed_amount                         -> max(0, base - value)
        6. Any other discount_type              -> base price

        Rule 6 covers types created from the admin dashboard that the cart
        cannot price (e.g. "buy_x_get_y"): the product sells at list price.

        NaN prices are not caught here and propagate into the result, callers
        validate prices before they enter the cart.

        Example:
            base 150, 10% discount, quantity 2 -> 135.0 per unit

        Args:
            line: Cart line with base price and quantity
            discount: Discount to apply (usually line.discount)

        Returns:
            Effective unit price
        """
        base = line.price
        if discount is None:
            return base

        if not discount.covers(line.product_id):
            return base

        if discount.min_quantity is not None and line.quantity < discount.min_quantity:
            return base

        value = discount.discount_value or 0.0
        kind = discount.kind
        if kind == DiscountType.PERCENTAGE:
            return _floor_at_zero(base - base * value / 100)
        elif kind == DiscountType.FIXED_AMOUNT:
            return _floor_at_zero(base - value)
        else:
            logger.debug(
                f"Discount {discount.id} has unsupported type '{discount.discount_type}', "
                f"pricing product {line.product_id} at base price"
            )
            return base

    @staticmethod
    def best_price(line: CartLineDTO, coupon: DiscountDTO | None = None) -> float:
        """
        Unit price a customer pays for a line.

        The lower of the line's own (add-time) discount price and the cart
        coupon price, so entering a valid coupon never raises a price.
        """
        price = PricingService.effective_price(line, line.discount)
        if coupon is None:
            return price
        return min(price, PricingService.effective_price(line, coupon))

    @staticmethod
    def line_total(line: CartLineDTO, coupon: DiscountDTO | None = None) -> float:
        return PricingService.best_price(line, coupon) * line.quantity

    @staticmethod
    def find_applicable_discount(product_id: str, discounts: list[DiscountDTO]) -> DiscountDTO | None:
        """
        Pick the discount for a product from a list of running discounts.

        The first discount whose scope covers the product wins ("all" or
        "specific" listing the product id). The list is expected newest first.
        """
        for discount in discounts:
            if discount.covers(product_id):
                return discount
        return None

    @staticmethod
    def format_line(line: CartLineDTO, currency_symbol: str = "", coupon: DiscountDTO | None = None) -> str:
        """
        Format a cart line for display.

        Example output:
            ```
            2 × R135.00 = R270.00
            ```
        """
        unit_price = PricingService.best_price(line, coupon)
        total = PricingService.line_total(line, coupon)
        return f"{line.quantity} × {currency_symbol}{unit_price:.2f} = {currency_symbol}{total:.2f}"
