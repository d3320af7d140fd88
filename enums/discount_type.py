from enum import Enum


class DiscountType(str, Enum):
    """
    Discount calculation kinds understood by the pricing engine.

    The data store may hold other values (e.g. "buy_x_get_y" created from the
    admin dashboard). Those map to UNKNOWN and are priced as "no discount".
    """

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> 'DiscountType':
        """
        Convert a stored discount_type value to DiscountType.

        Never raises: unrecognized or empty values become UNKNOWN.

        Examples:
            >>> DiscountType.from_string(" Percentage ")
            DiscountType.PERCENTAGE
            >>> DiscountType.from_string("buy_x_get_y")
            DiscountType.UNKNOWN
        """
        if not value:
            return cls.UNKNOWN

        normalized = value.strip().lower()
        for discount_type in cls:
            if discount_type.value == normalized:
                return discount_type
        return cls.UNKNOWN
