from enum import Enum


class DiscountScope(str, Enum):
    ALL = "all"              # Storewide
    SPECIFIC = "specific"    # Only the listed product ids
