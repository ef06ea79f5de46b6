"""
Quantity policy for cart lines.

A line's quantity must stay within [1, min(stock, global cap)].
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from storefront.config import GLOBAL_MAX_QUANTITY


class ViolationKind(str, Enum):
    BELOW_MINIMUM = "below_minimum"
    EXCEEDS_GLOBAL_CAP = "exceeds_global_cap"
    EXCEEDS_STOCK = "exceeds_stock"


@dataclass(frozen=True)
class QuantityViolation:
    kind: ViolationKind
    limit: int

    @property
    def message(self) -> str:
        if self.kind == ViolationKind.BELOW_MINIMUM:
            return f"Quantity must be at least {self.limit}"
        if self.kind == ViolationKind.EXCEEDS_GLOBAL_CAP:
            return f"You can add maximum {self.limit} items of the same product"
        return f"Maximum available quantity is {self.limit}"


def validate_quantity(
    requested: int,
    max_stock: int,
    global_cap: int = GLOBAL_MAX_QUANTITY,
) -> Optional[QuantityViolation]:
    """
    Check a requested quantity against the minimum, the global cap and stock.

    The first failing rule wins, in that order.

    Returns:
        None if the quantity is allowed, otherwise the violation
    """
    if requested < 1:
        return QuantityViolation(ViolationKind.BELOW_MINIMUM, 1)
    if requested > global_cap:
        return QuantityViolation(ViolationKind.EXCEEDS_GLOBAL_CAP, global_cap)
    if requested > max_stock:
        return QuantityViolation(ViolationKind.EXCEEDS_STOCK, max_stock)
    return None


def effective_max(max_stock: int, global_cap: int = GLOBAL_MAX_QUANTITY) -> int:
    """Highest quantity the UI should offer for a line."""
    return max(0, min(max_stock, global_cap))
