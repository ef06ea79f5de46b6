"""
Offer pricing.

Pure discount math shared by the cart totals and the line badges.
"""

from typing import Optional

from storefront.features.offers.models import (
    DiscountSource,
    DiscountType,
    Offer,
    ResolvedDiscount,
)


def discount_amount(price: float, offer: Optional[Offer]) -> float:
    """
    Discount an offer grants on a price.

    Never exceeds the price, so the effective price can't go negative.
    """
    if offer is None or price <= 0:
        return 0.0
    if offer.discount_type == DiscountType.PERCENTAGE:
        return min(price, price * offer.discount_value / 100)
    return min(price, offer.discount_value)


def select_best_offer(
    line_total: float,
    product_offer: Optional[Offer],
    category_offer: Optional[Offer],
) -> ResolvedDiscount:
    """
    Pick the larger of the product and category discounts for a line.

    Both are computed against the undiscounted line total; discounts never
    stack. Ties go to the product offer.
    """
    product_amount = discount_amount(line_total, product_offer)
    category_amount = discount_amount(line_total, category_offer)

    if product_offer is not None and product_amount > 0 and product_amount >= category_amount:
        return ResolvedDiscount(amount=product_amount, source=DiscountSource.PRODUCT)
    if category_offer is not None and category_amount > 0:
        return ResolvedDiscount(amount=category_amount, source=DiscountSource.CATEGORY)
    return ResolvedDiscount()

