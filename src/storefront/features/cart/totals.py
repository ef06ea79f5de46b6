"""
Cart totals.

Pure aggregation over the line items the view currently shows.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional

from storefront.config import DEFAULT_SHIPPING_FEE
from storefront.features.cart.models import CartTotals, LineItem
from storefront.features.coupons.models import Coupon
from storefront.features.coupons.validators import check_coupon, coupon_discount
from storefront.features.offers.models import ResolvedDiscount, ResolvedOffers
from storefront.features.offers.pricing import select_best_offer
from storefront.utils.response import round_money


def line_discount(line: LineItem, offers: Optional[ResolvedOffers]) -> ResolvedDiscount:
    """Best offer for one line, against that line's own subtotal."""
    if offers is None or not line.is_available:
        return ResolvedDiscount()
    return select_best_offer(line.line_total, offers.product_offer, offers.category_offer)


def compute_totals(
    lines: Iterable[LineItem],
    offers: Mapping[str, ResolvedOffers],
    shipping_fee: float = DEFAULT_SHIPPING_FEE,
    free_shipping_threshold: Optional[float] = None,
    coupon: Optional[Coupon] = None,
    now: Optional[datetime] = None,
) -> CartTotals:
    """
    Compute subtotal, offer discount, coupon discount, shipping and total.

    Args:
        lines: Line items as displayed (unavailable ones are skipped)
        offers: Resolved offers keyed by line item id
        shipping_fee: Flat fee charged when the subtotal is positive
        free_shipping_threshold: Subtotal above which shipping is free (None disables)
        coupon: Applied coupon, checked against the post-offer amount
        now: Reference time for the coupon validity window

    Returns:
        CartTotals rounded to 2 decimals; total is never negative
    """
    subtotal = 0.0
    offer_discount = 0.0
    for line in lines:
        if not line.is_available:
            continue
        subtotal += line.line_total
        offer_discount += line_discount(line, offers.get(line.id)).amount

    after_offers = max(0.0, subtotal - offer_discount)
    applied_coupon = 0.0
    if coupon is not None and check_coupon(coupon, after_offers, now) is None:
        applied_coupon = coupon_discount(after_offers, coupon)

    shipping = shipping_fee if subtotal > 0 else 0.0
    if free_shipping_threshold is not None and subtotal > free_shipping_threshold:
        shipping = 0.0

    total = max(0.0, subtotal - offer_discount - applied_coupon + shipping)
    return CartTotals(
        subtotal=round_money(subtotal),
        offer_discount=round_money(offer_discount),
        coupon_discount=round_money(applied_coupon),
        shipping=round_money(shipping),
        total=round_money(total),
    )
