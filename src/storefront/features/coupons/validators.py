# Coupon applicability rules and discount math

from datetime import datetime, timezone
from typing import Optional

from storefront.features.coupons.models import Coupon
from storefront.features.offers.models import DiscountType
from storefront.utils.response import round_money


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def check_coupon(coupon: Coupon, order_amount: float, now: Optional[datetime] = None) -> Optional[str]:
    # Returns the first failing reason, or None when the coupon applies
    now = _as_utc(now or datetime.now(timezone.utc))
    if not coupon.is_active:
        return "This coupon is not active"
    if coupon.start_date is not None and now < _as_utc(coupon.start_date):
        return "This coupon is not yet valid"
    if coupon.end_date is not None and now > _as_utc(coupon.end_date):
        return "This coupon has expired"
    if order_amount < coupon.min_purchase:
        return f"Minimum purchase of {coupon.min_purchase:g} required for this coupon"
    if coupon.usage_limit and coupon.used_count >= coupon.usage_limit:
        return "This coupon has reached its usage limit"
    return None


def coupon_discount(order_amount: float, coupon: Optional[Coupon]) -> float:
    if coupon is None or order_amount <= 0:
        return 0.0
    if coupon.discount_type == DiscountType.PERCENTAGE:
        amount = order_amount * coupon.discount_value / 100
        if coupon.max_discount:
            amount = min(amount, coupon.max_discount)
    else:
        amount = coupon.discount_value
    return round_money(min(amount, order_amount))
