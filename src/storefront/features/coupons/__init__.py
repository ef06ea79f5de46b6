"""
Coupons package: order-level discount codes applied after offers.
"""

from .models import Coupon
from .validators import check_coupon, coupon_discount

__all__ = [
    'Coupon',
    'check_coupon',
    'coupon_discount',
]
