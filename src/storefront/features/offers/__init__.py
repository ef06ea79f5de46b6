"""
Offers package: active offer lookup and best-offer pricing.
"""

from .models import (
    DiscountSource,
    DiscountType,
    Offer,
    OfferScope,
    ResolvedDiscount,
    ResolvedOffers,
)
from .pricing import discount_amount, select_best_offer
from .resolver import OfferResolver

__all__ = [
    'DiscountSource',
    'DiscountType',
    'Offer',
    'OfferScope',
    'ResolvedDiscount',
    'ResolvedOffers',
    'discount_amount',
    'select_best_offer',
    'OfferResolver',
]
