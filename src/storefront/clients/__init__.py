"""
Storefront API Clients

Outbound clients for the storefront REST API.
"""

from storefront.clients.base_client import BaseClient
from storefront.clients.cart_client import CartClient
from storefront.clients.offer_client import OfferClient
from storefront.clients.coupon_client import CouponClient

__all__ = [
    "BaseClient",
    "CartClient",
    "OfferClient",
    "CouponClient",
]
