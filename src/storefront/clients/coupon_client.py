"""
Coupon API Client
"""

from typing import Any, Dict

from storefront.clients.base_client import BaseClient


class CouponClient(BaseClient):
    """HTTP client for coupon validation."""

    async def validate_coupon(self, code: str, order_amount: float) -> Dict[str, Any]:
        """
        Validate a coupon code against an order amount.

        POST /coupons/validate

        Returns:
            {"coupon": {...}, "discountAmount": float}

        Raises:
            UpstreamError: 404 for an unknown code, 400 when not applicable
        """
        payload = {"code": code.strip().upper(), "orderAmount": order_amount}
        return await self._request("POST", "/coupons/validate", json=payload)
