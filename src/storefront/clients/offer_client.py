"""
Offer API Client

Read-only client for active product and category offers.
"""

from typing import Any, Dict, Optional

from storefront.clients.base_client import BaseClient


class OfferClient(BaseClient):
    """HTTP client for active offer lookups."""

    async def get_active_product_offer(self, product_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the active offer for a product.

        GET /offers/product/active/{productId}

        Returns:
            Offer payload, or None if the product has no active offer (404)

        Raises:
            UpstreamError: On network failures or HTTP errors (except 404)
        """
        path = f"/offers/product/active/{product_id}"
        return await self._request_allow_404("GET", path)

    async def get_active_category_offer(self, category_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the active offer for a category.

        GET /offers/category/active/{categoryId}
        """
        path = f"/offers/category/active/{category_id}"
        return await self._request_allow_404("GET", path)
