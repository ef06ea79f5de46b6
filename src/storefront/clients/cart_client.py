"""
Cart API Client

Thin HTTP client for the storefront cart endpoints. Every call returns the
updated cart payload: {"cart": {"items": [...]}, "hasUnavailableItems": bool}.
"""

from typing import Dict, Any

from storefront.clients.base_client import BaseClient


class CartClient(BaseClient):
    """HTTP client for the cart API."""

    async def get_cart(self) -> Dict[str, Any]:
        """
        Fetch the current cart.

        GET /cart
        """
        return await self._request("GET", "/cart")

    async def add_item(self, product_id: str, size: str, quantity: int) -> Dict[str, Any]:
        """
        Add a product/size to the cart.

        Args:
            product_id: Product identifier
            size: Selected size label
            quantity: Quantity to add

        Returns:
            Updated cart payload

        Raises:
            UpstreamError: On network failures or HTTP errors (e.g. duplicateItem)
        """
        payload = {"productId": product_id, "size": size, "quantity": quantity}
        return await self._request("POST", "/cart/items", json=payload)

    async def update_quantity(self, item_id: str, quantity: int) -> Dict[str, Any]:
        """
        Set the quantity of a cart line.

        Returns:
            Updated cart payload

        Raises:
            UpstreamError: On failure. The payload may carry
                {"errorType": "maxQuantity", "maxQuantity": n}.
        """
        path = f"/cart/items/{item_id}"
        return await self._request("PATCH", path, json={"quantity": quantity})

    async def remove_item(self, item_id: str) -> Dict[str, Any]:
        path = f"/cart/items/{item_id}"
        return await self._request("DELETE", path)
