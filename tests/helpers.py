"""
Payload builders shaped like the storefront API responses.
"""

from typing import Any, Dict, Optional


def make_item(
    item_id: str,
    product_id: str = "prod-1",
    price: float = 1000,
    quantity: int = 1,
    stock: int = 5,
    size: str = "M",
    category_id: Optional[str] = "cat-1",
    available: bool = True,
    reason: Optional[str] = None,
    name: str = "Home Jersey",
) -> Dict[str, Any]:
    """One entry of `cart.items`."""
    return {
        "_id": item_id,
        "product": {
            "_id": product_id,
            "name": name,
            "price": price,
            "sizes": [{"size": size, "stock": stock}],
            "category": {"_id": category_id, "name": "Jerseys"} if category_id else None,
        },
        "size": size,
        "quantity": quantity,
        "isAvailable": available,
        "unavailableReason": reason,
    }


def cart_payload(*items: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "cart": {"_id": "cart-1", "items": list(items)},
        "hasUnavailableItems": any(not item["isAvailable"] for item in items),
    }


def offer_payload(
    scope: str,
    scope_id: str,
    discount_type: str = "percentage",
    discount_value: float = 10,
    **extra: Any,
) -> Dict[str, Any]:
    payload = {
        "_id": f"offer-{scope}-{scope_id}",
        scope: scope_id,
        "name": f"{scope} offer",
        "description": "Seasonal sale",
        "discountType": discount_type,
        "discountValue": discount_value,
        "startDate": "2020-01-01T00:00:00.000Z",
        "endDate": "2099-01-01T00:00:00.000Z",
        "isActive": True,
    }
    payload.update(extra)
    return payload
