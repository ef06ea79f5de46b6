"""
Cart models.

LineItem and CartView are parsed from the storefront cart payload:

{
    "cart": {
        "items": [
            {
                "_id": "...",
                "product": {
                    "_id": "...", "name": "...", "price": 1000,
                    "sizes": [{"size": "M", "stock": 3}],
                    "category": {"_id": "...", "name": "..."}
                },
                "size": "M",
                "quantity": 2,
                "isAvailable": true,
                "unavailableReason": null,
                "stockReduced": false
            }
        ]
    },
    "hasUnavailableItems": false
}
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from storefront.errors import ContractViolation


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    product_id: Optional[str] = None
    category_id: Optional[str] = None
    name: str = ""
    size: str = ""
    quantity: int
    unit_price: float = 0.0
    max_stock: int = 0
    is_available: bool = True
    unavailable_reason: Optional[str] = None
    stock_reduced: bool = False

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


class CartTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: float = 0.0
    offer_discount: float = 0.0
    coupon_discount: float = 0.0
    shipping: float = 0.0
    total: float = 0.0


class CartView(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[LineItem] = []
    totals: CartTotals = CartTotals()
    has_unavailable_items: bool = False

    def get_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


def _ref_id(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("_id") or value.get("id")
    return str(value) if value is not None else None


def _stock_for_size(product: Dict[str, Any], size: str) -> int:
    for entry in product.get("sizes") or []:
        if entry.get("size") == size:
            return int(entry.get("stock") or 0)
    return 0


def parse_line_item(item: Dict[str, Any]) -> LineItem:
    """Build a LineItem from one entry of `cart.items`."""
    item_id = _ref_id(item.get("_id") or item.get("id"))
    if not item_id:
        raise ContractViolation(f"Cart item without an id: {item!r}")

    product = item.get("product")
    if not isinstance(product, dict):
        # Product deleted (or left unpopulated) server-side
        product = {"_id": product} if product else {}

    size = item.get("size") or ""
    return LineItem(
        id=item_id,
        product_id=_ref_id(product.get("_id")),
        category_id=_ref_id(product.get("category")),
        name=product.get("name") or "",
        size=size,
        quantity=int(item.get("quantity") or 0),
        unit_price=float(product.get("price") or 0),
        max_stock=_stock_for_size(product, size),
        is_available=bool(item.get("isAvailable", True)),
        unavailable_reason=item.get("unavailableReason"),
        stock_reduced=bool(item.get("stockReduced", False)),
    )


def parse_cart(payload: Dict[str, Any]) -> Tuple[List[LineItem], bool]:
    """
    Parse a cart payload into line items.

    Returns:
        (line items in server order, hasUnavailableItems flag)

    Raises:
        ContractViolation: If the payload has no cart/items list
    """
    cart = payload.get("cart") if isinstance(payload, dict) else None
    if cart is None:
        # Empty carts may come back as null
        if isinstance(payload, dict) and "cart" in payload:
            return [], bool(payload.get("hasUnavailableItems", False))
        raise ContractViolation("Cart response has no 'cart' field")
    if not isinstance(cart, dict):
        raise ContractViolation(f"Cart response 'cart' is not an object: {type(cart).__name__}")
    items = cart.get("items")
    if not isinstance(items, list):
        raise ContractViolation("Cart response has no 'items' list")

    try:
        lines = [parse_line_item(item) for item in items]
    except (ValueError, TypeError, AttributeError) as e:
        # ValueError covers pydantic's ValidationError
        raise ContractViolation(f"Malformed cart item: {e}") from e
    has_unavailable = payload.get("hasUnavailableItems")
    if has_unavailable is None:
        has_unavailable = any(not line.is_available for line in lines)
    return lines, bool(has_unavailable)
