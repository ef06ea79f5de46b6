"""
Cart presenter layer for presentation logic and data formatting.
"""

from typing import Any, Dict, List, Mapping, Optional

from storefront.config import GLOBAL_MAX_QUANTITY
from storefront.features.cart.models import CartView, LineItem
from storefront.features.cart.mutator import LineState
from storefront.features.cart.quantity import effective_max
from storefront.features.cart.totals import line_discount
from storefront.features.offers.models import DiscountSource, ResolvedOffers
from storefront.utils.response import round_money


class CartPresenter:
    """Presenter class for cart data formatting and presentation."""

    def __init__(self, currency: str = "₹", global_cap: int = GLOBAL_MAX_QUANTITY):
        self.currency = currency
        self.global_cap = global_cap

    def money(self, value: float) -> str:
        return f"{self.currency}{value:.2f}"

    def format_cart_item(
        self,
        item: LineItem,
        offers: Optional[ResolvedOffers] = None,
        state: Optional[LineState] = None,
    ) -> Dict[str, Any]:
        """Format a single cart line, with its best-offer badge."""
        discount = line_discount(item, offers)
        return {
            'id': item.id,
            'product_id': item.product_id,
            'name': item.name,
            'size': item.size,
            'quantity': item.quantity,
            'unit_price': item.unit_price,
            'line_total': round_money(item.line_total) if item.is_available else 0.0,
            'discount': round_money(discount.amount),
            'discount_source': discount.source.value,
            'discounted_total': round_money(max(0.0, item.line_total - discount.amount)) if item.is_available else 0.0,
            'max_quantity': effective_max(item.max_stock, self.global_cap),
            'is_available': item.is_available,
            'unavailable_reason': item.unavailable_reason,
            'stock_reduced': item.stock_reduced,
            'state': (state or LineState.STABLE).value,
        }

    def format_cart(
        self,
        view: CartView,
        offers: Mapping[str, ResolvedOffers],
        states: Optional[Mapping[str, LineState]] = None,
    ) -> Dict[str, Any]:
        """Format the whole cart view for presentation."""
        states = states or {}
        items = [self.format_cart_item(item, offers.get(item.id), states.get(item.id)) for item in view.items]
        return {
            'items': items,
            'total_items': len(items),
            'total_quantity': sum(item.quantity for item in view.items if item.is_available),
            'has_unavailable_items': view.has_unavailable_items,
            'totals': view.totals.model_dump(),
        }

    def format_text(self, summary: Dict[str, Any]) -> str:
        """Bullet-style text rendering of `format_cart` output."""
        if not summary['items']:
            return "Your cart is empty."

        lines: List[str] = []
        for row in summary['items']:
            if not row['is_available']:
                reason = row['unavailable_reason'] or "Unavailable"
                lines.append(f"• {row['name']} ({row['size']}) [{row['id']}] - {reason}")
                continue
            line = (
                f"• {row['name']} ({row['size']}) [{row['id']}] - {row['quantity']} "
                f"@ {self.money(row['unit_price'])} = {self.money(row['line_total'])}"
            )
            if row['discount_source'] != DiscountSource.NONE.value:
                line += f" (-{self.money(row['discount'])} {row['discount_source']} offer)"
            if row['state'] != LineState.STABLE.value:
                line += f" [{row['state']}]"
            lines.append(line)

        totals = summary['totals']
        lines.append("")
        lines.append(f"Subtotal: {self.money(totals['subtotal'])}")
        if totals['offer_discount']:
            lines.append(f"Offer discount: -{self.money(totals['offer_discount'])}")
        if totals['coupon_discount']:
            lines.append(f"Coupon discount: -{self.money(totals['coupon_discount'])}")
        lines.append(f"Shipping: {self.money(totals['shipping'])}")
        lines.append(f"Total: {self.money(totals['total'])}")
        return "\n".join(lines)
