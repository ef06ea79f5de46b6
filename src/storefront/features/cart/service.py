"""
Cart service layer.

Owns the local cart view: line items as last confirmed by the server, one
CartItemMutator per line (the only path that changes a displayed
quantity), the resolved offers per line and the applied coupon. The remote
cart stays the source of truth; every confirmed reply rebuilds the view.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from storefront.clients.cart_client import CartClient
from storefront.clients.coupon_client import CouponClient
from storefront.clients.offer_client import OfferClient
from storefront.config import Settings, get_settings
from storefront.errors import ContractViolation, UpstreamError
from storefront.features.cart.models import CartView, LineItem, parse_cart
from storefront.features.cart.mutator import (
    CartItemMutator,
    LineState,
    OutcomeStatus,
)
from storefront.features.cart.quantity import validate_quantity
from storefront.features.cart.totals import compute_totals
from storefront.features.coupons.models import Coupon
from storefront.features.offers.models import ResolvedOffers
from storefront.features.offers.resolver import OfferResolver
from storefront.utils.response import standard_response

logger = logging.getLogger(__name__)


class CartService:
    """Service class for the cart view and its mutations."""

    def __init__(
        self,
        cart_client: CartClient,
        offer_resolver: OfferResolver,
        coupon_client: Optional[CouponClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.cart_client = cart_client
        self.offer_resolver = offer_resolver
        self.coupon_client = coupon_client
        self.settings = settings or get_settings()

        self._lines: List[LineItem] = []
        self._mutators: Dict[str, CartItemMutator] = {}
        self._offers: Dict[str, ResolvedOffers] = {}
        self._has_unavailable = False
        self._coupon: Optional[Coupon] = None
        self._request_seq = 0
        self._applied_seq = 0
        self._resync_task: Optional[asyncio.Task] = None
        self.resync_count = 0

    # --- Read side ---

    @property
    def view(self) -> CartView:
        """Current cart as displayed, including optimistic quantities."""
        items = []
        for line in self._lines:
            mutator = self._mutators.get(line.id)
            items.append(mutator.displayed_line() if mutator else line)
        totals = compute_totals(
            items,
            self._offers,
            shipping_fee=self.settings.shipping_fee,
            free_shipping_threshold=self.settings.free_shipping_threshold,
            coupon=self._coupon,
        )
        return CartView(items=items, totals=totals, has_unavailable_items=self._has_unavailable)

    @property
    def offers(self) -> Mapping[str, ResolvedOffers]:
        return dict(self._offers)

    @property
    def coupon(self) -> Optional[Coupon]:
        return self._coupon

    def line_state(self, item_id: str) -> Optional[LineState]:
        mutator = self._mutators.get(item_id)
        return mutator.state if mutator else None

    def line_states(self) -> Dict[str, LineState]:
        return {item_id: m.state for item_id, m in self._mutators.items()}

    def max_selectable(self, item_id: str) -> Optional[int]:
        mutator = self._mutators.get(item_id)
        return mutator.max_selectable if mutator else None

    # --- Cart rebuild ---

    async def _resolve_offers(self, lines: List[LineItem]) -> Dict[str, ResolvedOffers]:
        priced = [line for line in lines if line.is_available and line.product_id]
        resolved = await asyncio.gather(
            *(self.offer_resolver.resolve_offers(line.product_id, line.category_id) for line in priced)
        )
        return {line.id: offers for line, offers in zip(priced, resolved)}

    def _next_seq(self) -> int:
        """Sequence number for a cart request, taken before it is sent."""
        self._request_seq += 1
        return self._request_seq

    async def _apply_cart(self, payload: Dict[str, Any], seq: int) -> bool:
        """
        Rebuild the view from a server cart payload.

        `seq` is the number the request got when it was sent. A payload
        from a request older than the last applied one is dropped, so a
        slow reload cannot undo a later confirmed change.

        Raises:
            ContractViolation: If the payload is malformed
        """
        lines, has_unavailable = parse_cart(payload)
        offers = await self._resolve_offers(lines)
        if seq < self._applied_seq:
            logger.debug("Dropping cart payload %s overtaken by %s", seq, self._applied_seq)
            return False
        self._applied_seq = seq

        mutators: Dict[str, CartItemMutator] = {}
        for line in lines:
            mutator = self._mutators.get(line.id)
            if mutator is None:
                mutator = CartItemMutator(
                    line,
                    self.cart_client.update_quantity,
                    global_cap=self.settings.max_quantity,
                    next_seq=self._next_seq,
                    seq=seq,
                )
            else:
                mutator.sync(line, seq)
            mutators[line.id] = mutator

        self._lines = lines
        self._mutators = mutators
        self._offers = offers
        self._has_unavailable = has_unavailable
        return True

    async def load(self) -> Dict[str, Any]:
        """Fetch the cart and rebuild the view. On failure the last good view stays."""
        seq = self._next_seq()
        try:
            payload = await self.cart_client.get_cart()
            await self._apply_cart(payload, seq)
        except (UpstreamError, ContractViolation) as e:
            logger.warning("Cart load failed, keeping last known cart: %s", e)
            return standard_response(False, error=str(e))
        return standard_response(True, data=self.view)

    # --- Resync ---

    async def _delayed_resync(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self.resync_count += 1
        logger.info("Resyncing cart")
        await self.load()

    def schedule_resync(self, delay: Optional[float] = None) -> asyncio.Task:
        """Schedule a full cart reload, replacing any resync already waiting."""
        if self._resync_task is not None and not self._resync_task.done():
            self._resync_task.cancel()
        delay = self.settings.resync_delay if delay is None else delay
        self._resync_task = asyncio.ensure_future(self._delayed_resync(delay))
        return self._resync_task

    @property
    def resync_pending(self) -> bool:
        return self._resync_task is not None and not self._resync_task.done()

    async def drain(self) -> None:
        """Wait for a scheduled resync to finish."""
        task = self._resync_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    # --- Mutations ---

    async def update_quantity(self, item_id: str, quantity: int) -> Dict[str, Any]:
        """
        Change a line's quantity (optimistic, rolled back on failure).

        Returns:
            Standard response; on failure `data` carries the displayed
            quantity plus `violation` or `error_type`/`max_quantity`.
        """
        mutator = self._mutators.get(item_id)
        if mutator is None:
            return standard_response(False, error="Item not found in cart")

        line = mutator.stable_line
        if not line.is_available:
            return standard_response(
                False,
                data={"item_id": item_id, "quantity": mutator.local_quantity, "error_type": "availability"},
                error=line.unavailable_reason or "Product is no longer available",
            )

        outcome = await mutator.request_quantity(quantity)

        if outcome.status == OutcomeStatus.REJECTED:
            return standard_response(False, data={
                "item_id": item_id,
                "quantity": outcome.quantity,
                "violation": outcome.violation.kind,
                "max_quantity": outcome.violation.limit,
            }, error=outcome.reason)

        if outcome.status == OutcomeStatus.ROLLED_BACK:
            self.schedule_resync()
            return standard_response(False, data={
                "item_id": item_id,
                "quantity": outcome.quantity,
                "error_type": outcome.error_type,
                "max_quantity": outcome.max_quantity,
            }, error=outcome.reason)

        if outcome.status == OutcomeStatus.STALE:
            if outcome.needs_resync:
                self.schedule_resync()
            return standard_response(True, data={
                "item_id": item_id,
                "quantity": mutator.local_quantity,
                "superseded": True,
            })

        if self._mutators.get(item_id) is mutator:
            await self._apply_cart(outcome.payload, outcome.seq)
        logger.info("Line %s quantity confirmed at %s", item_id, mutator.local_quantity)
        return standard_response(True, data={
            "item_id": item_id,
            "quantity": mutator.local_quantity,
            "totals": self.view.totals,
        })

    async def add_item(self, product_id: str, size: str, quantity: int = 1) -> Dict[str, Any]:
        """Add a product/size to the cart. Not optimistic: the view changes on confirmation."""
        if not product_id or not size:
            return standard_response(False, error="product_id and size are required")

        cap = self.settings.max_quantity
        violation = validate_quantity(quantity, max_stock=cap, global_cap=cap)
        if violation is not None:
            return standard_response(False, data={
                "violation": violation.kind,
                "max_quantity": violation.limit,
            }, error=violation.message)

        seq = self._next_seq()
        try:
            payload = await self.cart_client.add_item(product_id, size, quantity)
            await self._apply_cart(payload, seq)
        except UpstreamError as e:
            logger.warning("Add to cart failed for %s/%s: %s", product_id, size, e)
            return standard_response(False, data={
                "error_type": e.error_type,
                "existing_item": e.payload.get("existingItem"),
            }, error=e.server_message or str(e))
        except ContractViolation as e:
            self.schedule_resync()
            return standard_response(False, error=str(e))

        return standard_response(True, data=self.view)

    async def remove_item(self, item_id: str) -> Dict[str, Any]:
        """Remove a line. Not optimistic: the view changes on confirmation."""
        if item_id not in self._mutators:
            return standard_response(False, error="Item not found in cart")

        seq = self._next_seq()
        try:
            payload = await self.cart_client.remove_item(item_id)
            await self._apply_cart(payload, seq)
        except UpstreamError as e:
            logger.warning("Remove failed for line %s: %s", item_id, e)
            return standard_response(False, error=e.server_message or str(e))
        except ContractViolation as e:
            self.schedule_resync()
            return standard_response(False, error=str(e))

        logger.info("Line %s removed", item_id)
        return standard_response(True, data={"removed": item_id, "cart": self.view})

    async def apply_coupon(self, code: str) -> Dict[str, Any]:
        """Validate a coupon against the post-offer amount and keep it for totals."""
        if self.coupon_client is None:
            return standard_response(False, error="Coupons are not available")
        if not code or not code.strip():
            return standard_response(False, error="Coupon code is required")

        totals = self.view.totals
        order_amount = max(0.0, totals.subtotal - totals.offer_discount)
        try:
            result = await self.coupon_client.validate_coupon(code, order_amount)
            coupon = Coupon.model_validate(result.get("coupon") or {})
        except UpstreamError as e:
            return standard_response(False, error=e.server_message or str(e))
        except ValidationError as e:
            logger.warning("Malformed coupon payload for %s: %s", code, e)
            return standard_response(False, error="Invalid coupon response")

        self._coupon = coupon
        totals = self.view.totals
        return standard_response(True, data={
            "code": coupon.code,
            "coupon_discount": totals.coupon_discount,
            "totals": totals,
        })

    def remove_coupon(self) -> Dict[str, Any]:
        removed = self._coupon.code if self._coupon else None
        self._coupon = None
        return standard_response(True, data={"removed": removed, "totals": self.view.totals})

    async def close(self) -> None:
        """Cancel a waiting resync and close the HTTP clients."""
        if self._resync_task is not None and not self._resync_task.done():
            self._resync_task.cancel()
            await self.drain()
        await self.cart_client.aclose()
        await self.offer_resolver.client.aclose()
        if self.coupon_client is not None:
            await self.coupon_client.aclose()


def create_cart_service(settings: Optional[Settings] = None) -> CartService:
    """Wire a CartService with clients built from settings."""
    settings = settings or get_settings()
    client_kwargs = {
        "base_url": settings.api_base_url,
        "token": settings.api_token,
        "timeout": settings.http_timeout,
    }
    return CartService(
        cart_client=CartClient(**client_kwargs),
        offer_resolver=OfferResolver(OfferClient(**client_kwargs), ttl_seconds=settings.offer_cache_ttl),
        coupon_client=CouponClient(**client_kwargs),
        settings=settings,
    )
