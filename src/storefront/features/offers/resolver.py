"""
Offer Resolver

Looks up the active product and category offers for a cart line.

- Read-through cache: fetches via OfferClient on miss/expiry.
- "No offer" (404) is cached like any other answer; failures are not.
- Pricing never hard-fails: any lookup error degrades to "no offer".
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from storefront.clients.offer_client import OfferClient
from storefront.errors import UpstreamError
from storefront.features.offers.models import Offer, OfferScope, ResolvedOffers

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0

_MISS = object()


class OfferResolver:
    """Resolves active offers per product/category with a TTL cache."""

    def __init__(self, client: OfferClient, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds
        # cache key: (scope, scope_id)
        self._mem_cache: Dict[Tuple[OfferScope, str], Dict[str, Any]] = {}

    def _mem_get(self, scope: OfferScope, scope_id: str) -> Any:
        entry = self._mem_cache.get((scope, scope_id))
        if not entry:
            return _MISS
        if entry["expires_at"] <= time.monotonic():
            # Expired
            self._mem_cache.pop((scope, scope_id), None)
            return _MISS
        return entry["value"]

    def _mem_set(self, scope: OfferScope, scope_id: str, value: Optional[Offer]) -> None:
        self._mem_cache[(scope, scope_id)] = {
            "value": value,
            "expires_at": time.monotonic() + self.ttl_seconds,
        }

    def invalidate(self) -> None:
        """Drop every cached lookup."""
        self._mem_cache.clear()

    async def _fetch(self, scope: OfferScope, scope_id: str) -> Optional[Dict[str, Any]]:
        if scope == OfferScope.PRODUCT:
            return await self.client.get_active_product_offer(scope_id)
        return await self.client.get_active_category_offer(scope_id)

    async def get_offer(
        self,
        scope: OfferScope,
        scope_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> Optional[Offer]:
        """
        Active offer for one scope, or None.

        Args:
            scope: Product or category
            scope_id: Product/category id; None short-circuits to no offer
            now: Reference time for the active-window check

        Returns:
            The active offer, or None when there is none or the lookup failed
        """
        if not scope_id:
            return None

        cached = self._mem_get(scope, scope_id)
        if cached is _MISS:
            try:
                payload = await self._fetch(scope, scope_id)
                offer = Offer.from_payload(payload, scope=scope) if payload else None
            except (UpstreamError, ValidationError) as e:
                logger.warning("Offer lookup failed for %s %s: %s", scope.value, scope_id, e)
                return None
            self._mem_set(scope, scope_id, offer)
            cached = offer

        if cached is not None and not cached.is_currently_active(now):
            logger.debug("Ignoring %s offer %s outside its active window", scope.value, cached.id)
            return None
        return cached

    async def resolve_offers(
        self,
        product_id: str,
        category_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ResolvedOffers:
        """Fetch product and category offers concurrently."""
        product_offer, category_offer = await asyncio.gather(
            self.get_offer(OfferScope.PRODUCT, product_id, now),
            self.get_offer(OfferScope.CATEGORY, category_id, now),
        )
        return ResolvedOffers(product_offer=product_offer, category_offer=category_offer)
