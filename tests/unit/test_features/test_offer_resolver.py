"""
Unit tests for OfferResolver lookups, caching and failure handling.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from helpers import offer_payload
from storefront.errors import UpstreamError
from storefront.features.offers import OfferResolver, OfferScope


@pytest.fixture
def offer_client():
    client = Mock()
    client.get_active_product_offer = AsyncMock(return_value=None)
    client.get_active_category_offer = AsyncMock(return_value=None)
    return client


@pytest.fixture
def resolver(offer_client):
    return OfferResolver(offer_client, ttl_seconds=60)


class TestResolveOffers:

    def test_resolves_both_scopes(self, resolver, offer_client):
        offer_client.get_active_product_offer.return_value = offer_payload("product", "prod-1", "fixed", 150)
        offer_client.get_active_category_offer.return_value = offer_payload("category", "cat-1", "percentage", 20)

        result = asyncio.run(resolver.resolve_offers("prod-1", "cat-1"))

        assert result.product_offer.scope == OfferScope.PRODUCT
        assert result.product_offer.discount_value == 150
        assert result.category_offer.scope == OfferScope.CATEGORY
        assert result.category_offer.discount_value == 20
        offer_client.get_active_product_offer.assert_awaited_once_with("prod-1")
        offer_client.get_active_category_offer.assert_awaited_once_with("cat-1")

    def test_not_found_is_silent_none(self, resolver):
        result = asyncio.run(resolver.resolve_offers("prod-1", "cat-1"))

        assert result.product_offer is None
        assert result.category_offer is None

    def test_missing_category_skips_lookup(self, resolver, offer_client):
        result = asyncio.run(resolver.resolve_offers("prod-1"))

        assert result.category_offer is None
        offer_client.get_active_category_offer.assert_not_called()

    def test_upstream_failure_degrades_to_no_offer(self, resolver, offer_client, caplog):
        offer_client.get_active_product_offer.side_effect = UpstreamError("API returned error 500", status_code=500)
        offer_client.get_active_category_offer.return_value = offer_payload("category", "cat-1")

        result = asyncio.run(resolver.resolve_offers("prod-1", "cat-1"))

        assert result.product_offer is None
        assert result.category_offer is not None
        assert "Offer lookup failed" in caplog.text

    def test_malformed_offer_degrades_to_no_offer(self, resolver, offer_client):
        offer_client.get_active_product_offer.return_value = {"product": "prod-1", "discountType": "bogus"}

        result = asyncio.run(resolver.resolve_offers("prod-1"))

        assert result.product_offer is None

    def test_expired_offer_ignored(self, resolver, offer_client):
        offer_client.get_active_product_offer.return_value = offer_payload(
            "product", "prod-1", endDate="2024-01-31T00:00:00Z", startDate="2024-01-01T00:00:00Z"
        )

        result = asyncio.run(resolver.resolve_offers("prod-1", now=datetime(2024, 3, 1, tzinfo=timezone.utc)))

        assert result.product_offer is None


class TestOfferCache:

    def test_hits_are_cached(self, resolver, offer_client):
        offer_client.get_active_product_offer.return_value = offer_payload("product", "prod-1")

        asyncio.run(resolver.resolve_offers("prod-1"))
        asyncio.run(resolver.resolve_offers("prod-1"))

        offer_client.get_active_product_offer.assert_awaited_once()

    def test_absence_is_cached(self, resolver, offer_client):
        asyncio.run(resolver.resolve_offers("prod-1", "cat-1"))
        asyncio.run(resolver.resolve_offers("prod-1", "cat-1"))

        assert offer_client.get_active_product_offer.await_count == 1
        assert offer_client.get_active_category_offer.await_count == 1

    def test_failures_are_not_cached(self, resolver, offer_client):
        offer_client.get_active_product_offer.side_effect = [
            UpstreamError("API request failed: timeout"),
            offer_payload("product", "prod-1"),
        ]

        first = asyncio.run(resolver.resolve_offers("prod-1"))
        second = asyncio.run(resolver.resolve_offers("prod-1"))

        assert first.product_offer is None
        assert second.product_offer is not None

    def test_expired_entries_refetch(self, offer_client):
        resolver = OfferResolver(offer_client, ttl_seconds=0)

        asyncio.run(resolver.resolve_offers("prod-1"))
        asyncio.run(resolver.resolve_offers("prod-1"))

        assert offer_client.get_active_product_offer.await_count == 2

    def test_invalidate(self, resolver, offer_client):
        asyncio.run(resolver.resolve_offers("prod-1"))
        resolver.invalidate()
        asyncio.run(resolver.resolve_offers("prod-1"))

        assert offer_client.get_active_product_offer.await_count == 2
