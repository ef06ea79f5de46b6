"""
Unit tests for the storefront HTTP clients.

Requests are served by httpx.MockTransport, so nothing leaves the process.
"""

import asyncio
import json

import httpx
import pytest

from storefront.clients import CartClient, CouponClient, OfferClient
from storefront.errors import UpstreamError


class Recorder:
    """Transport handler that records requests and replies from a fixed response."""

    def __init__(self, status_code=200, body=None, text=None):
        self.requests = []
        self.status_code = status_code
        self.body = body
        self.text = text

    def __call__(self, request):
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)


def make_client(cls, handler, token="test-token"):
    return cls(
        base_url="http://storefront.test/api/",
        token=token,
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def call(client, method, *args):
    async def go():
        try:
            return await getattr(client, method)(*args)
        finally:
            await client.aclose()
    return asyncio.run(go())


class TestCartClient:

    def test_get_cart_sends_bearer_token(self):
        handler = Recorder(body={"cart": {"items": []}, "hasUnavailableItems": False})
        client = make_client(CartClient, handler)

        result = call(client, "get_cart")

        assert result["cart"]["items"] == []
        request = handler.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "http://storefront.test/api/cart"
        assert request.headers["Authorization"] == "Bearer test-token"

    def test_no_token_no_auth_header(self):
        handler = Recorder(body={"cart": {"items": []}})
        client = make_client(CartClient, handler, token="")

        call(client, "get_cart")

        assert "Authorization" not in handler.requests[0].headers

    def test_update_quantity_patches_line(self):
        handler = Recorder(body={"cart": {"items": []}})
        client = make_client(CartClient, handler)

        call(client, "update_quantity", "item-1", 3)

        request = handler.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/api/cart/items/item-1"
        assert json.loads(request.content) == {"quantity": 3}

    def test_add_item_body(self):
        handler = Recorder(body={"cart": {"items": []}})
        client = make_client(CartClient, handler)

        call(client, "add_item", "prod-1", "L", 2)

        request = handler.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"productId": "prod-1", "size": "L", "quantity": 2}

    def test_remove_item(self):
        handler = Recorder(body={"cart": {"items": []}})
        client = make_client(CartClient, handler)

        call(client, "remove_item", "item-9")

        assert handler.requests[0].method == "DELETE"
        assert handler.requests[0].url.path == "/api/cart/items/item-9"

    def test_structured_error_payload(self):
        handler = Recorder(status_code=400, body={
            "message": "Maximum available quantity is 2",
            "errorType": "maxQuantity",
            "maxQuantity": 2,
        })
        client = make_client(CartClient, handler)

        with pytest.raises(UpstreamError) as exc_info:
            call(client, "update_quantity", "item-1", 5)

        error = exc_info.value
        assert error.status_code == 400
        assert error.error_type == "maxQuantity"
        assert error.server_message == "Maximum available quantity is 2"
        assert error.payload["maxQuantity"] == 2

    def test_plain_text_error(self):
        handler = Recorder(status_code=502, text="Bad Gateway")
        client = make_client(CartClient, handler)

        with pytest.raises(UpstreamError) as exc_info:
            call(client, "get_cart")

        assert exc_info.value.status_code == 502
        assert exc_info.value.error_type is None
        assert exc_info.value.server_message == "Bad Gateway"

    def test_invalid_json_on_success(self):
        handler = Recorder(status_code=200, text="<html>")
        client = make_client(CartClient, handler)

        with pytest.raises(UpstreamError, match="invalid JSON"):
            call(client, "get_cart")

    def test_network_failure_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(CartClient, handler)

        with pytest.raises(UpstreamError, match="API request failed") as exc_info:
            call(client, "get_cart")

        assert exc_info.value.status_code is None


class TestOfferClient:

    def test_active_product_offer(self):
        handler = Recorder(body={"_id": "offer-1", "product": "prod-1", "discountType": "fixed", "discountValue": 50})
        client = make_client(OfferClient, handler)

        result = call(client, "get_active_product_offer", "prod-1")

        assert result["_id"] == "offer-1"
        assert handler.requests[0].url.path == "/api/offers/product/active/prod-1"

    def test_not_found_returns_none(self):
        handler = Recorder(status_code=404, body={"message": "No active offer found"})
        client = make_client(OfferClient, handler)

        assert call(client, "get_active_category_offer", "cat-1") is None
        assert handler.requests[0].url.path == "/api/offers/category/active/cat-1"

    def test_server_error_still_raises(self):
        handler = Recorder(status_code=500, body={"message": "boom"})
        client = make_client(OfferClient, handler)

        with pytest.raises(UpstreamError):
            call(client, "get_active_product_offer", "prod-1")


class TestCouponClient:

    def test_validate_normalizes_code(self):
        handler = Recorder(body={"coupon": {"code": "SAVE10"}, "discountAmount": 100})
        client = make_client(CouponClient, handler)

        result = call(client, "validate_coupon", " save10 ", 1000)

        assert result["discountAmount"] == 100
        request = handler.requests[0]
        assert request.url.path == "/api/coupons/validate"
        assert json.loads(request.content) == {"code": "SAVE10", "orderAmount": 1000}

    def test_unknown_code(self):
        handler = Recorder(status_code=404, body={"message": "Invalid coupon code"})
        client = make_client(CouponClient, handler)

        with pytest.raises(UpstreamError) as exc_info:
            call(client, "validate_coupon", "NOPE", 1000)

        assert exc_info.value.server_message == "Invalid coupon code"
