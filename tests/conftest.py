import pytest

from storefront.config import Settings


@pytest.fixture
def settings():
    return Settings(
        api_base_url="http://storefront.test/api",
        api_token="test-token",
        shipping_fee=100.0,
        resync_delay=0.0,
        offer_cache_ttl=60.0,
    )
