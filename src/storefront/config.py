"""
Storefront Configuration

Settings for the cart engine. All values can be overridden via environment
variables; `.env` and `.env.local` in the project root are loaded on import
(`.env.local` wins).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_env_file = PROJECT_ROOT / ".env"
_env_local_file = PROJECT_ROOT / ".env.local"
if _env_file.exists():
    load_dotenv(_env_file, override=False)
if _env_local_file.exists():
    load_dotenv(_env_local_file, override=True)

DEFAULT_BASE_URL = "http://localhost:5000/api"
GLOBAL_MAX_QUANTITY = 10
DEFAULT_SHIPPING_FEE = 100.0


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _get_float(key: str, default: Optional[float]) -> Optional[float]:
    value = _get_env(key)
    if value is None:
        return default
    return float(value)


def _get_int(key: str, default: int) -> int:
    value = _get_env(key)
    if value is None:
        return default
    return int(value)


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_BASE_URL
    api_token: Optional[str] = None
    http_timeout: float = 30.0
    max_quantity: int = GLOBAL_MAX_QUANTITY
    shipping_fee: float = DEFAULT_SHIPPING_FEE
    free_shipping_threshold: Optional[float] = None
    resync_delay: float = 1.0
    offer_cache_ttl: float = 60.0
    currency: str = "₹"


def get_settings() -> Settings:
    """
    Build settings from the current environment.

    Returns:
        Settings with environment overrides applied on top of the defaults.
    """
    return Settings(
        api_base_url=_get_env("STOREFRONT_API_BASE_URL", DEFAULT_BASE_URL),
        api_token=_get_env("STOREFRONT_API_TOKEN"),
        http_timeout=_get_float("STOREFRONT_HTTP_TIMEOUT", 30.0),
        max_quantity=_get_int("STOREFRONT_MAX_QUANTITY", GLOBAL_MAX_QUANTITY),
        shipping_fee=_get_float("STOREFRONT_SHIPPING_FEE", DEFAULT_SHIPPING_FEE),
        free_shipping_threshold=_get_float("STOREFRONT_FREE_SHIPPING_THRESHOLD", None),
        resync_delay=_get_float("STOREFRONT_RESYNC_DELAY", 1.0),
        offer_cache_ttl=_get_float("STOREFRONT_OFFER_CACHE_TTL", 60.0),
        currency=_get_env("STOREFRONT_CURRENCY", "₹"),
    )
