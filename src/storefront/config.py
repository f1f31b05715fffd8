"""Storefront settings, read from the environment.

Values are resolved once and cached; call reset_settings() after changing
the environment (tests do this through monkeypatch).
"""

import os
from dataclasses import dataclass


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys)
    if v is None:
        return default
    return float(v)


@dataclass(frozen=True)
class Settings:
    free_shipping_threshold: int = 1000
    flat_shipping_fee: int = 150
    currency: str = "PKR"
    order_api_url: str = "http://localhost:8080"
    order_api_timeout: float = 15.0
    order_gateway: str = "http"
    cart_storage: str = "file"
    cart_storage_dir: str = ".storefront"


def load_settings() -> Settings:
    return Settings(
        free_shipping_threshold=_get_int("FREE_SHIPPING_THRESHOLD", default=1000),
        flat_shipping_fee=_get_int("FLAT_SHIPPING_FEE", default=150),
        currency=_get_env("CURRENCY", default="PKR"),
        order_api_url=_get_env("ORDER_API_URL", "API_BASE_URL", default="http://localhost:8080").rstrip("/"),
        order_api_timeout=_get_float("ORDER_API_TIMEOUT", default=15.0),
        order_gateway=_get_env("ORDER_GATEWAY", default="http").lower(),
        cart_storage=_get_env("CART_STORAGE", default="file").lower(),
        cart_storage_dir=_get_env("CART_STORAGE_DIR", default=".storefront"),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
