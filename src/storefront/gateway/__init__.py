"""Order gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- HttpOrderGateway (default) posts to ORDER_API_URL
- FakeOrderGateway for development and testing (ORDER_GATEWAY=fake)
"""

from storefront.config import get_settings
from storefront.gateway.port import OrderGateway

_current_gateway: OrderGateway | None = None


def get_gateway() -> OrderGateway:
    """Return the current order gateway, built from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.order_gateway == "http":
            from storefront.gateway.http_adapter import HttpOrderGateway

            _current_gateway = HttpOrderGateway(settings.order_api_url, timeout=settings.order_api_timeout)
        elif settings.order_gateway == "fake":
            from storefront.gateway.fake_adapter import FakeOrderGateway

            _current_gateway = FakeOrderGateway()
        else:
            raise ValueError(f"Unknown order gateway: {settings.order_gateway}")
    return _current_gateway


def set_gateway(gateway: OrderGateway) -> None:
    """Override the active order gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
