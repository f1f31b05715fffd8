"""Configurable fake order gateway for development and testing.

Simulates the order service without any network calls. It can be
configured at runtime to succeed or fail, and records every call so tests
can assert how many orders were attempted.
"""

from uuid import uuid4

from storefront.gateway.payload import build_order_request
from storefront.gateway.port import OrderGateway, OrderResult


class FakeOrderGateway(OrderGateway):
    """Configurable fake order gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Order could not be placed"
        self.order_id: str | None = None
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Order could not be placed",
        order_id: str | None = None,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.order_id = order_id

    def submit(self, session, cart_snapshot) -> OrderResult:
        self.calls.append(build_order_request(session, cart_snapshot).to_wire())

        if self.should_succeed:
            return OrderResult.created(self.order_id or f"fake_ord_{uuid4().hex[:12]}")
        return OrderResult.failed(self.failure_reason)
