"""HTTP order gateway: posts the order to the marketplace order service.

One ``POST {base_url}/api/orders`` per submission, bounded by a timeout.
Any non-2xx answer, malformed body, timeout or connection problem comes
back as a failed OrderResult carrying a readable message. Nothing is
retried here.
"""

import requests
import structlog

from storefront.gateway.payload import build_order_request
from storefront.gateway.port import OrderGateway, OrderResult

logger = structlog.get_logger(__name__)

ORDERS_PATH = "/api/orders"


class HttpOrderGateway(OrderGateway):
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @property
    def orders_url(self) -> str:
        return f"{self.base_url}{ORDERS_PATH}"

    def submit(self, session, cart_snapshot) -> OrderResult:
        body = build_order_request(session, cart_snapshot).to_wire()
        headers = {"Content-Type": "application/json"}
        if session.access_token:
            headers["Authorization"] = f"Bearer {session.access_token}"

        logger.info(
            "Submitting order",
            url=self.orders_url,
            items=len(body["items"]),
            total=body["payment"]["total"],
            payment_method=body["payment"]["method"],
        )

        try:
            response = self.http.post(self.orders_url, json=body, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            logger.warning("Order service timed out", url=self.orders_url, timeout=self.timeout)
            return OrderResult.failed(
                f"The order service did not respond within {self.timeout:g} seconds. Please try again."
            )
        except requests.RequestException as exc:
            logger.warning("Order service unreachable", url=self.orders_url, error=str(exc))
            return OrderResult.failed(f"Could not reach the order service: {exc}")

        data = self._json_body(response)

        if not response.ok:
            message = data.get("message") if isinstance(data, dict) else None
            message = message or response.reason or f"Order request failed with status {response.status_code}"
            logger.warning("Order rejected", status_code=response.status_code, message=message)
            return OrderResult.failed(
                str(message),
                status_code=response.status_code,
                retryable=response.status_code >= 500 or response.status_code in (408, 429),
            )

        order_id = data.get("orderId") if isinstance(data, dict) else None
        if not order_id:
            logger.error("Order response without orderId", status_code=response.status_code)
            return OrderResult.failed(
                "The order service returned an unexpected response",
                status_code=response.status_code,
            )

        logger.info("Order created", order_id=str(order_id))
        return OrderResult.created(str(order_id))

    @staticmethod
    def _json_body(response: requests.Response):
        try:
            return response.json()
        except ValueError:
            return None
