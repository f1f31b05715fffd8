"""Order submission gateway port (abstract interface).

Defines the contract every order gateway adapter implements: turn a
checkout session plus a cart snapshot into exactly one order-creation call
and report the outcome. Adapters never retry; a retry is always a new,
user-initiated submission.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storefront.cart.items import CartLineItem
    from storefront.checkout.session import CheckoutSession


@dataclass(frozen=True)
class OrderError:
    """Why an order could not be created, in words fit for the buyer."""

    message: str
    status_code: int | None = None
    retryable: bool = True


@dataclass(frozen=True)
class OrderResult:
    """Result of an order submission attempt."""

    success: bool
    order_id: str | None = None
    error: OrderError | None = None

    @classmethod
    def created(cls, order_id: str) -> "OrderResult":
        return cls(success=True, order_id=order_id)

    @classmethod
    def failed(cls, message: str, status_code: int | None = None, retryable: bool = True) -> "OrderResult":
        return cls(success=False, error=OrderError(message=message, status_code=status_code, retryable=retryable))


class OrderGateway(ABC):
    """Abstract order gateway interface."""

    @abstractmethod
    def submit(
        self,
        session: "CheckoutSession",
        cart_snapshot: "tuple[CartLineItem, ...]",
    ) -> OrderResult:
        """Create one order from the session and cart snapshot."""
        ...
