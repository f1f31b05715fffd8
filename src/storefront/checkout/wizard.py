"""Checkout Wizard: walks the buyer from shipping details to a placed order.

State Machine:
    SHIPPING → PAYMENT → SUBMITTING → CONFIRMED
    PAYMENT → SHIPPING (back, form data kept)
    SUBMITTING → FAILED → PAYMENT (retry, form data kept)

The wizard captures the cart and its totals when it opens. SUBMITTING is the
only state that talks to the order gateway, and it admits one submission at
a time: the in-progress flag is checked and set under a lock before the
gateway is called, so a second confirmation while one is in flight is
dropped rather than turned into a second order.
"""

import threading
from typing import Any

import structlog
from protean.exceptions import ValidationError

from storefront.cart.pricing import compute_totals
from storefront.cart.store import CartStore
from storefront.checkout.session import (
    CARD_FIELDS,
    SHIPPING_FIELDS,
    CardDetails,
    CheckoutSession,
    CheckoutStep,
    PaymentMethod,
    ShippingInfo,
    UserContext,
    shipping_field_errors,
)
from storefront.config import Settings
from storefront.gateway import get_gateway
from storefront.gateway.port import OrderGateway, OrderResult

logger = structlog.get_logger(__name__)

_VALID_TRANSITIONS = {
    CheckoutStep.SHIPPING: {CheckoutStep.PAYMENT},
    CheckoutStep.PAYMENT: {CheckoutStep.SHIPPING, CheckoutStep.SUBMITTING},
    CheckoutStep.SUBMITTING: {CheckoutStep.CONFIRMED, CheckoutStep.FAILED},
    CheckoutStep.FAILED: {CheckoutStep.PAYMENT},
    CheckoutStep.CONFIRMED: set(),  # Terminal
}


def _merge_errors(*sources: dict) -> dict[str, list[str]]:
    merged: dict[str, list[str]] = {}
    for source in sources:
        for name, messages in source.items():
            bucket = merged.setdefault(name, [])
            bucket.extend(m for m in messages if m not in bucket)
    return merged


class CheckoutWizard:
    def __init__(
        self,
        cart_store: CartStore,
        gateway: OrderGateway | None = None,
        user: UserContext | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.cart_store = cart_store
        self.gateway = gateway or get_gateway()

        snapshot = cart_store.snapshot()
        self.session = CheckoutSession(
            cart_snapshot=snapshot,
            totals=compute_totals(snapshot, settings),
            user=user,
            shipping_draft=user.shipping_prefill() if user else {},
        )
        self.attempts = 0
        self._submitting = False
        self._lock = threading.Lock()

    # -------------------------------------------------------------------
    # Read-only view
    # -------------------------------------------------------------------
    @property
    def step(self) -> CheckoutStep:
        return self.session.current_step

    @property
    def order_id(self) -> str | None:
        return self.session.order_id

    @property
    def error(self) -> str | None:
        return self.session.error

    @property
    def errors(self) -> dict[str, list[str]]:
        return self.session.errors

    @property
    def shipping_info(self) -> ShippingInfo | None:
        return self.session.shipping_info

    @property
    def payment_method(self) -> PaymentMethod:
        return self.session.payment_method

    @property
    def payment_details(self) -> CardDetails | None:
        return self.session.payment_details

    @property
    def totals(self):
        return self.session.totals

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def progress(self) -> int:
        return 50 if self.step == CheckoutStep.SHIPPING else 100

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target: CheckoutStep) -> None:
        current = self.session.current_step
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"step": [f"Cannot move from {current.value} to {target.value}"]})

    def _transition(self, target: CheckoutStep) -> None:
        self._assert_can_transition(target)
        logger.debug("Checkout step changed", from_step=self.step.value, to_step=target.value)
        self.session.current_step = target

    # -------------------------------------------------------------------
    # Shipping
    # -------------------------------------------------------------------
    def submit_shipping(self, **fields: Any) -> CheckoutStep:
        """Validate shipping details and move on to payment.

        Invalid input keeps the wizard on SHIPPING with ``errors`` filled.
        """
        with self._lock:
            if self.step != CheckoutStep.SHIPPING:
                raise ValidationError({"step": [f"Shipping details cannot be submitted from {self.step.value}"]})

            values = {name: fields.get(name) for name in SHIPPING_FIELDS}
            self.session.shipping_draft = {k: v for k, v in values.items() if v is not None}

            try:
                info = ShippingInfo(**{k: v for k, v in values.items() if v is not None})
            except ValidationError as exc:
                self.session.errors = _merge_errors(exc.messages, shipping_field_errors(values))
                logger.info("Shipping details rejected", fields=sorted(self.session.errors))
                return self.step

            self.session.shipping_info = info
            self.session.errors = {}
            self._transition(CheckoutStep.PAYMENT)
            return self.step

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def select_payment_method(self, method: "str | PaymentMethod") -> PaymentMethod:
        with self._lock:
            if self.step != CheckoutStep.PAYMENT:
                raise ValidationError({"step": [f"Payment method cannot be changed during {self.step.value}"]})
            self.session.payment_method = PaymentMethod.parse(method)
            self.session.errors = {}
            return self.session.payment_method

    def back(self) -> CheckoutStep:
        """Return to shipping without losing anything already entered."""
        with self._lock:
            self._transition(CheckoutStep.SHIPPING)
            self.session.errors = {}
            if self.session.shipping_info is not None:
                self.session.shipping_draft = self.session.shipping_info.to_dict()
            return self.step

    def submit_payment(
        self,
        card_details: "dict | CardDetails | None" = None,
        payment_method: "str | PaymentMethod | None" = None,
    ) -> CheckoutStep:
        """Confirm the order.

        Validates the payment step, then calls the gateway exactly once.
        Returns the step the wizard ends up in. A call arriving while an
        earlier submission is still in flight is ignored and returns
        SUBMITTING.
        """
        with self._lock:
            if self._submitting:
                logger.warning("Ignoring duplicate order submission")
                return CheckoutStep.SUBMITTING

            self._assert_can_transition(CheckoutStep.SUBMITTING)

            if payment_method is not None:
                self.session.payment_method = PaymentMethod.parse(payment_method)

            if self.session.payment_method == PaymentMethod.CARD:
                try:
                    card = self._card_from(card_details)
                except ValidationError as exc:
                    self.session.errors = dict(exc.messages)
                    logger.info("Card details rejected", fields=sorted(exc.messages))
                    return self.step
                self.session.card_details = card

            self.session.errors = {}
            self._submitting = True
            self._transition(CheckoutStep.SUBMITTING)

        result = self._call_gateway()

        with self._lock:
            self._submitting = False
            if result.success:
                self._confirm(result.order_id)
            else:
                self._fail(result.error.message if result.error else "Order could not be placed")
            return self.step

    def _card_from(self, card_details: "dict | CardDetails | None") -> CardDetails:
        if isinstance(card_details, CardDetails):
            return card_details
        if card_details is None:
            if self.session.card_details is not None:
                return self.session.card_details
            card_details = {}
        return CardDetails(**{k: card_details[k] for k in CARD_FIELDS if card_details.get(k) is not None})

    def _call_gateway(self) -> OrderResult:
        self.attempts += 1
        logger.info(
            "Placing order",
            attempt=self.attempts,
            items=len(self.session.cart_snapshot),
            total=self.session.totals.total,
            payment_method=self.session.payment_method.value,
        )
        try:
            return self.gateway.submit(self.session, self.session.cart_snapshot)
        except Exception:
            logger.exception("Order gateway raised during submission")
            with self._lock:
                self._submitting = False
                self._fail("Order submission failed unexpectedly")
            raise

    def _confirm(self, order_id: str) -> None:
        self.session.order_id = order_id
        self.session.error = None
        self._transition(CheckoutStep.CONFIRMED)
        logger.info("Order confirmed", order_id=order_id)
        self.cart_store.clear()

    def _fail(self, message: str) -> None:
        self.session.error = message
        self._transition(CheckoutStep.FAILED)
        logger.warning("Order submission failed", error=message, attempt=self.attempts)

    # -------------------------------------------------------------------
    # Failure recovery
    # -------------------------------------------------------------------
    def retry(self) -> CheckoutStep:
        """Go back to payment after a failed submission, keeping all form data."""
        with self._lock:
            self._transition(CheckoutStep.PAYMENT)
            self.session.error = None
            return self.step
