"""Checkout session state: form records and the transient session.

ShippingInfo and CardDetails validate themselves on construction and raise
``ValidationError`` with per-field messages, which the wizard keeps for
display instead of advancing.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.cart.items import CartLineItem
from storefront.cart.pricing import PricingSnapshot
from storefront.domain import storefront

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
_EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")

REQUIRED_SHIPPING_FIELDS = ("name", "email", "phone", "address", "city", "postal_code")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class CheckoutStep(Enum):
    SHIPPING = "Shipping"
    PAYMENT = "Payment"
    SUBMITTING = "Submitting"
    CONFIRMED = "Confirmed"
    FAILED = "Failed"


class PaymentMethod(Enum):
    CARD = "card"
    CASH_ON_DELIVERY = "cod"

    @classmethod
    def parse(cls, value: "str | PaymentMethod") -> "PaymentMethod":
        if isinstance(value, cls):
            return value
        normalized = re.sub(r"[\s_-]", "", str(value)).lower()
        if normalized == "card":
            return cls.CARD
        if normalized in ("cod", "cashondelivery"):
            return cls.CASH_ON_DELIVERY
        raise ValidationError({"payment_method": [f"Unsupported payment method: {value!r}"]})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
def _blank_fields(record, names) -> dict[str, list[str]]:
    return {
        name: ["is required"]
        for name in names
        if getattr(record, name) is not None and not str(getattr(record, name)).strip()
    }


def _email_error(email: str | None) -> str | None:
    if email and email.strip() and not _EMAIL_RE.match(email.strip()):
        return f"Invalid email address: {email!r}"
    return None


def _phone_error(number: str | None) -> str | None:
    if number and number.strip() and (not re.search(r"\d", number) or not _PHONE_RE.match(number.strip())):
        return f"Invalid phone number: {number!r}"
    return None


def shipping_field_errors(values: dict) -> dict[str, list[str]]:
    """Every problem with raw shipping form values, keyed by field.

    Missing fields and malformed email or phone are reported together,
    unlike ``ShippingInfo`` whose format invariants only run once every
    required field is present.
    """
    errors = {
        name: ["is required"]
        for name in REQUIRED_SHIPPING_FIELDS
        if values.get(name) is None or not str(values.get(name)).strip()
    }
    for name, check in (("email", _email_error), ("phone", _phone_error)):
        message = check(values.get(name))
        if message:
            errors.setdefault(name, []).append(message)
    return errors


@storefront.value_object
class ShippingInfo:
    """Where the order goes and whom to contact. Only ``notes`` is optional."""

    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    phone: String(required=True, max_length=20)
    address: String(required=True, max_length=500)
    city: String(required=True, max_length=100)
    postal_code: String(required=True, max_length=20)
    notes: String(max_length=1000)

    @invariant.post
    def required_fields_must_not_be_blank(self):
        errors = _blank_fields(self, REQUIRED_SHIPPING_FIELDS)
        if errors:
            raise ValidationError(errors)

    @invariant.post
    def email_must_be_well_formed(self):
        message = _email_error(self.email)
        if message:
            raise ValidationError({"email": [message]})

    @invariant.post
    def phone_must_be_well_formed(self):
        message = _phone_error(self.phone)
        if message:
            raise ValidationError({"phone": [message]})


@storefront.value_object
class CardDetails:
    """Card fields collected when paying by card. Forwarded, never charged here."""

    card_number: String(required=True, max_length=23)
    expiry_date: String(required=True, max_length=5)
    cvv: String(required=True, max_length=4)
    name_on_card: String(required=True, max_length=100)

    @invariant.post
    def required_fields_must_not_be_blank(self):
        errors = _blank_fields(self, ("card_number", "expiry_date", "cvv", "name_on_card"))
        if errors:
            raise ValidationError(errors)

    @invariant.post
    def card_number_must_be_digits(self):
        if not self.card_number or not self.card_number.strip():
            return
        digits = re.sub(r"[\s-]", "", self.card_number)
        if not digits.isdigit() or not 12 <= len(digits) <= 19:
            raise ValidationError({"card_number": ["Card number must contain 12 to 19 digits"]})

    @invariant.post
    def expiry_must_be_mm_yy(self):
        if self.expiry_date and self.expiry_date.strip() and not _EXPIRY_RE.match(self.expiry_date.strip()):
            raise ValidationError({"expiry_date": ["Expiry date must be in MM/YY format"]})

    @invariant.post
    def cvv_must_be_three_or_four_digits(self):
        if self.cvv and self.cvv.strip() and not re.fullmatch(r"\d{3,4}", self.cvv.strip()):
            raise ValidationError({"cvv": ["CVV must be 3 or 4 digits"]})

    @property
    def last4(self) -> str:
        return re.sub(r"\D", "", self.card_number or "")[-4:]


@storefront.value_object
class UserContext:
    """The signed-in buyer, as supplied by the authentication layer."""

    full_name: String(max_length=100)
    email: String(max_length=254)
    phone: String(max_length=20)
    address: String(max_length=500)
    access_token: String(max_length=4096)

    def shipping_prefill(self) -> dict:
        return {
            "name": self.full_name or "",
            "email": self.email or "",
            "phone": self.phone or "",
            "address": self.address or "",
            "city": "",
            "postal_code": "",
            "notes": "",
        }


SHIPPING_FIELDS = ("name", "email", "phone", "address", "city", "postal_code", "notes")
CARD_FIELDS = ("card_number", "expiry_date", "cvv", "name_on_card")


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
@dataclass
class CheckoutSession:
    """Everything the wizard knows while it is open. Never persisted."""

    cart_snapshot: tuple[CartLineItem, ...]
    totals: PricingSnapshot
    user: UserContext | None = None
    current_step: CheckoutStep = CheckoutStep.SHIPPING
    shipping_draft: dict = field(default_factory=dict)
    shipping_info: ShippingInfo | None = None
    payment_method: PaymentMethod = PaymentMethod.CARD
    card_details: CardDetails | None = None
    order_id: str | None = None
    error: str | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def payment_details(self) -> CardDetails | None:
        """Card details, present only while paying by card."""
        if self.payment_method == PaymentMethod.CARD:
            return self.card_details
        return None

    @property
    def access_token(self) -> str | None:
        return self.user.access_token if self.user else None
