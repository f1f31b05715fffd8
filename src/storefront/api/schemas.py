"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean value objects.
"""

from pydantic import BaseModel, Field

from storefront.cart.items import CartLineItem
from storefront.cart.pricing import PricingSnapshot
from storefront.checkout.wizard import CheckoutWizard


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LineItemSchema(BaseModel):
    product_id: str
    name: str
    localized_name: str | None = None
    unit_price: int
    quantity: int
    available_stock: int
    images: list[str] = []
    line_total: int

    @classmethod
    def from_item(cls, item: CartLineItem) -> "LineItemSchema":
        return cls(**item.to_record(), line_total=item.line_total)


class TotalsSchema(BaseModel):
    subtotal: int
    shipping_cost: int
    total: int
    free_shipping: bool

    @classmethod
    def from_snapshot(cls, totals: PricingSnapshot) -> "TotalsSchema":
        return cls(
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            total=totals.total,
            free_shipping=totals.free_shipping,
        )


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    name: str
    localized_name: str | None = None
    unit_price: int = Field(ge=0)
    available_stock: int = Field(ge=0)
    images: list[str] = []
    quantity: int = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "name": "Hand-embroidered shawl",
                    "localized_name": "ہاتھ کی کڑھائی والی شال",
                    "unit_price": 450,
                    "available_stock": 5,
                    "images": ["https://cdn.example.com/shawl.jpg"],
                    "quantity": 1,
                }
            ]
        }
    }


class UpdateQuantityRequest(BaseModel):
    quantity: int


class CartResponse(BaseModel):
    items: list[LineItemSchema]
    item_count: int
    totals: TotalsSchema


# ---------------------------------------------------------------------------
# Checkout Schemas
# ---------------------------------------------------------------------------
class StartCheckoutRequest(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    access_token: str | None = None


class ShippingRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    notes: str | None = None


class CardDetailsRequest(BaseModel):
    card_number: str | None = None
    expiry_date: str | None = None
    cvv: str | None = None
    name_on_card: str | None = None


class PaymentRequest(BaseModel):
    method: str = "card"
    card_details: CardDetailsRequest | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"method": "cod"},
                {
                    "method": "card",
                    "card_details": {
                        "card_number": "4242 4242 4242 4242",
                        "expiry_date": "12/29",
                        "cvv": "123",
                        "name_on_card": "Ayesha Khan",
                    },
                },
            ]
        }
    }


class CheckoutResponse(BaseModel):
    step: str
    progress: int
    submitting: bool
    items: list[LineItemSchema]
    totals: TotalsSchema
    shipping: dict
    payment_method: str
    card_last4: str | None = None
    order_id: str | None = None
    error: str | None = None
    errors: dict[str, list[str]] = {}

    @classmethod
    def from_wizard(cls, wizard: CheckoutWizard) -> "CheckoutResponse":
        session = wizard.session
        shipping = session.shipping_info.to_dict() if session.shipping_info else dict(session.shipping_draft)
        card = wizard.payment_details
        return cls(
            step=wizard.step.value,
            progress=wizard.progress,
            submitting=wizard.is_submitting,
            items=[LineItemSchema.from_item(item) for item in session.cart_snapshot],
            totals=TotalsSchema.from_snapshot(session.totals),
            shipping=shipping,
            payment_method=wizard.payment_method.value,
            card_last4=card.last4 if card else None,
            order_id=wizard.order_id,
            error=wizard.error,
            errors=wizard.errors,
        )


class StatusResponse(BaseModel):
    status: str = "ok"
