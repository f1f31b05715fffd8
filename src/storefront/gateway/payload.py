"""Order request payload: the wire contract of the order service.

The order service speaks camelCase JSON; these models keep snake_case
attribute names in Python and serialize with aliases.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.cart.items import CartLineItem
from storefront.checkout.session import CheckoutSession, PaymentMethod


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemPayload(_WireModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: int = Field(ge=0)


class ShippingPayload(_WireModel):
    name: str
    email: str
    phone: str
    address: str
    city: str
    postal_code: str
    notes: str = ""


class CardDetailsPayload(_WireModel):
    card_number: str
    expiry_date: str
    cvv: str
    name_on_card: str


class PaymentPayload(_WireModel):
    method: str
    total: int = Field(ge=0)
    card_details: CardDetailsPayload | None = None


class OrderRequest(_WireModel):
    items: list[OrderItemPayload] = Field(min_length=1)
    shipping: ShippingPayload
    payment: PaymentPayload

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def build_order_request(session: CheckoutSession, cart_snapshot: tuple[CartLineItem, ...]) -> OrderRequest:
    """Serialize a checkout session and cart snapshot into an order request.

    Card details are included only when paying by card.
    """
    shipping = session.shipping_info
    card = session.payment_details

    return OrderRequest(
        items=[
            OrderItemPayload(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in cart_snapshot
        ],
        shipping=ShippingPayload(
            name=shipping.name,
            email=shipping.email,
            phone=shipping.phone,
            address=shipping.address,
            city=shipping.city,
            postal_code=shipping.postal_code,
            notes=shipping.notes or "",
        ),
        payment=PaymentPayload(
            method=session.payment_method.value,
            total=session.totals.total,
            card_details=(
                CardDetailsPayload(
                    card_number=card.card_number,
                    expiry_date=card.expiry_date,
                    cvv=card.cvv,
                    name_on_card=card.name_on_card,
                )
                if session.payment_method == PaymentMethod.CARD and card is not None
                else None
            ),
        ),
    )
