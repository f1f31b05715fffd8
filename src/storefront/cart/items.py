"""Cart line items and the catalog product records they are built from."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Integer, List, String

from storefront.domain import storefront

LINE_ITEM_FIELDS = (
    "product_id",
    "name",
    "localized_name",
    "unit_price",
    "quantity",
    "available_stock",
    "images",
)


@storefront.value_object
class CatalogProduct:
    """A product record as supplied by the marketplace catalog.

    ``available_stock`` is whatever the catalog reported when the buyer
    looked at the product; it is not re-checked until the order is placed.
    """

    product_id: String(required=True, max_length=255)
    name: String(required=True, max_length=255)
    localized_name: String(max_length=255)
    unit_price: Integer(required=True, min_value=0)
    available_stock: Integer(required=True, min_value=0)
    images: List(content_type=String, default=list)


@storefront.value_object
class CartLineItem:
    """One product entry in the cart.

    Prices are integers in the smallest currency unit. ``available_stock``
    is the snapshot taken when the product was added.
    """

    product_id: String(required=True, max_length=255)
    name: String(required=True, max_length=255)
    localized_name: String(max_length=255)
    unit_price: Integer(required=True, min_value=0)
    quantity: Integer(required=True, min_value=1)
    available_stock: Integer(required=True, min_value=1)
    images: List(content_type=String, default=list)

    @invariant.post
    def quantity_must_not_exceed_stock(self):
        if self.quantity is not None and self.available_stock is not None and self.quantity > self.available_stock:
            raise ValidationError(
                {"quantity": [f"Quantity {self.quantity} exceeds available stock {self.available_stock}"]}
            )

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    @classmethod
    def from_product(cls, product: CatalogProduct, quantity: int) -> "CartLineItem":
        return cls(
            product_id=product.product_id,
            name=product.name,
            localized_name=product.localized_name,
            unit_price=product.unit_price,
            quantity=quantity,
            available_stock=product.available_stock,
            images=list(product.images or []),
        )

    def with_quantity(self, quantity: int) -> "CartLineItem":
        """Return a copy of this line carrying ``quantity``."""
        return CartLineItem(**{**self.to_record(), "quantity": quantity})

    def to_record(self) -> dict:
        """Plain-dict form used for durable storage."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "localized_name": self.localized_name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "available_stock": self.available_stock,
            "images": list(self.images or []),
        }

    @classmethod
    def from_record(cls, record: dict) -> "CartLineItem":
        if not isinstance(record, dict):
            raise ValidationError({"record": ["Line item record must be an object"]})
        return cls(**{k: record[k] for k in LINE_ITEM_FIELDS if k in record})
