"""Cart pricing: subtotal, shipping and total.

Pure computation over a cart snapshot. The same snapshot always yields the
same totals, so the cart view and the checkout wizard can both call it.

Shipping rule: free when the subtotal is strictly above the threshold,
otherwise a flat fee.
"""

from collections.abc import Iterable

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Integer

from storefront.cart.items import CartLineItem
from storefront.config import Settings, get_settings
from storefront.domain import storefront


@storefront.value_object
class PricingSnapshot:
    """Totals derived from a cart. Never stored."""

    subtotal: Integer(required=True, min_value=0)
    shipping_cost: Integer(required=True, min_value=0)
    total: Integer(required=True, min_value=0)

    @invariant.post
    def total_is_subtotal_plus_shipping(self):
        if self.total != self.subtotal + self.shipping_cost:
            raise ValidationError({"total": ["Total must equal subtotal plus shipping cost"]})

    @property
    def free_shipping(self) -> bool:
        return self.shipping_cost == 0


def shipping_cost_for(subtotal: int, settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    return 0 if subtotal > settings.free_shipping_threshold else settings.flat_shipping_fee


def compute_totals(items: Iterable[CartLineItem], settings: Settings | None = None) -> PricingSnapshot:
    subtotal = sum(item.unit_price * item.quantity for item in items)
    shipping_cost = shipping_cost_for(subtotal, settings)
    return PricingSnapshot(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        total=subtotal + shipping_cost,
    )
