"""Tests for cart pricing."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.items import CartLineItem
from storefront.cart.pricing import PricingSnapshot, compute_totals, shipping_cost_for
from storefront.config import Settings


def _line(product_id, unit_price, quantity, stock=10):
    return CartLineItem(
        product_id=product_id,
        name=f"Product {product_id}",
        unit_price=unit_price,
        quantity=quantity,
        available_stock=stock,
    )


class TestComputeTotals:
    def test_subtotal_above_threshold_ships_free(self):
        totals = compute_totals([_line("a", 600, 2)])
        assert totals.subtotal == 1200
        assert totals.shipping_cost == 0
        assert totals.total == 1200
        assert totals.free_shipping is True

    def test_subtotal_below_threshold_pays_flat_fee(self):
        totals = compute_totals([_line("a", 200, 3), _line("b", 200, 1)])
        assert totals.subtotal == 800
        assert totals.shipping_cost == 150
        assert totals.total == 950

    def test_threshold_itself_is_not_free(self):
        totals = compute_totals([_line("a", 500, 2)])
        assert totals.subtotal == 1000
        assert totals.shipping_cost == 150

    def test_empty_cart(self):
        totals = compute_totals([])
        assert totals.subtotal == 0
        assert totals.total == totals.shipping_cost

    @pytest.mark.parametrize(
        "lines",
        [
            [("a", 1, 1)],
            [("a", 999, 1), ("b", 2, 1)],
            [("a", 333, 3), ("b", 1, 2)],
            [("a", 0, 5)],
        ],
    )
    def test_total_is_subtotal_plus_shipping(self, lines):
        totals = compute_totals([_line(pid, price, qty) for pid, price, qty in lines])
        assert totals.total == totals.subtotal + totals.shipping_cost
        assert totals.shipping_cost in (0, 150)

    def test_same_snapshot_gives_same_totals(self):
        snapshot = (_line("a", 450, 2), _line("b", 120, 1))
        assert compute_totals(snapshot) == compute_totals(snapshot)

    def test_uses_configured_threshold_and_fee(self):
        settings = Settings(free_shipping_threshold=5000, flat_shipping_fee=250)
        totals = compute_totals([_line("a", 600, 2)], settings)
        assert totals.shipping_cost == 250
        assert totals.total == 1450


class TestShippingCostFor:
    def test_free_above_threshold(self):
        assert shipping_cost_for(1001) == 0

    def test_fee_at_or_below_threshold(self):
        assert shipping_cost_for(1000) == 150
        assert shipping_cost_for(0) == 150


class TestPricingSnapshot:
    def test_rejects_inconsistent_total(self):
        with pytest.raises(ValidationError):
            PricingSnapshot(subtotal=100, shipping_cost=150, total=200)
