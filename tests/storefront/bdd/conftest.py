"""Shared BDD fixtures and step definitions for the Storefront."""

import pytest
from pytest_bdd import given, parsers, then, when
from storefront.cart.store import CartStore
from storefront.checkout.session import CheckoutStep
from storefront.checkout.wizard import CheckoutWizard


@pytest.fixture()
def catalog():
    """Products the buyer can see, keyed by product id."""
    return {}


@pytest.fixture()
def checkout():
    """Holder for the open checkout wizard."""
    return {"wizard": None}


# ---------------------------------------------------------------------------
# Given / When steps shared by cart and checkout features
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" priced {price:d} with {stock:d} in stock'))
def _(catalog, make_product, product_id, price, stock):
    catalog[product_id] = make_product(product_id, unit_price=price, available_stock=stock)


@given(parsers.cfparse('the buyer adds {qty:d} of "{product_id}" to the cart'))
@when(parsers.cfparse('the buyer adds {qty:d} of "{product_id}" to the cart'))
def _(cart_store, catalog, qty, product_id):
    cart_store.add_item(catalog[product_id], qty)


@given("the buyer opens checkout")
def _(checkout, cart_store, fake_gateway):
    checkout["wizard"] = CheckoutWizard(cart_store, gateway=fake_gateway)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart holds {qty:d} of "{product_id}"'))
def _(cart_store, qty, product_id):
    item = cart_store.get_item(product_id)
    assert item is not None
    assert item.quantity == qty


@then(parsers.cfparse('the checkout is on the "{step}" step'))
def _(checkout, step):
    assert checkout["wizard"].step == CheckoutStep(step)


@then("the cart is empty")
def _(cart_store):
    assert cart_store.is_empty
    assert CartStore(cart_store.storage).load().is_empty
