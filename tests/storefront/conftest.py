import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def storage():
    from storefront.storage.memory_adapter import MemoryStorage

    return MemoryStorage()


@pytest.fixture()
def cart_store(storage):
    from storefront.cart.store import CartStore

    return CartStore(storage).load()


@pytest.fixture()
def fake_gateway():
    from storefront.gateway.fake_adapter import FakeOrderGateway

    return FakeOrderGateway()


@pytest.fixture()
def make_product():
    from storefront.cart.items import CatalogProduct

    def _make(product_id="prod-001", unit_price=400, available_stock=5, **overrides):
        values = {
            "product_id": product_id,
            "name": f"Product {product_id}",
            "localized_name": "دستکاری",
            "unit_price": unit_price,
            "available_stock": available_stock,
            "images": [f"https://cdn.example.com/{product_id}.jpg"],
        }
        values.update(overrides)
        return CatalogProduct(**values)

    return _make


@pytest.fixture()
def shipping_fields():
    return {
        "name": "Ayesha Khan",
        "email": "ayesha@example.com",
        "phone": "+92 300 1234567",
        "address": "House 12, Street 4, Mohalla Qasimabad",
        "city": "Multan",
        "postal_code": "60000",
        "notes": "Call before delivery",
    }


@pytest.fixture()
def card_fields():
    return {
        "card_number": "4242 4242 4242 4242",
        "expiry_date": "12/29",
        "cvv": "123",
        "name_on_card": "Ayesha Khan",
    }
