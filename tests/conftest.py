import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Set the environment before any storefront module reads it."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests(monkeypatch):
    """Keep every test on in-memory adapters and fresh singletons."""
    monkeypatch.setenv("CART_STORAGE", "memory")
    monkeypatch.setenv("ORDER_GATEWAY", "fake")

    from storefront.api.routes import close_checkout
    from storefront.cart.store import reset_cart_store
    from storefront.config import reset_settings
    from storefront.gateway import reset_gateway
    from storefront.storage import reset_storage

    reset_settings()

    yield

    close_checkout()
    reset_cart_store()
    reset_gateway()
    reset_storage()
    reset_settings()
