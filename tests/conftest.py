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
    """Initialise the ordering domain once and keep its context active for the whole run."""
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from ordering.domain import ordering

    ordering.init()
    ordering.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Mark each test by the layer directory it lives in."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from ordering.domain import ordering
    from ordering.utils.db import drop_db, setup_db

    setup_db(ordering)

    yield

    drop_db(ordering)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Reset stores, adapters and in-process counters after every test."""
    yield

    from ordering.catalogue import reset_catalogue
    from ordering.notification import reset_notifier
    from ordering.order.identity import reset_identity_generator
    from ordering.order.locks import reset_order_locks
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()

    reset_catalogue()
    reset_notifier()
    reset_identity_generator()
    reset_order_locks()


@pytest.fixture()
def catalogue():
    """In-memory catalogue seeded with a couple of products."""
    from ordering.catalogue import get_catalogue

    catalogue = get_catalogue()
    catalogue.add_product("prod-001", "Silk Scarf", 100.0, sku="SCF-001", images=["scarf.jpg"], stock=20)
    catalogue.add_product("prod-002", "Cotton Tote", 250.0, discount_price=199.0, sku="TOT-002", stock=5)
    return catalogue


@pytest.fixture()
def ordering_app():
    """The ordering API as served in production."""
    from ordering.api import create_app

    return create_app()
