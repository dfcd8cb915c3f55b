import pytest
from protean.integrations.pytest import DomainFixture

from rentals.notification import get_notification_sink, reset_notification_sink
from rentals.stock import get_stock_store, reset_stock_store

DEFAULT_STOCK = {"chair-01": 100, "table-02": 20, "tent-03": 2}


@pytest.fixture(scope="session")
def rentals_bed():
    from rentals.domain import rentals

    bed = DomainFixture(rentals)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(rentals_bed):
    with rentals_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _collaborators(monkeypatch):
    """Fresh stock levels and an empty fake sink for every test."""
    monkeypatch.setenv("NOTIFICATION_SINK", "fake")
    monkeypatch.delenv("RENTALS_REQUIRE_APPROVAL", raising=False)
    reset_stock_store()
    reset_notification_sink()
    get_stock_store().reset(DEFAULT_STOCK)
    yield
    reset_stock_store()
    reset_notification_sink()


@pytest.fixture()
def stock():
    return get_stock_store()


@pytest.fixture()
def sink():
    return get_notification_sink()
