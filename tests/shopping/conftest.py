from datetime import UTC, datetime, timedelta

import pytest
from protean.integrations.pytest import DomainFixture

from shopping.catalogue import reset_catalogue, set_catalogue
from shopping.catalogue.fake_adapter import InMemoryProductCatalogue
from shopping.catalogue.port import ProductSnapshot
from shopping.promotions import reset_promotion_catalog, set_promotion_catalog
from shopping.promotions.catalog import StaticPromotionCatalog

ACCOUNT_ID = "cust-001"
SESSION_TOKEN = "sess-guest-0001"


class FakeClock:
    """Settable UTC clock installed as the shopping domain's clock."""

    def __init__(self, now=None):
        self.current = now or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)
        return self.current


def make_products():
    return [
        ProductSnapshot(
            id="brake-pads",
            name="Brake Pads",
            price=300_000,
            stock=10,
            thumbnail="https://cdn.example.com/brake-pads.jpg",
            category="Brakes",
        ),
        ProductSnapshot(
            id="engine-oil",
            name="Engine Oil 5W-30",
            price=150_000,
            discount_price=120_000,
            stock=50,
            category="Oil",
        ),
        ProductSnapshot(id="oil-filter", name="Oil Filter", price=80_000, stock=3, category="Filters"),
        ProductSnapshot(id="wiper", name="Wiper Blade", price=40_000, stock=100, category="Accessories"),
    ]


@pytest.fixture(scope="session")
def shopping_bed():
    from shopping.domain import shopping

    bed = DomainFixture(shopping)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(shopping_bed):
    with shopping_bed.domain_context():
        yield


@pytest.fixture()
def clock(shopping_bed):
    fake = FakeClock()
    previous, shopping_bed.domain.clock = shopping_bed.domain.clock, fake
    yield fake
    shopping_bed.domain.clock = previous


@pytest.fixture()
def products():
    catalogue = InMemoryProductCatalogue(make_products())
    set_catalogue(catalogue)
    yield catalogue
    reset_catalogue()


@pytest.fixture()
def promotions():
    catalog = StaticPromotionCatalog()
    set_promotion_catalog(catalog)
    yield catalog
    reset_promotion_catalog()
