import pytest
from protean.integrations.pytest import DomainFixture

from notifications.channel.fake_email import FakeEmailAdapter
from notifications.notifier import EmailOrderNotifier
from ordering.address.address import NewAddress
from ordering.cart.guest_store.memory_adapter import InMemoryGuestCartStore
from ordering.catalogue.product import Product, ProductVariant
from ordering.services import build_services
from payments.gateway.fake_adapter import FakeGateway

STOREFRONT_URL = "https://furnishop.test"


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db, setup_db

    bed = DomainFixture(ordering)
    bed.setup()
    # No-op on the memory providers; creates tables under --env production
    setup_db(ordering)
    yield bed
    drop_db(ordering)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def fake_gateway():
    return FakeGateway()


@pytest.fixture()
def fake_email():
    return FakeEmailAdapter()


@pytest.fixture()
def guest_store():
    return InMemoryGuestCartStore()


@pytest.fixture()
def services(fake_gateway, fake_email, guest_store):
    return build_services(
        gateway=fake_gateway,
        guest_store=guest_store,
        notifier=EmailOrderNotifier(fake_email, storefront_url=STOREFRONT_URL),
        storefront_url=STOREFRONT_URL,
    )


@pytest.fixture()
def make_variant():
    """Create a product with one variant and return the variant id."""
    from protean import current_domain

    def _make(
        product_name="Oslo Sofa",
        base_price=12000.0,
        price_adjustment=0.0,
        stock=10,
        variant_name="Grey",
        category_id=None,
        is_active=True,
    ):
        product = Product(name=product_name, base_price=base_price, category_id=category_id)
        current_domain.repository_for(Product).add(product)
        variant = ProductVariant(
            product_id=product.id,
            name=variant_name,
            price_adjustment=price_adjustment,
            stock=stock,
            is_active=is_active,
        )
        current_domain.repository_for(ProductVariant).add(variant)
        return str(variant.id)

    return _make


def cairo_address(**overrides) -> NewAddress:
    values = {
        "full_name": "Mona Adel Hassan",
        "phone": "01000000000",
        "street": "12 Nile Corniche",
        "building": "7",
        "floor": "3",
        "apartment": "12",
        "city": "Cairo",
        "governorate": "Cairo",
    }
    values.update(overrides)
    return NewAddress(**values)


@pytest.fixture()
def new_address():
    return cairo_address
