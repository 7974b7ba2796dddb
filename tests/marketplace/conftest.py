"""Domain fixture and builders shared by every marketplace test layer."""

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()

    from marketplace.utils.db import drop_db, setup_db

    setup_db(marketplace)
    yield bed
    drop_db(marketplace)

    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Builders: each goes through the same command path the API uses
# ---------------------------------------------------------------------------
@pytest.fixture()
def sign_up():
    from marketplace.user.registration import SignUp
    from protean import current_domain

    def _sign_up(username, password="s3cret-pass"):
        command = SignUp(username=username, email=f"{username}@example.com", password=password)
        return current_domain.process(command, asynchronous=False)

    return _sign_up


@pytest.fixture()
def list_item():
    from marketplace.item.listing import ListItem
    from marketplace.stock.management import SetStock
    from protean import current_domain

    def _list_item(owner_id, title="Vintage lamp", price=25.0, stock=None):
        item_id = current_domain.process(
            ListItem(owner_id=owner_id, title=title, price=price),
            asynchronous=False,
        )
        if stock is not None:
            current_domain.process(
                SetStock(item_id=item_id, actor_id=owner_id, quantity=stock),
                asynchronous=False,
            )
        return item_id

    return _list_item


@pytest.fixture()
def add_address():
    from marketplace.user.addresses import AddAddress
    from protean import current_domain

    def _add_address(user_id, street="1 Market Street"):
        command = AddAddress(
            user_id=user_id,
            street=street,
            city="Springfield",
            postal_code="62701",
            country="US",
        )
        return current_domain.process(command, asynchronous=False)

    return _add_address


@pytest.fixture()
def seller(sign_up):
    return sign_up("seller")["user_id"]


@pytest.fixture()
def buyer(sign_up):
    return sign_up("buyer")["user_id"]
