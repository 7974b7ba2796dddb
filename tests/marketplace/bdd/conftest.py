"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart
from marketplace.errors import MarketplaceError
from marketplace.order.creation import PlaceOrder
from marketplace.stock.management import SetStock
from marketplace.stock.stock import StockRecord
from protean import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scenario state
# ---------------------------------------------------------------------------
@pytest.fixture()
def users():
    """username -> {"user_id": ..., "address_id": ...}"""
    return {}


@pytest.fixture()
def items():
    """title -> item id"""
    return {}


@pytest.fixture()
def outcome():
    """Results and captured errors of When steps."""
    return {"orders": [], "rejections": [], "error": None, "update": None, "validation": None}


@pytest.fixture()
def attempt(outcome):
    """Process a command, recording a marketplace error instead of raising it."""

    def _attempt(command):
        outcome["error"] = None
        try:
            return current_domain.process(command, asynchronous=False)
        except MarketplaceError as exc:
            outcome["error"] = exc
            return None

    return _attempt


@pytest.fixture()
def checkout(users, outcome):
    def _checkout(username):
        result = current_domain.process(
            PlaceOrder(user_id=users[username]["user_id"], address_id=users[username]["address_id"]),
            asynchronous=False,
        )
        if result.created:
            outcome["orders"].append(result.order_id)
        else:
            outcome["rejections"].append(result.removed)
        return result

    return _checkout


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a seller "{owner}" and a buyer "{username}" with a delivery address'))
def seller_and_buyer(sign_up, add_address, users, owner, username):
    users[owner] = {"user_id": sign_up(owner)["user_id"]}
    buyer_id = sign_up(username)["user_id"]
    users[username] = {"user_id": buyer_id, "address_id": add_address(buyer_id)}


@given(parsers.cfparse('a buyer "{username}" with a delivery address'))
def another_buyer(sign_up, add_address, users, username):
    buyer_id = sign_up(username)["user_id"]
    users[username] = {"user_id": buyer_id, "address_id": add_address(buyer_id)}


@given(parsers.cfparse('"{owner}" lists "{title}" with {stock:d} in stock'))
def seller_lists(list_item, users, items, owner, title, stock):
    items[title] = list_item(users[owner]["user_id"], title=title, stock=stock)


@given(parsers.cfparse('"{username}" has {quantity:d} of "{title}" in the cart'))
def cart_holds(users, items, username, quantity, title):
    current_domain.process(
        AddToCart(user_id=users[username]["user_id"], item_id=items[title], quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('"{owner}" lowers the stock of "{title}" to {stock:d}'))
def lower_stock(users, items, owner, title, stock):
    current_domain.process(
        SetStock(item_id=items[title], actor_id=users[owner]["user_id"], quantity=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('"{username}" checks out'))
def has_checked_out(checkout, username):
    checkout(username)


# ---------------------------------------------------------------------------
# Then steps shared by features
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{title}" has {stock:d} in stock'))
def stock_level(items, title, stock):
    assert current_domain.repository_for(StockRecord).get_quantity(items[title]) == stock


@then(parsers.cfparse('the cart of "{username}" is empty'))
def cart_is_empty(users, username):
    cart = current_domain.repository_for(Cart).for_user(users[username]["user_id"])
    assert len(cart.lines) == 0
