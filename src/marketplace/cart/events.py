"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class CartLineAdded:
    """An item was added to the cart, or its quantity merged into an existing line."""

    __version__ = 1

    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity_added = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartLineQuantityChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartLineRemoved:
    """The user took an item out of the cart."""

    __version__ = 1

    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.event(part_of="Cart")
class CartLinesPurged:
    """Lines that current stock can no longer satisfy were dropped from the cart."""

    __version__ = 1

    user_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {item_id, quantity}


@marketplace.event(part_of="Cart")
class CartCheckedOut:
    __version__ = 1

    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {item_id, quantity}
