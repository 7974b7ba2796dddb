"""Domain events for the Item aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Item")
class ItemListed:
    """A seller put a new item up for sale."""

    __version__ = 1

    item_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    title = String(required=True)
    price = Float(required=True)
    listed_at = DateTime(required=True)


@marketplace.event(part_of="Item")
class ItemDetailsUpdated:
    __version__ = 1

    item_id = Identifier(required=True)
    title = String(required=True)
    price = Float(required=True)


@marketplace.event(part_of="Item")
class ItemDelisted:
    __version__ = 1

    item_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    delisted_at = DateTime(required=True)


@marketplace.event(part_of="Item")
class ItemRated:
    """A buyer rated an item; ``average_rating`` is the rating after this one."""

    __version__ = 1

    item_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    average_rating = Float(required=True)
