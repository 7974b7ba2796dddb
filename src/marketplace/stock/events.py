"""Domain events for the StockRecord aggregate."""

from protean.fields import Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="StockRecord")
class StockLevelSet:
    """The seller set the available quantity of an item."""

    __version__ = 1

    item_id = Identifier(required=True)
    previous_quantity = Integer()  # None when the item was untracked
    new_quantity = Integer(required=True)


@marketplace.event(part_of="StockRecord")
class StockDecremented:
    """Stock was consumed by a placed order."""

    __version__ = 1

    item_id = Identifier(required=True)
    amount = Integer(required=True)
    remaining = Integer(required=True)
