"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A cart was drained into a new order and stock was consumed."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {item_id, seller_id, quantity}
    order_date = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderLineDispatched:
    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True)
    dispatched_at = DateTime(required=True)
