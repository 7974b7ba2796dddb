"""Order aggregate and its OrderLines.

An order is written once, at checkout, and never edited afterwards. The only
change an order line ever sees is its seller flipping ``dispatched`` from
False to True, exactly once.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer

from marketplace.domain import marketplace
from marketplace.errors import Forbidden, NotFound
from marketplace.order.events import OrderLineDispatched, OrderPlaced


@marketplace.entity(part_of="Order")
class OrderLine:
    item_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    dispatched = Boolean(default=False)
    dispatched_at = DateTime()


@marketplace.aggregate
class Order:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    order_date = DateTime(required=True)
    lines = HasMany(OrderLine)

    @invariant.post
    def order_must_have_lines(self):
        if not self.lines:
            raise ValidationError({"lines": ["Order must contain at least one line"]})

    @classmethod
    def place(cls, user_id, address_id, consumed_lines):
        """Build an order from drained cart lines, one OrderLine per cart line."""
        order = cls(
            user_id=str(user_id),
            address_id=str(address_id),
            order_date=datetime.now(UTC),
            lines=[
                OrderLine(
                    item_id=line["item_id"],
                    seller_id=line["seller_id"],
                    quantity=line["quantity"],
                )
                for line in consumed_lines
            ],
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                address_id=str(address_id),
                lines=json.dumps(consumed_lines),
                order_date=order.order_date,
            )
        )
        return order

    def line_for(self, item_id):
        return next((line for line in self.lines if str(line.item_id) == str(item_id)), None)

    def is_visible_to(self, user_id) -> bool:
        """Buyers see their orders; sellers see orders containing their items."""
        if str(self.user_id) == str(user_id):
            return True
        return any(str(line.seller_id) == str(user_id) for line in self.lines)

    def mark_dispatched(self, item_id, actor_id):
        line = self.line_for(item_id)
        if line is None:
            raise NotFound(f"Item {item_id} is not part of order {self.id}")
        if str(line.seller_id) != str(actor_id):
            raise Forbidden(f"Only the seller can dispatch item {item_id}")
        if line.dispatched:
            raise Forbidden(f"Item {item_id} of order {self.id} was already dispatched")

        line.dispatched = True
        line.dispatched_at = datetime.now(UTC)

        self.raise_(
            OrderLineDispatched(
                order_id=str(self.id),
                item_id=str(item_id),
                seller_id=str(actor_id),
                quantity=line.quantity,
                dispatched_at=line.dispatched_at,
            )
        )
        return line


@marketplace.repository(part_of=Order)
class OrderRepository:
    def placed_by(self, user_id) -> list:
        return (
            self._dao.query.filter(user_id=str(user_id)).order_by("-order_date").all().items
        )
