"""Seller-side dispatch of order lines."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import NotFound
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class MarkDispatched:
    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class DispatchHandler:
    @handle(MarkDispatched)
    def mark_dispatched(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Order {command.order_id} not found") from exc

        line = order.mark_dispatched(command.item_id, command.actor_id)
        repo.add(order)

        logger.info(
            "Order line dispatched",
            order_id=str(order.id),
            item_id=str(line.item_id),
            seller_id=str(command.actor_id),
        )
        return line.dispatched_at
