"""Seller-side stock management: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.item.item import Item
from marketplace.stock.stock import StockRecord

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="StockRecord")
class SetStock:
    """Set the available quantity of an item. Only its owner may do this."""

    item_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)


@marketplace.command_handler(part_of=StockRecord)
class StockHandler:
    @handle(SetStock)
    def set_stock(self, command):
        item = current_domain.repository_for(Item).get(command.item_id)
        ledger = current_domain.repository_for(StockRecord)

        record = ledger.set_quantity(item, command.quantity, actor_id=command.actor_id)

        logger.info("Stock level set", item_id=str(item.id), quantity=record.quantity)
        return record.quantity
