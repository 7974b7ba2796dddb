"""Item listing: commands and handler for listing, editing and delisting."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.item.item import Item
from marketplace.stock.stock import StockRecord

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Item")
class ListItem:
    owner_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    content = Text()
    price = Float(required=True, min_value=0.0)
    media_refs = Text()  # JSON array of object-store keys


@marketplace.command(part_of="Item")
class EditItem:
    item_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    title = String(max_length=200)
    content = Text()
    price = Float(min_value=0.0)


@marketplace.command(part_of="Item")
class DelistItem:
    item_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@marketplace.command_handler(part_of=Item)
class ListingHandler:
    @handle(ListItem)
    def list_item(self, command):
        media_refs = json.loads(command.media_refs) if command.media_refs else []
        item = Item.list_for_sale(
            owner_id=command.owner_id,
            title=command.title,
            content=command.content,
            price=command.price,
            media_refs=media_refs,
        )
        current_domain.repository_for(Item).add(item)
        return str(item.id)

    @handle(EditItem)
    def edit_item(self, command):
        repo = current_domain.repository_for(Item)
        item = repo.get(command.item_id)
        item.update_details(
            actor_id=command.actor_id,
            title=command.title,
            content=command.content,
            price=command.price,
        )
        repo.add(item)

    @handle(DelistItem)
    def delist_item(self, command):
        repo = current_domain.repository_for(Item)
        item = repo.get(command.item_id)
        item.delist(actor_id=command.actor_id)

        current_domain.repository_for(StockRecord).retire(item.id)
        repo.add(item)

        logger.info("Item delisted", item_id=str(item.id), owner_id=str(item.owner_id))
