"""Item rating: command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.item.item import Item


@marketplace.command(part_of="Item")
class RateItem:
    item_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    content = Text()


@marketplace.command_handler(part_of=Item)
class RateItemHandler:
    @handle(RateItem)
    def rate_item(self, command):
        repo = current_domain.repository_for(Item)
        item = repo.get(command.item_id)
        item.rate(
            user_id=command.user_id,
            rating=command.rating,
            content=command.content,
        )
        repo.add(item)
        return item.rating
