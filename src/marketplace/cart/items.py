"""Cart line management: commands and handler.

Every mutation re-reads the item and its stock inside the handler's unit of
work, so the ownership and stock checks run against current state.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.item.item import Item
from marketplace.stock.stock import StockRecord


@marketplace.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class SetCartQuantity:
    """Overwrite a line's quantity. Zero or a negative value removes the line."""

    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command_handler(part_of=Cart)
class ManageCartLinesHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        item = current_domain.repository_for(Item).get(command.item_id)
        available = current_domain.repository_for(StockRecord).get_quantity(item.id)

        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        cart.add_or_merge(item, command.quantity, available)
        repo.add(cart)

        return cart.line_for(item.id).quantity

    @handle(SetCartQuantity)
    def set_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)

        if command.quantity <= 0:
            outcome = cart.remove(command.item_id)
        else:
            try:
                item = current_domain.repository_for(Item).get(command.item_id)
            except ObjectNotFoundError:
                # Delisted items can only be removed
                outcome = cart.set_quantity(command.item_id, command.quantity, available=0)
            else:
                available = current_domain.repository_for(StockRecord).get_quantity(item.id)
                outcome = cart.set_quantity(
                    item.id,
                    command.quantity,
                    available=available,
                    seller_id=item.owner_id,
                )

        repo.add(cart)
        return outcome.value
