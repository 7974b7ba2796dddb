"""Checkout Validator: purge cart lines that current stock cannot satisfy.

Offending lines are deleted, not just reported, so the cart converges on
what can actually be bought. Stock is only read here; no order is created.
Running it twice in a row is a no-op the second time.
"""

from dataclasses import dataclass, field

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.stock.stock import StockRecord

logger = structlog.get_logger(__name__)


@dataclass
class CartValidation:
    removed: list[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.removed


@marketplace.command(part_of="Cart")
class ValidateCart:
    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class ValidateCartHandler:
    @handle(ValidateCart)
    def validate_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        ledger = current_domain.repository_for(StockRecord)

        removed = cart.purge(cart.unsatisfiable_lines(ledger))
        if removed:
            repo.add(cart)
            logger.info("Purged unsatisfiable cart lines", user_id=str(command.user_id), lines=removed)

        return CartValidation(removed=removed)
