"""Order Committer: turns a user's cart into an order in one unit of work.

State Machine:
    VALIDATING → RECONCILING → COMMITTING → {COMMITTED | ABORTED}

    VALIDATING   every cart line is checked against current stock
    RECONCILING  the cart is drained and stock is decremented line by line
    COMMITTING   the order is written and the unit of work commits
    COMMITTED    terminal; the result carries the new order id and date
    ABORTED      terminal; nothing is ordered and no stock moves

A checkout aborts in one of two ways. If validation finds offending lines,
they are purged and that cleanup alone is committed; the result lists the
removed lines. Any failure while reconciling or committing raises
``CheckoutRejected`` carrying the cart as it was before the attempt, and
raising out of the handler rolls the whole unit of work back, so the cart and
stock are left untouched.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.events import CartCheckedOut
from marketplace.domain import marketplace
from marketplace.errors import CheckoutRejected, InsufficientStock, Unauthorized
from marketplace.order.order import Order
from marketplace.stock.stock import StockRecord
from marketplace.user.user import User

logger = structlog.get_logger(__name__)


@dataclass
class CheckoutResult:
    order_id: str | None = None
    order_date: datetime | None = None
    removed: list[dict] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.order_id is not None


@marketplace.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        try:
            user = current_domain.repository_for(User).get(command.user_id)
        except ObjectNotFoundError as exc:
            raise Unauthorized("Unknown user") from exc

        carts = current_domain.repository_for(Cart)
        ledger = current_domain.repository_for(StockRecord)
        cart = carts.for_user(user.id)
        snapshot = [line.to_dict() for line in cart.list_lines()]

        # Validating
        offending = cart.unsatisfiable_lines(ledger)
        if offending:
            removed = cart.purge(offending)
            carts.add(cart)
            logger.info(
                "Checkout rejected, purged offending lines",
                user_id=str(user.id),
                removed=removed,
            )
            return CheckoutResult(removed=removed)

        if not snapshot:
            raise CheckoutRejected("Cart is empty", snapshot)

        # Reconciling
        consumed = cart.drain()
        try:
            for line in consumed:
                ledger.decrement(line["item_id"], line["quantity"])
        except InsufficientStock as exc:
            raise CheckoutRejected(exc.detail, snapshot) from exc

        if user.find_address(command.address_id) is None:
            raise CheckoutRejected(f"Address {command.address_id} does not belong to user", snapshot)

        # Committing
        order = Order.place(user.id, command.address_id, consumed)
        current_domain.repository_for(Order).add(order)

        cart.raise_(
            CartCheckedOut(
                user_id=str(user.id),
                order_id=str(order.id),
                lines=json.dumps(consumed),
            )
        )
        carts.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=str(user.id),
            line_count=len(consumed),
        )
        return CheckoutResult(order_id=str(order.id), order_date=order.order_date)
