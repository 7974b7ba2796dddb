"""Cart aggregate: the per-user Cart Store, drained into an Order at checkout.

One cart per user, identified by the user id. A cart holds at most one line
per item, every line has a positive quantity, and a user never holds a line
for an item they sell themselves.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from marketplace.cart.events import (
    CartLineAdded,
    CartLineQuantityChanged,
    CartLineRemoved,
    CartLinesPurged,
)
from marketplace.domain import marketplace
from marketplace.errors import Forbidden, InsufficientStock
from marketplace.stock.stock import stock_allows


class CartUpdate(Enum):
    UPDATED = "updated"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@marketplace.entity(part_of="Cart")
class CartLine:
    item_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    def to_dict(self):
        return {"item_id": str(self.item_id), "quantity": self.quantity}


@marketplace.aggregate
class Cart:
    user_id = Identifier(identifier=True)
    lines = HasMany(CartLine)
    updated_at = DateTime()

    @invariant.post
    def cannot_hold_own_items(self):
        for line in self.lines:
            if str(line.seller_id) == str(self.user_id):
                raise ValidationError({"lines": [f"Cannot hold own item {line.item_id} in cart"]})

    @classmethod
    def open(cls, user_id):
        return cls(user_id=str(user_id), updated_at=datetime.now(UTC))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, item_id):
        return next((line for line in self.lines if str(line.item_id) == str(item_id)), None)

    def list_lines(self):
        """Lines in the order they were first added."""
        return sorted(self.lines, key=lambda line: line.added_at)

    def unsatisfiable_lines(self, ledger):
        """Lines whose quantity current stock can no longer cover."""
        return [line for line in self.list_lines() if not ledger.can_supply(line.item_id, line.quantity)]

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _ensure_not_own(self, seller_id, item_id):
        if str(seller_id) == str(self.user_id):
            raise Forbidden(f"Cannot buy own item {item_id}")

    def add_or_merge(self, item, quantity, available):
        """Add ``quantity`` of ``item``; an existing line grows by that amount.

        ``available`` is the item's current stock (None when untracked). The
        stock check is made against the merged quantity.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        self._ensure_not_own(item.owner_id, item.id)

        existing = self.line_for(item.id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if not stock_allows(available, new_quantity):
            raise InsufficientStock(item.id, requested=new_quantity, available=available)

        now = datetime.now(UTC)
        if existing:
            existing.quantity = new_quantity
        else:
            self.add_lines(
                CartLine(
                    item_id=str(item.id),
                    seller_id=str(item.owner_id),
                    quantity=quantity,
                    added_at=now,
                )
            )
        self.updated_at = now

        self.raise_(
            CartLineAdded(
                user_id=str(self.user_id),
                item_id=str(item.id),
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )

    def set_quantity(self, item_id, quantity, available=None, seller_id=None) -> CartUpdate:
        """Overwrite a line's quantity; zero or less removes the line.

        A positive quantity that stock cannot cover leaves the line untouched
        and reports UNCHANGED, as does updating an item that is not in the cart.
        """
        if quantity <= 0:
            return self.remove(item_id)

        if seller_id is not None:
            self._ensure_not_own(seller_id, item_id)

        line = self.line_for(item_id)
        if line is None or not stock_allows(available, quantity):
            return CartUpdate.UNCHANGED

        previous = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineQuantityChanged(
                user_id=str(self.user_id),
                item_id=str(item_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )
        return CartUpdate.UPDATED

    def remove(self, item_id) -> CartUpdate:
        line = self.line_for(item_id)
        if line is not None:
            self.remove_lines(line)
            self.updated_at = datetime.now(UTC)
            self.raise_(CartLineRemoved(user_id=str(self.user_id), item_id=str(item_id)))
        return CartUpdate.REMOVED

    def purge(self, lines) -> list[dict]:
        """Drop the given lines and return what was dropped."""
        removed = [line.to_dict() for line in lines]
        if not removed:
            return removed

        for line in lines:
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLinesPurged(
                user_id=str(self.user_id),
                lines=json.dumps(removed),
            )
        )
        return removed

    def drain(self) -> list[dict]:
        """Empty the cart, returning every consumed line with its seller."""
        consumed = [
            {
                "item_id": str(line.item_id),
                "seller_id": str(line.seller_id),
                "quantity": line.quantity,
            }
            for line in self.list_lines()
        ]
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)
        return consumed


@marketplace.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart:
        """The user's cart, or a fresh empty one if they never had one."""
        try:
            return self.get(str(user_id))
        except ObjectNotFoundError:
            return Cart.open(user_id)
