"""Stock Ledger: authoritative available quantity per item.

Stock Model:
    no record:     the item is untracked and any quantity can be bought
    quantity == 0: out of stock
    quantity > 0:  that many units can still be sold

The quantity never goes negative. It is changed only by the item's owner
(``set_quantity``) or by checkout (``decrement``), and checkout decrements in
the same unit of work as its validating read.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, Integer

from marketplace.domain import marketplace
from marketplace.errors import InsufficientStock
from marketplace.stock.events import StockDecremented, StockLevelSet


def stock_allows(available: int | None, quantity: int) -> bool:
    """The stock validation predicate shared by cart mutations and checkout."""
    return available is None or quantity <= available


@marketplace.aggregate
class StockRecord:
    item_id = Identifier(identifier=True)
    quantity = Integer(required=True, min_value=0)
    updated_at = DateTime()

    @classmethod
    def track(cls, item_id, quantity):
        record = cls(item_id=str(item_id), quantity=quantity, updated_at=datetime.now(UTC))
        record.raise_(
            StockLevelSet(
                item_id=str(item_id),
                previous_quantity=None,
                new_quantity=quantity,
            )
        )
        return record

    def set_level(self, quantity):
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Stock quantity cannot be negative"]})

        previous = self.quantity
        self.quantity = quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockLevelSet(
                item_id=str(self.item_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def take(self, amount):
        if amount > self.quantity:
            raise InsufficientStock(self.item_id, requested=amount, available=self.quantity)

        self.quantity -= amount
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockDecremented(
                item_id=str(self.item_id),
                amount=amount,
                remaining=self.quantity,
            )
        )


@marketplace.repository(part_of=StockRecord)
class StockLedger:
    """Read/write interface over StockRecord rows within the current unit of work."""

    def find(self, item_id) -> StockRecord | None:
        try:
            return self.get(str(item_id))
        except ObjectNotFoundError:
            return None

    def get_quantity(self, item_id) -> int | None:
        record = self.find(item_id)
        return record.quantity if record else None

    def can_supply(self, item_id, quantity) -> bool:
        return stock_allows(self.get_quantity(item_id), quantity)

    def set_quantity(self, item, quantity, actor_id) -> StockRecord:
        """Upsert the item's stock level. Only the item's owner may do this."""
        item.ensure_owner(actor_id)
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Stock quantity cannot be negative"]})

        record = self.find(item.id)
        if record is None:
            record = StockRecord.track(item.id, quantity)
        else:
            record.set_level(quantity)
        self.add(record)
        return record

    def decrement(self, item_id, amount) -> StockRecord | None:
        """Consume stock for an order. Untracked items stay untracked."""
        record = self.find(item_id)
        if record is None:
            return None

        record.take(amount)
        self.add(record)
        return record

    def retire(self, item_id):
        """Pin a delisted item at zero so cart lines still holding it become unsatisfiable."""
        record = self.find(item_id)
        if record is None:
            record = StockRecord.track(item_id, 0)
        elif record.quantity:
            record.set_level(0)
        self.add(record)
