import pytest
from marketplace.errors import InsufficientStock
from marketplace.stock.events import StockDecremented, StockLevelSet
from marketplace.stock.stock import StockRecord, stock_allows
from protean.exceptions import ValidationError


class TestStockPredicate:
    def test_untracked_item_allows_any_quantity(self):
        assert stock_allows(None, 10_000) is True

    def test_quantity_within_stock_is_allowed(self):
        assert stock_allows(5, 5) is True

    def test_quantity_above_stock_is_refused(self):
        assert stock_allows(5, 6) is False

    def test_zero_stock_refuses_everything(self):
        assert stock_allows(0, 1) is False


class TestStockRecord:
    def test_track_sets_initial_level(self):
        record = StockRecord.track("item-1", 7)
        assert record.item_id == "item-1"
        assert record.quantity == 7

    def test_track_raises_stock_level_set(self):
        record = StockRecord.track("item-1", 7)
        event = record._events[-1]
        assert isinstance(event, StockLevelSet)
        assert event.previous_quantity is None
        assert event.new_quantity == 7

    def test_set_level_records_previous_quantity(self):
        record = StockRecord.track("item-1", 7)
        record.set_level(3)
        assert record.quantity == 3
        assert record._events[-1].previous_quantity == 7

    def test_negative_level_is_rejected(self):
        record = StockRecord.track("item-1", 7)
        with pytest.raises(ValidationError):
            record.set_level(-1)
        assert record.quantity == 7

    def test_take_decrements(self):
        record = StockRecord.track("item-1", 7)
        record.take(2)
        assert record.quantity == 5
        event = record._events[-1]
        assert isinstance(event, StockDecremented)
        assert event.remaining == 5

    def test_take_everything_leaves_zero(self):
        record = StockRecord.track("item-1", 2)
        record.take(2)
        assert record.quantity == 0

    def test_take_more_than_available_is_refused(self):
        record = StockRecord.track("item-1", 1)
        with pytest.raises(InsufficientStock) as exc:
            record.take(2)
        assert exc.value.available == 1
        assert exc.value.requested == 2
        assert record.quantity == 1
