from marketplace.errors import (
    CheckoutRejected,
    Conflict,
    Forbidden,
    InsufficientStock,
    MarketplaceError,
    NotFound,
    Unauthorized,
)


class TestErrorTaxonomy:
    def test_status_codes(self):
        assert Unauthorized("x").http_status == 401
        assert Forbidden("x").http_status == 403
        assert NotFound("x").http_status == 404
        assert Conflict("x").http_status == 409
        assert MarketplaceError("x").http_status == 500

    def test_stock_and_checkout_errors_are_conflicts(self):
        assert isinstance(InsufficientStock("item-1", requested=2, available=1), Conflict)
        assert isinstance(CheckoutRejected("empty"), Conflict)

    def test_body_shape(self):
        assert Forbidden("Cannot buy own item").to_dict() == {
            "status": "forbidden",
            "error": "Cannot buy own item",
        }

    def test_checkout_rejection_carries_lines(self):
        lines = [{"item_id": "item-1", "quantity": 2}]
        body = CheckoutRejected("Stock changed", lines).to_dict()
        assert body == {"status": "conflict", "error": "Stock changed", "items": lines}
