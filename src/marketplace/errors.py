"""Failure taxonomy shared by every marketplace operation.

Each error carries a stable machine-readable ``code`` and the HTTP status it
maps to. Field-level validation problems keep using Protean's
``ValidationError``; these classes cover identity, ownership, existence and
stock conflicts.
"""


class MarketplaceError(Exception):
    code = "internal_error"
    http_status = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"status": self.code, "error": self.detail}


class Unauthorized(MarketplaceError):
    """No identity, or the session token is unknown or expired."""

    code = "unauthorized"
    http_status = 401


class Forbidden(MarketplaceError):
    """The actor is not allowed to touch this entity (self-purchase, foreign item)."""

    code = "forbidden"
    http_status = 403


class NotFound(MarketplaceError):
    code = "not_found"
    http_status = 404


class Conflict(MarketplaceError):
    """The request is well-formed but collides with current state."""

    code = "conflict"
    http_status = 409


class InsufficientStock(Conflict):
    def __init__(self, item_id, requested: int, available: int):
        super().__init__(f"Item {item_id} has {available} in stock, {requested} requested")
        self.item_id = str(item_id)
        self.requested = requested
        self.available = available


class CheckoutRejected(Conflict):
    """Checkout could not produce an order; ``lines`` is the cart as the caller should see it."""

    def __init__(self, detail: str, lines=None):
        super().__init__(detail)
        self.lines = list(lines or [])

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["items"] = self.lines
        return body
