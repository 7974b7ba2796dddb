"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state. State tracks ids and
session tokens returned by the API so follow-up requests can reference them.
The only shared state is the pool of contended items in the scenarios module.
"""

from dataclasses import dataclass, field


@dataclass
class SellerState:
    """Tracks a simulated seller and what they have listed."""

    user_id: str | None = None
    session_id: str | None = None
    item_ids: list[str] = field(default_factory=list)

    @property
    def headers(self) -> dict:
        return {"session_id": self.session_id or ""}


@dataclass
class ShopperState:
    """Tracks a simulated buyer through browse, cart and checkout."""

    user_id: str | None = None
    session_id: str | None = None
    address_id: str | None = None
    cart_item_ids: list[str] = field(default_factory=list)
    orders_placed: int = 0
    checkouts_rejected: int = 0

    @property
    def headers(self) -> dict:
        return {"session_id": self.session_id or ""}
