"""Item aggregate and its Ratings. An Item is something a user has listed for sale."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.errors import Conflict, Forbidden
from marketplace.item.events import ItemDelisted, ItemDetailsUpdated, ItemListed, ItemRated


class ItemStatus(Enum):
    LISTED = "Listed"
    DELISTED = "Delisted"


@marketplace.entity(part_of="Item")
class Rating:
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    content = Text()
    rated_at = DateTime()


@marketplace.aggregate
class Item:
    """A listing owned by exactly one user.

    Stock is not held here; the StockRecord for the item is the source of
    truth for availability. Delisting is terminal: the row is kept with
    status Delisted and the repository no longer returns it.
    """

    owner_id = Identifier(required=True)
    status = String(choices=ItemStatus, default=ItemStatus.LISTED.value)
    title = String(required=True, max_length=200)
    content = Text()
    price = Float(required=True, min_value=0.0)
    media_refs = Text()  # JSON array of opaque object-store keys
    ratings = HasMany(Rating)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def list_for_sale(cls, owner_id, title, price, content=None, media_refs=None):
        now = datetime.now(UTC)
        item = cls(
            owner_id=str(owner_id),
            title=title,
            content=content,
            price=price,
            media_refs=json.dumps(list(media_refs or [])),
            status=ItemStatus.LISTED.value,
            created_at=now,
            updated_at=now,
        )
        item.raise_(
            ItemListed(
                item_id=str(item.id),
                owner_id=str(owner_id),
                title=title,
                price=price,
                listed_at=now,
            )
        )
        return item

    @property
    def rating(self) -> float | None:
        """Average of all ratings, or None when nobody has rated the item yet."""
        if not self.ratings:
            return None
        return sum(r.rating for r in self.ratings) / len(self.ratings)

    @property
    def media(self) -> list[str]:
        return json.loads(self.media_refs) if self.media_refs else []

    @property
    def is_listed(self) -> bool:
        return self.status == ItemStatus.LISTED.value

    def is_owned_by(self, user_id) -> bool:
        return str(self.owner_id) == str(user_id)

    def ensure_owner(self, actor_id):
        if not self.is_owned_by(actor_id):
            raise Forbidden(f"Item {self.id} belongs to another user")

    def update_details(self, actor_id, title=None, content=None, price=None):
        self.ensure_owner(actor_id)

        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        if price is not None:
            self.price = price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ItemDetailsUpdated(
                item_id=str(self.id),
                title=self.title,
                price=self.price,
            )
        )

    def delist(self, actor_id):
        self.ensure_owner(actor_id)
        if not self.is_listed:
            raise ValidationError({"status": [f"Item {self.id} is already delisted"]})

        now = datetime.now(UTC)
        self.status = ItemStatus.DELISTED.value
        self.updated_at = now
        self.raise_(
            ItemDelisted(
                item_id=str(self.id),
                owner_id=str(self.owner_id),
                delisted_at=now,
            )
        )

    def rate(self, user_id, rating, content=None):
        if self.is_owned_by(user_id):
            raise Forbidden("Sellers cannot rate their own items")
        if any(str(r.user_id) == str(user_id) for r in self.ratings):
            raise Conflict(f"User {user_id} has already rated item {self.id}")
        if rating is None or not 1 <= rating <= 5:
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

        self.add_ratings(
            Rating(
                user_id=str(user_id),
                rating=rating,
                content=content,
                rated_at=datetime.now(UTC),
            )
        )
        self.raise_(
            ItemRated(
                item_id=str(self.id),
                user_id=str(user_id),
                rating=rating,
                average_rating=self.rating,
            )
        )


@marketplace.repository(part_of=Item)
class ItemRepository:
    """Only listed items are visible; a delisted item reads as missing."""

    def get(self, identifier) -> Item:
        item = super().get(identifier)
        if not item.is_listed:
            raise ObjectNotFoundError(f"Item {identifier} has been delisted")
        return item

    def count_owned_by(self, owner_id) -> int:
        listed = self._dao.query.filter(owner_id=str(owner_id), status=ItemStatus.LISTED.value)
        return len(listed.all().items)

    def search_titles(self, text, limit=10) -> list[str]:
        """Titles containing ``text``, case-insensitively, for search-as-you-type."""
        if not text:
            return []
        listed = self._dao.query.filter(title__icontains=text, status=ItemStatus.LISTED.value)
        items = listed.order_by("title").limit(limit).all().items
        return [item.title for item in items]
