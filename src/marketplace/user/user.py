"""User aggregate root with its delivery Address book."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, String

from marketplace.domain import marketplace
from marketplace.user.email import EmailAddress
from marketplace.user.events import AddressAdded, UserSignedUp
from marketplace.user.passwords import hash_password, verify_password

MAX_ADDRESSES = 10


@marketplace.entity(part_of="User")
class Address:
    """A delivery location; orders reference it by id."""

    label = String(max_length=50, default="Home")
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@marketplace.aggregate
class User:
    """A person who can both sell (list items) and buy (fill a cart, place orders)."""

    username = String(required=True, max_length=50, unique=True)
    email = String(required=True, max_length=254, unique=True)
    password_hash = String(required=True, max_length=100)
    addresses = HasMany(Address)
    created_at = DateTime()

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @classmethod
    def sign_up(cls, username, email, password):
        if not password or len(password) < 8:
            raise ValidationError({"password": ["Password must be at least 8 characters"]})

        # Validates the address structure
        email_vo = EmailAddress(address=email)
        now = datetime.now(UTC)

        user = cls(
            username=username,
            email=email_vo.address.lower(),
            password_hash=hash_password(password),
            created_at=now,
        )
        user.raise_(
            UserSignedUp(
                user_id=str(user.id),
                username=username,
                email=user.email,
                signed_up_at=now,
            )
        )
        return user

    def check_password(self, password) -> bool:
        return verify_password(password, self.password_hash)

    def add_address(self, street, city, postal_code, country, label=None):
        if len(self.addresses) >= MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

        address = Address(
            label=label or "Home",
            street=street,
            city=city,
            postal_code=postal_code,
            country=country,
        )
        self.add_addresses(address)

        self.raise_(
            AddressAdded(
                user_id=str(self.id),
                address_id=str(address.id),
                street=street,
                city=city,
                postal_code=postal_code,
                country=country,
            )
        )
        return address

    def find_address(self, address_id):
        return next((a for a in self.addresses if str(a.id) == str(address_id)), None)


@marketplace.repository(part_of=User)
class UserRepository:
    def find_by_username(self, username) -> User | None:
        users = self._dao.query.filter(username=username).all().items
        return users[0] if users else None

    def find_by_email(self, email) -> User | None:
        users = self._dao.query.filter(email=email.lower()).all().items
        return users[0] if users else None
