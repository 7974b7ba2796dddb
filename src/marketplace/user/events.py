"""Domain events for the User and Session aggregates."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="User")
class UserSignedUp:
    """A new account was created."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    signed_up_at = DateTime(required=True)


@marketplace.event(part_of="User")
class AddressAdded:
    """A delivery address was added to a user's address book."""

    __version__ = 1

    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    street = String(required=True)
    city = String(required=True)
    postal_code = String(required=True)
    country = String(required=True)


@marketplace.event(part_of="Session")
class SessionStarted:
    __version__ = 1

    session_id = Identifier(required=True)
    user_id = Identifier(required=True)
    expires_at = DateTime(required=True)
