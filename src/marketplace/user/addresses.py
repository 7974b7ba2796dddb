"""Address book management: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.user.user import User


@marketplace.command(part_of="User")
class AddAddress:
    """Add a delivery address to the user's address book."""

    user_id = Identifier(required=True)
    label = String(max_length=50)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@marketplace.command_handler(part_of=User)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        address = user.add_address(
            street=command.street,
            city=command.city,
            postal_code=command.postal_code,
            country=command.country,
            label=command.label,
        )
        repo.add(user)
        return str(address.id)
