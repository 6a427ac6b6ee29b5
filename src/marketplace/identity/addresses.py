"""Address book: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.queries import get_user
from marketplace.identity.user import User


@marketplace.command(part_of="User")
class AddAddress:
    user_id = Identifier(required=True)
    recipient_name = String(required=True, max_length=255)
    phone_number = String(required=True, max_length=30)
    street_address = String(required=True, max_length=500)
    postal_code = String(required=True, max_length=20)
    province = String(required=True, max_length=100)
    city = String(required=True, max_length=100)
    is_primary = Boolean(default=False)


@marketplace.command(part_of="User")
class UpdateAddress:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    recipient_name = String(max_length=255)
    phone_number = String(max_length=30)
    street_address = String(max_length=500)
    postal_code = String(max_length=20)
    province = String(max_length=100)
    city = String(max_length=100)
    is_primary = Boolean()


@marketplace.command(part_of="User")
class RemoveAddress:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)


def _address_fields(command):
    return {
        "recipient_name": command.recipient_name,
        "phone_number": command.phone_number,
        "street_address": command.street_address,
        "postal_code": command.postal_code,
        "province": command.province,
        "city": command.city,
    }


@marketplace.command_handler(part_of=User)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(User)
        user = get_user(command.user_id)
        address = user.add_address(is_primary=command.is_primary, **_address_fields(command))
        repo.add(user)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(User)
        user = get_user(command.user_id)
        user.update_address(
            command.address_id,
            is_primary=command.is_primary,
            **_address_fields(command),
        )
        repo.add(user)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(User)
        user = get_user(command.user_id)
        user.remove_address(command.address_id)
        repo.add(user)
