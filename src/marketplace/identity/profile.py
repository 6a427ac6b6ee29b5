"""Profile management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.items import find_cart
from marketplace.domain import marketplace
from marketplace.identity.queries import get_user
from marketplace.identity.user import Gender, Role, User
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="User")
class UpdateProfile:
    user_id = Identifier(required=True)
    name = String(max_length=255)
    phone_number = String(max_length=30)
    gender = String(choices=Gender)
    avatar_url = String(max_length=1024)


@marketplace.command(part_of="User")
class DeleteAccount:
    """Remove the caller's own account. Orders placed by the user are kept."""

    user_id = Identifier(required=True)


@marketplace.command(part_of="User")
class DeleteCustomer:
    """Administrative removal of a customer account."""

    user_id = Identifier(required=True)
    actor_id = Identifier(required=True)


def _discard(user):
    """Delete the user along with its address book and cart."""
    repo = current_domain.repository_for(User)
    for address in list(user.addresses):
        user.remove_addresses(address)
    repo.add(user)
    repo._dao.delete(user)

    cart = find_cart(user.id)
    if cart is not None:
        cart_repo = current_domain.repository_for(Cart)
        cart.clear()
        cart_repo.add(cart)
        cart_repo._dao.delete(cart)


@marketplace.command_handler(part_of=User)
class ManageProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        user = get_user(command.user_id)
        user.update_profile(
            name=command.name,
            phone_number=command.phone_number,
            gender=command.gender,
            avatar_url=command.avatar_url,
        )
        current_domain.repository_for(User).add(user)

    @handle(DeleteAccount)
    def delete_account(self, command):
        user = get_user(command.user_id)
        _discard(user)
        logger.info("Account deleted", user_id=str(command.user_id))

    @handle(DeleteCustomer)
    def delete_customer(self, command):
        user = get_user(command.user_id)
        if user.role != Role.CUSTOMER.value:
            raise ValidationError({"user_id": ["Only customer accounts can be deleted"]})

        _discard(user)
        logger.info("Customer deleted", user_id=str(command.user_id), actor_id=str(command.actor_id))
        return user.name
