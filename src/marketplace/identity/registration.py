"""User registration: command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.user import Gender, Role, User
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="User")
class RegisterUser:
    """Create the marketplace profile for an authenticated identity."""

    user_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone_number = String(required=True, max_length=30)
    gender = String(choices=Gender)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    avatar_url = String(max_length=1024)


@marketplace.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)

        try:
            repo.get(command.user_id)
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"user_id": ["Profile already exists for this account"]})

        email = command.email.strip().lower()
        if repo._dao.query.filter(email=email).all().items:
            raise ValidationError({"email": ["Email is already registered"]})

        user = User.register(
            user_id=command.user_id,
            name=command.name,
            email=email,
            phone_number=command.phone_number,
            gender=command.gender,
            role=command.role,
            avatar_url=command.avatar_url,
        )
        repo.add(user)

        logger.info("User registered", user_id=str(user.id), role=user.role)
        return str(user.id)
