"""User aggregate: a customer or administrator account.

Users are authenticated by an external identity provider; the id carried by
the bearer token is the id of the User aggregate. The account holds profile
data and a book of shipping addresses with at most one primary address.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, String

from marketplace.domain import marketplace
from marketplace.identity.events import (
    AddressAdded,
    AddressRemoved,
    ProfileUpdated,
    UserRegistered,
)


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Gender(Enum):
    MALE = "Laki-laki"
    FEMALE = "Perempuan"
    OTHER = "Lainnya"


_ADDRESS_FIELDS = (
    "recipient_name",
    "phone_number",
    "street_address",
    "postal_code",
    "province",
    "city",
)


@marketplace.entity(part_of="User")
class Address:
    """A shipping address in the user's address book."""

    recipient_name = String(required=True, max_length=255)
    phone_number = String(required=True, max_length=30)
    street_address = String(required=True, max_length=500)
    postal_code = String(required=True, max_length=20)
    province = String(required=True, max_length=100)
    city = String(required=True, max_length=100)
    is_primary = Boolean(default=False)


@marketplace.aggregate
class User:
    name = String(required=True, max_length=255)
    email = String(required=True, max_length=254, unique=True)
    phone_number = String(required=True, max_length=30)
    gender = String(choices=Gender, default=Gender.OTHER.value)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    avatar_url = String(max_length=1024)
    addresses = HasMany(Address)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def at_most_one_primary_address(self):
        primaries = [a for a in self.addresses if a.is_primary]
        if len(primaries) > 1:
            raise ValidationError({"addresses": ["Only one address can be primary"]})

    @classmethod
    def register(cls, user_id, name, email, phone_number, gender=None, role=None, avatar_url=None):
        now = datetime.now(UTC)
        user = cls(
            id=user_id,
            name=name.strip(),
            email=email.strip().lower(),
            phone_number=phone_number.strip(),
            gender=gender or Gender.OTHER.value,
            role=role or Role.CUSTOMER.value,
            avatar_url=avatar_url,
            created_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=user.email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_admin(self):
        return self.role == Role.ADMIN.value

    @property
    def primary_address(self):
        return next((a for a in self.addresses if a.is_primary), None) or next(iter(self.addresses), None)

    def update_profile(self, name=None, phone_number=None, gender=None, avatar_url=None):
        if name is not None:
            self.name = name.strip()
        if phone_number is not None:
            self.phone_number = phone_number.strip()
        if gender is not None:
            self.gender = gender
        if avatar_url is not None:
            self.avatar_url = avatar_url

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(ProfileUpdated(user_id=str(self.id), updated_at=now))

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def _find_address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"address_id": ["Address not found"]})
        return address

    def _clear_primary(self, keep=None):
        for address in self.addresses:
            if address is not keep and address.is_primary:
                address.is_primary = False

    def add_address(self, is_primary=False, **fields):
        # The first address always becomes primary
        make_primary = bool(is_primary) or not self.addresses
        if make_primary:
            self._clear_primary()

        address = Address(**{f: fields.get(f) for f in _ADDRESS_FIELDS}, is_primary=make_primary)
        self.add_addresses(address)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            AddressAdded(
                user_id=str(self.id),
                address_id=str(address.id),
                is_primary=make_primary,
            )
        )
        return address

    def update_address(self, address_id, is_primary=None, **fields):
        address = self._find_address(address_id)
        for field in _ADDRESS_FIELDS:
            if fields.get(field) is not None:
                setattr(address, field, fields[field])
        if is_primary:
            self._clear_primary(keep=address)
            address.is_primary = True
        self.updated_at = datetime.now(UTC)
        return address

    def remove_address(self, address_id):
        address = self._find_address(address_id)
        was_primary = address.is_primary
        self.remove_addresses(address)

        if was_primary and self.addresses:
            self.addresses[0].is_primary = True

        self.updated_at = datetime.now(UTC)
        self.raise_(AddressRemoved(user_id=str(self.id), address_id=str(address_id)))
