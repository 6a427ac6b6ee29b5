"""Read-side lookups over user accounts."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.errors import UserNotFoundError
from marketplace.identity.user import Role, User
from marketplace.utils.paging import fetch_all

CUSTOMER_SORT_FIELDS = ("name", "created_at", "email")


def get_user(user_id):
    try:
        return current_domain.repository_for(User).get(str(user_id))
    except ObjectNotFoundError as exc:
        raise UserNotFoundError(str(user_id)) from exc


def get_customer(user_id):
    """A user with the customer role. Administrators are not customers."""
    user = get_user(user_id)
    if user.role != Role.CUSTOMER.value:
        raise UserNotFoundError(str(user_id))
    return user


def list_customers(page=1, limit=10, sort_by="created_at", sort_order="asc"):
    """One page of customers and the total customer count."""
    if sort_by not in CUSTOMER_SORT_FIELDS:
        sort_by = "created_at"

    def sort_key(user):
        value = getattr(user, sort_by)
        return value.lower() if isinstance(value, str) else value

    customers = fetch_all(current_domain.repository_for(User)._dao.query.filter(role=Role.CUSTOMER.value))
    customers = sorted(customers, key=sort_key, reverse=sort_order == "desc")

    page = max(page, 1)
    limit = max(limit, 1)
    start = (page - 1) * limit
    return len(customers), customers[start : start + limit]
