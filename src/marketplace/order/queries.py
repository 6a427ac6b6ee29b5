"""Read-side lookups over the order ledger."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.errors import OrderNotFoundError
from marketplace.order.order import Order
from marketplace.utils.paging import fetch_all


def get_order(order_id):
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError as exc:
        raise OrderNotFoundError(str(order_id)) from exc


def _newest_first(orders):
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def orders_of_user(user_id):
    dao = current_domain.repository_for(Order)._dao
    return _newest_first(fetch_all(dao.query.filter(user_id=str(user_id))))


def all_orders():
    return _newest_first(fetch_all(current_domain.repository_for(Order)._dao.query))
