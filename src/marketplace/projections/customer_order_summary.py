"""Customer order summary: per-customer order counts for the admin customer view."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced, OrderStatusChanged
from marketplace.order.order import ACTIVE_STATUSES, Order, OrderStatus

_ACTIVE = {s.value for s in ACTIVE_STATUSES}


def _bucket(status):
    if status == OrderStatus.DELIVERED.value:
        return "completed"
    if status == OrderStatus.CANCELLED.value:
        return "cancelled"
    if status in _ACTIVE:
        return "processing"
    return None


@marketplace.projection
class CustomerOrderSummary:
    user_id = Identifier(identifier=True, required=True)
    total_orders = Integer(default=0)
    completed = Integer(default=0)
    processing = Integer(default=0)
    cancelled = Integer(default=0)
    total_spent = Float(default=0.0)
    last_order_at = DateTime()


def summary_for(user_id):
    """The summary of a user, or an all-zero summary when the user never ordered."""
    try:
        return current_domain.repository_for(CustomerOrderSummary).get(str(user_id))
    except ObjectNotFoundError:
        return CustomerOrderSummary(user_id=str(user_id))


@marketplace.projector(projector_for=CustomerOrderSummary, aggregates=[Order])
class CustomerOrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        summary = summary_for(event.user_id)
        summary.total_orders = (summary.total_orders or 0) + 1
        summary.processing = (summary.processing or 0) + 1
        summary.total_spent = (summary.total_spent or 0.0) + event.total_amount
        summary.last_order_at = event.placed_at
        current_domain.repository_for(CustomerOrderSummary).add(summary)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        previous, new = _bucket(event.previous_status), _bucket(event.new_status)
        if previous == new:
            return

        summary = summary_for(event.user_id)
        if previous:
            setattr(summary, previous, max((getattr(summary, previous) or 0) - 1, 0))
        if new:
            setattr(summary, new, (getattr(summary, new) or 0) + 1)
        if new == "cancelled":
            summary.total_spent = max((summary.total_spent or 0.0) - event.total_amount, 0.0)
        current_domain.repository_for(CustomerOrderSummary).add(summary)
