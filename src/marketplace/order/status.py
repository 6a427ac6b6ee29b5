"""Administrative order status changes: command and handler.

Cancelling an order puts every ordered unit back into stock and records the
correction in the stock history.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.inventory.stock_history import StockChangeType, adjust_and_record
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import get_order
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    tracking_number = String(max_length=255)
    shipping_method = String(max_length=50)
    cod_proof_url = String(max_length=1024)
    actor_id = Identifier()


def _restock(order, actor_id):
    product_repo = current_domain.repository_for(Product)
    for item in order.items:
        try:
            product = product_repo.get(str(item.product_id))
        except ObjectNotFoundError:
            logger.warning(
                "Product of cancelled order no longer exists",
                order_id=str(order.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
            )
            continue

        adjust_and_record(
            product,
            item.quantity,
            StockChangeType.CORRECTION,
            size=item.size,
            color=item.color,
            note=f"Returned to stock from cancelled order {order.id}",
            related_order_id=str(order.id),
            action_by=str(actor_id) if actor_id else None,
        )


@marketplace.command_handler(part_of=Order)
class SetOrderStatusHandler:
    @handle(SetOrderStatus)
    def set_order_status(self, command):
        order = get_order(command.order_id)
        previous_status = order.status

        changed = order.set_status(
            command.status,
            tracking_number=command.tracking_number,
            shipping_method=command.shipping_method,
            cod_proof_url=command.cod_proof_url,
        )
        current_domain.repository_for(Order).add(order)

        if changed and order.status == OrderStatus.CANCELLED.value:
            _restock(order, command.actor_id)

        logger.info(
            "Order status set",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
            changed=changed,
        )
