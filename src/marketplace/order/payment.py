"""Order payment: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.queries import get_order
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="Order")
class PayOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    proof_of_payment_url = String(max_length=1024)


@marketplace.command_handler(part_of=Order)
class PayOrderHandler:
    @handle(PayOrder)
    def pay_order(self, command):
        order = get_order(command.order_id)
        order.ensure_visible_to(command.actor_id, command.actor_role)
        order.pay(proof_of_payment_url=command.proof_of_payment_url)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order paid",
            order_id=str(order.id),
            user_id=str(order.user_id),
            total_amount=order.total_amount,
        )
