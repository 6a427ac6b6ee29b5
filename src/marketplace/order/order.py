"""Order aggregate: the immutable record of a checkout and its fulfilment status.

Lines are snapshots taken at checkout: product name, unit price, discount
and unit of measure are copied from the catalogue, so later price edits never touch an order.

State machine:
    Pending → Paid → Processing → Shipped → Delivered
    Cancelled is reachable from every non-terminal state.
    Pending may skip payment (cash on delivery) and go straight to Processing,
    and Paid may be shipped without an explicit Processing step.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from marketplace.catalogue.product import UnitOfMeasure
from marketplace.domain import marketplace
from marketplace.errors import ForbiddenError, InvalidTransitionError
from marketplace.identity.user import Role
from marketplace.inventory.stock_history import DEFAULT_VARIANT
from marketplace.order.events import (
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    BANK_JATENG = "bank_jateng"
    COD = "cod"
    QRIS = "qris"


class CheckoutSource(Enum):
    CART = "cart"
    BUY_NOW = "buyNow"


COD_SHIPPING_METHOD = "COD"
DEFAULT_SHIPPING_METHOD = "courier"

_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

ACTIVE_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
}


def can_transition(current, target):
    return OrderStatus(target) in _VALID_TRANSITIONS[OrderStatus(current)]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order is delivered, captured at checkout time."""

    recipient_name = String(required=True, max_length=255)
    phone_number = String(required=True, max_length=30)
    street_address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    province = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    discount = Float(default=0.0)
    discounted_price = Float(required=True, min_value=0.0)
    size = String(max_length=50, default=DEFAULT_VARIANT)
    color = String(max_length=50, default=DEFAULT_VARIANT)
    unit = String(choices=UnitOfMeasure, default=UnitOfMeasure.KG.value)

    @property
    def line_total(self):
        return self.quantity * self.discounted_price


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    shipping_cost = Float(default=0.0, min_value=0.0)
    shipping_method = String(max_length=50)
    payment_method = String(required=True, choices=PaymentMethod)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking_number = String(max_length=255)
    proof_of_payment_url = String(max_length=1024)
    cod_proof_url = String(max_length=1024)
    checkout_id = String(max_length=255)
    source = String(choices=CheckoutSource, default=CheckoutSource.CART.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        lines,
        shipping_address,
        payment_method,
        shipping_cost=0.0,
        checkout_id=None,
        proof_of_payment_url=None,
        source=None,
    ):
        """Create a Pending order from priced lines.

        Args:
            lines: List of dicts with product_id, product_name, quantity,
                   unit_price, discount, discounted_price, size, color, unit.
            shipping_address: Dict with the ShippingAddress fields.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        try:
            payment_method = PaymentMethod(payment_method).value
        except ValueError as exc:
            raise ValidationError({"payment_method": [f"'{payment_method}' is not a supported payment method"]}) from exc

        shipping_cost = shipping_cost or 0.0
        items = [OrderItem(**line) for line in lines]
        total_amount = sum(item.line_total for item in items) + shipping_cost

        now = datetime.now(UTC)
        order = cls(
            user_id=str(user_id),
            shipping_address=ShippingAddress(**shipping_address),
            shipping_cost=shipping_cost,
            payment_method=payment_method,
            total_amount=total_amount,
            status=OrderStatus.PENDING.value,
            proof_of_payment_url=proof_of_payment_url,
            checkout_id=checkout_id,
            source=source or CheckoutSource.CART.value,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                checkout_id=checkout_id,
                source=order.source,
                item_count=len(items),
                total_amount=total_amount,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------
    def ensure_visible_to(self, actor_id, actor_role):
        if actor_role == Role.ADMIN.value:
            return
        if str(self.user_id) != str(actor_id):
            raise ForbiddenError("Access to this order is denied")

    @property
    def is_terminal(self):
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _transition_to(self, target):
        previous = self.status
        if not can_transition(previous, target):
            raise InvalidTransitionError(str(self.id), previous, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=previous,
                new_status=target.value,
                total_amount=self.total_amount,
                changed_at=now,
            )
        )
        return previous

    def pay(self, proof_of_payment_url=None):
        """Record payment. Only a Pending order can be paid."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise InvalidTransitionError(str(self.id), self.status, OrderStatus.PAID.value)

        self._transition_to(OrderStatus.PAID)
        if proof_of_payment_url:
            self.proof_of_payment_url = proof_of_payment_url

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                user_id=str(self.user_id),
                total_amount=self.total_amount,
                paid_at=self.updated_at,
            )
        )

    def set_status(self, status, tracking_number=None, shipping_method=None, cod_proof_url=None):
        """Move the order to ``status``.

        Returns True when the status changed. Setting the current status of a
        non-terminal order again only updates the shipping details.
        """
        try:
            target = OrderStatus(status)
        except ValueError as exc:
            raise ValidationError({"status": [f"'{status}' is not a valid order status"]}) from exc

        if tracking_number:
            self.tracking_number = tracking_number
        if cod_proof_url:
            self.cod_proof_url = cod_proof_url

        if target.value == self.status and not self.is_terminal:
            self.updated_at = datetime.now(UTC)
            return False

        if target == OrderStatus.SHIPPED and can_transition(self.status, target):
            self._prepare_shipment(shipping_method)

        previous = self._transition_to(target)

        if target == OrderStatus.CANCELLED:
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    user_id=str(self.user_id),
                    previous_status=previous,
                    cancelled_at=self.updated_at,
                )
            )
        return True

    def _prepare_shipment(self, shipping_method):
        if self.payment_method == PaymentMethod.COD.value:
            if not self.cod_proof_url:
                raise ValidationError({"cod_proof_url": ["Proof of COD handover is required to ship a COD order"]})
            self.shipping_method = COD_SHIPPING_METHOD
        else:
            self.shipping_method = shipping_method or self.shipping_method or DEFAULT_SHIPPING_METHOD
