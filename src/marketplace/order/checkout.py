"""Checkout: turn the user's cart, or a buy-now selection, into a Pending order.

The whole conversion runs in one command handler, so the order insert, the
stock decrements with their sale history records, and the cart removal are
committed together by the unit of work or not at all. A buy-now checkout
prices the submitted items and leaves the cart alone.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart, variant_key
from marketplace.cart.items import find_cart
from marketplace.catalogue.queries import published_product
from marketplace.domain import marketplace
from marketplace.errors import EmptyCartError, InsufficientStockError
from marketplace.inventory.stock_history import StockChangeType, adjust_and_record
from marketplace.order.order import CheckoutSource, Order, PaymentMethod
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="Order")
class Checkout:
    user_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: ShippingAddress dict
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_cost = Float(default=0.0, min_value=0.0)
    checkout_id = String(max_length=255)  # Client-chosen idempotency key
    proof_of_payment_url = String(max_length=1024)
    source = String(choices=CheckoutSource, default=CheckoutSource.CART.value)
    items = Text()  # JSON list for buy-now: product_id, quantity, size, color, unit


def _find_previous_checkout(user_id, checkout_id):
    if not checkout_id:
        return None
    orders = (
        current_domain.repository_for(Order)
        ._dao.query.filter(user_id=str(user_id), checkout_id=checkout_id)
        .all()
        .items
    )
    return orders[0] if orders else None


def _cart_selections(cart):
    return [
        {
            "product_id": str(item.product_id),
            "quantity": item.quantity,
            "size": item.size,
            "color": item.color,
        }
        for item in cart.items
    ]


def _buy_now_selections(raw_items):
    items = json.loads(raw_items) if isinstance(raw_items, str) else raw_items
    if not items:
        raise ValidationError({"items": ["Buy-now checkout needs at least one item"]})

    selections = []
    for index, item in enumerate(items):
        quantity = item.get("quantity")
        if not item.get("product_id") or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError({"items": [f"Item {index} needs a product_id and a positive quantity"]})
        size, color = variant_key(item.get("size"), item.get("color"))
        selections.append(
            {
                "product_id": str(item["product_id"]),
                "quantity": quantity,
                "size": size,
                "color": color,
                "unit": item.get("unit"),
            }
        )
    return selections


def _price_selections(selections):
    """Snapshot each selection against current catalogue data.

    Returns the order lines and the products they reference, keyed by id.
    Stock is a single counter per product, so selections of the same product
    in different variants are checked against it together.
    """
    products = {}
    requested = {}
    for selection in selections:
        product_id = selection["product_id"]
        if product_id not in products:
            products[product_id] = published_product(product_id)
        requested[product_id] = requested.get(product_id, 0) + selection["quantity"]

    for product_id, quantity in requested.items():
        product = products[product_id]
        if quantity > (product.stock or 0):
            raise InsufficientStockError(product_id, product.name, quantity, product.stock or 0)

    lines = []
    for selection in selections:
        product = products[selection["product_id"]]
        if selection.get("unit") and selection["unit"] != product.unit:
            raise ValidationError(
                {"unit": [f"Product {product.name} is sold per '{product.unit}', not '{selection['unit']}'"]}
            )
        product.validate_variant(selection["size"], selection["color"])
        lines.append(
            {
                "product_id": str(product.id),
                "product_name": product.name,
                "quantity": selection["quantity"],
                "unit_price": product.price,
                "discount": product.discount or 0.0,
                "discounted_price": product.discounted_price,
                "size": selection["size"],
                "color": selection["color"],
                "unit": product.unit,
            }
        )
    return lines, products


@marketplace.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(Checkout)
    def checkout(self, command):
        previous = _find_previous_checkout(command.user_id, command.checkout_id)
        if previous is not None:
            logger.info(
                "Checkout already processed",
                user_id=str(command.user_id),
                checkout_id=command.checkout_id,
                order_id=str(previous.id),
            )
            return str(previous.id)

        source = command.source or CheckoutSource.CART.value
        cart = None
        if source == CheckoutSource.BUY_NOW.value:
            selections = _buy_now_selections(command.items)
        else:
            cart = find_cart(command.user_id)
            if cart is None or not cart.items:
                raise EmptyCartError(str(command.user_id))
            selections = _cart_selections(cart)

        lines, products = _price_selections(selections)

        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        order = Order.place(
            user_id=command.user_id,
            lines=lines,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            shipping_cost=command.shipping_cost,
            checkout_id=command.checkout_id,
            proof_of_payment_url=command.proof_of_payment_url,
            source=source,
        )
        current_domain.repository_for(Order).add(order)

        for line in lines:
            adjust_and_record(
                products[line["product_id"]],
                -line["quantity"],
                StockChangeType.SALE,
                size=line["size"],
                color=line["color"],
                note=f"Sold in order {order.id}",
                related_order_id=str(order.id),
                action_by=str(command.user_id),
            )

        if cart is not None:
            cart_repo = current_domain.repository_for(Cart)
            cart.check_out(order.id)
            cart_repo.add(cart)
            cart_repo._dao.delete(cart)

        logger.info(
            "Checkout completed",
            user_id=str(command.user_id),
            order_id=str(order.id),
            source=source,
            total_amount=order.total_amount,
            item_count=len(lines),
        )
        return str(order.id)
