"""Cart item management: commands and handler.

A missing cart is created on the first read or addition. Updating or removing
a line of a missing cart is a lookup failure, while clearing a missing cart
succeeds without doing anything.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart, variant_key
from marketplace.catalogue.queries import published_product
from marketplace.domain import marketplace
from marketplace.errors import CartNotFoundError


@marketplace.command(part_of="Cart")
class OpenCart:
    """Fetch the user's cart, creating an empty one if there is none yet."""

    user_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    size = String(max_length=50)
    color = String(max_length=50)
    expected_version = Integer()


@marketplace.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    size = String(max_length=50)
    color = String(max_length=50)
    expected_version = Integer()


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(max_length=50)
    color = String(max_length=50)
    expected_version = Integer()


@marketplace.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def find_cart(user_id):
    """The user's cart, or None when the user has never opened one."""
    try:
        return current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError:
        return None


def _existing_cart(user_id):
    cart = find_cart(user_id)
    if cart is None:
        raise CartNotFoundError(str(user_id))
    return cart


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        cart = find_cart(command.user_id)
        if cart is None:
            cart = Cart.open_for(command.user_id)
            current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = find_cart(command.user_id) or Cart.open_for(command.user_id)
        cart.ensure_version(command.expected_version)

        product = published_product(command.product_id)
        product.validate_variant(*variant_key(command.size, command.color))
        cart.add_item(product, command.quantity, size=command.size, color=command.color)

        current_domain.repository_for(Cart).add(cart)
        return cart.version

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _existing_cart(command.user_id)
        cart.ensure_version(command.expected_version)

        product = published_product(command.product_id)
        cart.update_item(product, command.quantity, size=command.size, color=command.color)

        current_domain.repository_for(Cart).add(cart)
        return cart.version

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _existing_cart(command.user_id)
        cart.ensure_version(command.expected_version)
        cart.remove_item(command.product_id, size=command.size, color=command.color)

        current_domain.repository_for(Cart).add(cart)
        return cart.version

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = find_cart(command.user_id)
        if cart is None:
            return None

        cart.clear()
        current_domain.repository_for(Cart).add(cart)
        return cart.version

