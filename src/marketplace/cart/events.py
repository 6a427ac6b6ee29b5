"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class CartItemAdded:
    """Units of a product variant were added to the cart."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity_added = Integer(required=True)
    quantity = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartItemQuantityUpdated:
    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)


@marketplace.event(part_of="Cart")
class CartCleared:
    """All items were removed from the cart at the owner's request."""

    __version__ = 1

    user_id = Identifier(required=True)
    items_removed = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartCheckedOut:
    """The cart's contents became an order and the cart was discarded."""

    __version__ = 1

    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    item_count = Integer(required=True)
