"""Cart aggregate: the per-user draft selection of products awaiting checkout.

A user owns exactly one cart: the cart's identity is the user's id. Lines are
keyed by (product, size, color); adding the same key again accumulates the
quantity. Every mutation bumps ``version`` so callers can detect a concurrent
change they have not seen.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from marketplace.cart.events import (
    CartCheckedOut,
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from marketplace.domain import marketplace
from marketplace.errors import CartItemNotFoundError, StaleCartError, StockExceededError
from marketplace.inventory.stock_history import DEFAULT_VARIANT


def variant_key(size=None, color=None):
    """Normalise a (size, color) selection; unset axes become ``"default"``."""
    return (size or DEFAULT_VARIANT, color or DEFAULT_VARIANT)


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50, default=DEFAULT_VARIANT)
    color = String(max_length=50, default=DEFAULT_VARIANT)
    added_at = DateTime()


@marketplace.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    version = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open_for(cls, user_id):
        now = datetime.now(UTC)
        return cls(
            id=str(user_id),
            user_id=str(user_id),
            version=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def find_item(self, product_id, size=None, color=None):
        size, color = variant_key(size, color)
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and i.size == size and i.color == color
            ),
            None,
        )

    def ensure_version(self, expected_version):
        """Reject a mutation that was based on an older view of the cart."""
        if expected_version is not None and expected_version != self.version:
            raise StaleCartError(str(self.user_id), expected_version, self.version)

    def _touch(self):
        self.version = (self.version or 0) + 1
        self.updated_at = datetime.now(UTC)

    @staticmethod
    def _ensure_positive(quantity):
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than 0"]})

    @staticmethod
    def _ensure_in_stock(product, quantity):
        if quantity > (product.stock or 0):
            raise StockExceededError(str(product.id), quantity, product.stock or 0)

    @property
    def item_count(self):
        return sum(i.quantity for i in self.items)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity, size=None, color=None):
        """Add units of a product variant, accumulating onto an existing line."""
        self._ensure_positive(quantity)
        size, color = variant_key(size, color)

        existing = self.find_item(product.id, size, color)
        new_quantity = quantity + (existing.quantity if existing else 0)
        self._ensure_in_stock(product, new_quantity)

        if existing:
            existing.quantity = new_quantity
        else:
            self.add_items(
                CartItem(
                    product_id=str(product.id),
                    quantity=quantity,
                    size=size,
                    color=color,
                    added_at=datetime.now(UTC),
                )
            )
        self._touch()

        self.raise_(
            CartItemAdded(
                user_id=str(self.user_id),
                product_id=str(product.id),
                size=size,
                color=color,
                quantity_added=quantity,
                quantity=new_quantity,
            )
        )

    def update_item(self, product, quantity, size=None, color=None):
        """Set the quantity of an existing line. Not additive."""
        self._ensure_positive(quantity)
        size, color = variant_key(size, color)

        item = self.find_item(product.id, size, color)
        if item is None:
            raise CartItemNotFoundError(str(product.id))
        self._ensure_in_stock(product, quantity)

        previous_quantity = item.quantity
        item.quantity = quantity
        self._touch()

        self.raise_(
            CartItemQuantityUpdated(
                user_id=str(self.user_id),
                product_id=str(product.id),
                size=size,
                color=color,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id, size=None, color=None):
        """Remove a line. Without a size or color, every line of the product goes."""
        if size is None and color is None:
            matches = [i for i in self.items if str(i.product_id) == str(product_id)]
        else:
            item = self.find_item(product_id, size, color)
            matches = [item] if item is not None else []
        if not matches:
            raise CartItemNotFoundError(str(product_id))

        for item in matches:
            self.remove_items(item)
            self.raise_(
                CartItemRemoved(
                    user_id=str(self.user_id),
                    product_id=str(product_id),
                    size=item.size,
                    color=item.color,
                )
            )
        self._touch()

    def _drop_all_items(self):
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self._touch()
        return len(removed)

    def clear(self):
        removed = self._drop_all_items()
        self.raise_(CartCleared(user_id=str(self.user_id), items_removed=removed))

    def check_out(self, order_id):
        """Empty the cart after its contents were turned into an order."""
        item_count = self._drop_all_items()
        self.raise_(
            CartCheckedOut(
                user_id=str(self.user_id),
                order_id=str(order_id),
                item_count=item_count,
            )
        )
