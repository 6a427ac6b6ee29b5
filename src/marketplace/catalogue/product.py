"""Product aggregate: a sellable item with price, discount, stock, and variant axes.

Stock is a single counter per product. Variant axes (sizes and colors) only
restrict which selections a cart line may carry; they do not split stock.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.catalogue.events import (
    ProductAdded,
    ProductDetailsUpdated,
    ProductPublicationChanged,
    StockAdjusted,
)
from marketplace.domain import marketplace
from marketplace.errors import ForbiddenError
from marketplace.identity.user import Role


class UnitOfMeasure(Enum):
    KG = "kg"
    EKOR = "ekor"


def calculate_discounted_price(price, discount):
    """Price after a percentage discount. Discounts outside (0, 100] are ignored."""
    if not discount or discount <= 0 or discount > 100:
        return price
    return price - (price * discount) / 100


def _dump_options(values):
    return json.dumps([str(v).strip() for v in (values or []) if str(v).strip()])


@marketplace.value_object(part_of="Product")
class Dimensions:
    """Physical package dimensions in centimetres."""

    height = Float(min_value=0.0)
    length = Float(min_value=0.0)
    width = Float(min_value=0.0)


@marketplace.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    stock = Integer(required=True, min_value=0)
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)
    unit = String(choices=UnitOfMeasure, default=UnitOfMeasure.KG.value)  # Sold by weight or per fish
    weight = Float(min_value=0.0)
    dimensions = ValueObject(Dimensions)
    sizes = Text()  # JSON array of size labels
    colors = Text()  # JSON array of color/type labels
    image_url = String(max_length=1024)
    is_published = Boolean(default=False)
    seller_id = Identifier(required=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def add(
        cls,
        seller_id,
        name,
        description,
        price,
        stock=0,
        discount=0.0,
        unit=None,
        weight=None,
        dimensions=None,
        sizes=None,
        colors=None,
        image_url=None,
        is_published=False,
    ):
        now = datetime.now(UTC)
        product = cls(
            seller_id=seller_id,
            name=name,
            description=description,
            price=price,
            stock=stock,
            discount=discount or 0.0,
            unit=unit or UnitOfMeasure.KG.value,
            weight=weight,
            dimensions=Dimensions(**dimensions) if dimensions else None,
            sizes=_dump_options(sizes),
            colors=_dump_options(colors),
            image_url=image_url,
            is_published=is_published,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                seller_id=str(seller_id),
                name=name,
                price=price,
                stock=stock,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def size_options(self):
        return json.loads(self.sizes) if self.sizes else []

    @property
    def color_options(self):
        return json.loads(self.colors) if self.colors else []

    @property
    def discounted_price(self):
        return calculate_discounted_price(self.price, self.discount)

    def ensure_manageable_by(self, actor_id, actor_role):
        """Only the seller who listed the product, or an admin, may change it."""
        if actor_role == Role.ADMIN.value:
            return
        if str(self.seller_id) != str(actor_id):
            raise ForbiddenError("Only the seller or an admin can manage this product")

    def validate_variant(self, size, color):
        """Reject a size or color the product does not offer, when it declares any."""
        errors = {}
        sizes = self.size_options
        if sizes and size not in sizes:
            errors["size"] = [f"Size '{size}' is not available for this product"]
        colors = self.color_options
        if colors and color not in colors:
            errors["color"] = [f"Color '{color}' is not available for this product"]
        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply descriptive and pricing changes. Stock is changed through adjust_stock."""
        for field in ("name", "description", "price", "discount", "unit", "weight", "image_url"):
            if changes.get(field) is not None:
                setattr(self, field, changes[field])
        if changes.get("dimensions") is not None:
            self.dimensions = Dimensions(**changes["dimensions"])
        if changes.get("sizes") is not None:
            self.sizes = _dump_options(changes["sizes"])
        if changes.get("colors") is not None:
            self.colors = _dump_options(changes["colors"])

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                price=self.price,
                discount=self.discount or 0.0,
                updated_at=now,
            )
        )

    def set_publication(self, published):
        if bool(self.is_published) == bool(published):
            return
        self.is_published = bool(published)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductPublicationChanged(
                product_id=str(self.id),
                is_published=self.is_published,
            )
        )

    def adjust_stock(self, quantity_change, change_type):
        """Apply a signed stock change and return the resulting stock level."""
        if quantity_change == 0:
            raise ValidationError({"quantity_change": ["Stock change cannot be zero"]})

        new_stock = (self.stock or 0) + quantity_change
        if new_stock < 0:
            raise ValidationError({"stock": [f"Stock cannot go below zero (current stock {self.stock})"]})

        now = datetime.now(UTC)
        self.stock = new_stock
        self.updated_at = now
        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                change_type=change_type,
                quantity_change=quantity_change,
                stock_after_change=new_stock,
                adjusted_at=now,
            )
        )
        return new_stock
