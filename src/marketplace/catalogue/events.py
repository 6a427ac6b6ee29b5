"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductAdded:
    """A seller listed a new product in the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    added_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductDetailsUpdated:
    """Descriptive or pricing fields of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    price = Float(required=True)
    discount = Float(required=True)
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductPublicationChanged:
    """A product was published to, or withdrawn from, the storefront."""

    __version__ = 1

    product_id = Identifier(required=True)
    is_published = Boolean(required=True)


@marketplace.event(part_of="Product")
class StockAdjusted:
    """The stock level of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    change_type = String(required=True)
    quantity_change = Integer(required=True)
    stock_after_change = Integer(required=True)
    adjusted_at = DateTime(required=True)
