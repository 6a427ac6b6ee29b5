"""Product listing management: commands and handler."""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product, UnitOfMeasure
from marketplace.catalogue.queries import get_product
from marketplace.domain import marketplace
from marketplace.inventory.stock_history import StockChangeType, StockHistory
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="Product")
class AddProduct:
    seller_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)
    unit = String(choices=UnitOfMeasure, default=UnitOfMeasure.KG.value)
    weight = Float(min_value=0.0)
    dimensions = Text()  # JSON: {height, length, width}
    sizes = Text()  # JSON array
    colors = Text()  # JSON array
    image_url = String(max_length=1024)
    is_published = Boolean(default=False)


@marketplace.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    name = String(max_length=255)
    description = Text()
    price = Float(min_value=0.0)
    discount = Float(min_value=0.0, max_value=100.0)
    unit = String(choices=UnitOfMeasure)
    weight = Float(min_value=0.0)
    dimensions = Text()
    sizes = Text()
    colors = Text()
    image_url = String(max_length=1024)


@marketplace.command(part_of="Product")
class SetProductPublication:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    is_published = Boolean(required=True)


@marketplace.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)


def _json_field(value):
    if value is None:
        return None
    return json.loads(value) if isinstance(value, str) else value


@marketplace.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            seller_id=command.seller_id,
            name=command.name,
            description=command.description,
            price=command.price,
            stock=command.stock or 0,
            discount=command.discount,
            unit=command.unit,
            weight=command.weight,
            dimensions=_json_field(command.dimensions),
            sizes=_json_field(command.sizes),
            colors=_json_field(command.colors),
            image_url=command.image_url,
            is_published=command.is_published,
        )
        current_domain.repository_for(Product).add(product)

        if product.stock:
            current_domain.repository_for(StockHistory).add(
                StockHistory.record(
                    product_id=product.id,
                    change_type=StockChangeType.ADDITION,
                    quantity_change=product.stock,
                    stock_after_change=product.stock,
                    note="Initial stock",
                    action_by=str(command.seller_id),
                )
            )

        logger.info("Product added", product_id=str(product.id), seller_id=str(command.seller_id))
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        product = get_product(command.product_id)
        product.ensure_manageable_by(command.actor_id, command.actor_role)
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            discount=command.discount,
            unit=command.unit,
            weight=command.weight,
            image_url=command.image_url,
            dimensions=_json_field(command.dimensions),
            sizes=_json_field(command.sizes),
            colors=_json_field(command.colors),
        )
        current_domain.repository_for(Product).add(product)

    @handle(SetProductPublication)
    def set_product_publication(self, command):
        product = get_product(command.product_id)
        product.ensure_manageable_by(command.actor_id, command.actor_role)
        product.set_publication(command.is_published)
        current_domain.repository_for(Product).add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        product = get_product(command.product_id)
        product.ensure_manageable_by(command.actor_id, command.actor_role)
        current_domain.repository_for(Product)._dao.delete(product)
        logger.info("Product deleted", product_id=str(product.id), actor_id=str(command.actor_id))
