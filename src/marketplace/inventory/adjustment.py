"""Manual stock adjustments: command and handler.

Sellers restock with ``penambahan`` (always positive). Corrections
(``koreksi``) may go either way. Sales are only recorded by checkout.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text

from marketplace.catalogue.product import Product
from marketplace.catalogue.queries import get_product
from marketplace.domain import marketplace
from marketplace.inventory.stock_history import StockChangeType, adjust_and_record
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

_MANUAL_CHANGE_TYPES = (StockChangeType.ADDITION.value, StockChangeType.CORRECTION.value)


@marketplace.command(part_of="Product")
class AdjustStock:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    change_type = String(required=True, max_length=20)
    quantity_change = Integer(required=True)
    size = String(max_length=50)
    color = String(max_length=50)
    note = Text()


@marketplace.command_handler(part_of=Product)
class AdjustStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        if command.change_type not in _MANUAL_CHANGE_TYPES:
            raise ValidationError(
                {"change_type": [f"Change type must be one of: {', '.join(_MANUAL_CHANGE_TYPES)}"]}
            )
        if command.change_type == StockChangeType.ADDITION.value and command.quantity_change <= 0:
            raise ValidationError({"quantity_change": ["Stock additions must be positive"]})

        product = get_product(command.product_id)
        product.ensure_manageable_by(command.actor_id, command.actor_role)

        entry = adjust_and_record(
            product,
            command.quantity_change,
            command.change_type,
            size=command.size,
            color=command.color,
            note=command.note,
            action_by=str(command.actor_id),
        )

        logger.info(
            "Stock adjusted",
            product_id=str(product.id),
            change_type=command.change_type,
            quantity_change=command.quantity_change,
            stock_after_change=entry.stock_after_change,
        )
        return entry.stock_after_change
