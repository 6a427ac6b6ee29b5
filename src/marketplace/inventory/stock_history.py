"""StockHistory aggregate: append-only audit trail of stock movements.

Every change to a product's stock level writes one record: restocking by a
seller, a sale at checkout, or a manual correction (including stock put back
when an order is cancelled). Records are never updated after they are written.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.utils.paging import fetch_all


class StockChangeType(Enum):
    ADDITION = "penambahan"
    SALE = "penjualan"
    CORRECTION = "koreksi"


DEFAULT_VARIANT = "default"


@marketplace.aggregate
class StockHistory:
    product_id = Identifier(required=True)
    size = String(max_length=50, default=DEFAULT_VARIANT)
    color = String(max_length=50, default=DEFAULT_VARIANT)
    change_type = String(required=True, choices=StockChangeType)
    quantity_change = Integer(required=True)
    stock_after_change = Integer(required=True, min_value=0)
    note = Text(default="")
    related_order_id = Identifier()
    action_by = Identifier()
    created_at = DateTime()

    @classmethod
    def record(
        cls,
        product_id,
        change_type,
        quantity_change,
        stock_after_change,
        size=None,
        color=None,
        note=None,
        related_order_id=None,
        action_by=None,
    ):
        return cls(
            product_id=str(product_id),
            size=size or DEFAULT_VARIANT,
            color=color or DEFAULT_VARIANT,
            change_type=StockChangeType(change_type).value,
            quantity_change=quantity_change,
            stock_after_change=stock_after_change,
            note=note or "",
            related_order_id=related_order_id,
            action_by=action_by,
            created_at=datetime.now(UTC),
        )


def adjust_and_record(
    product,
    quantity_change,
    change_type,
    size=None,
    color=None,
    note=None,
    related_order_id=None,
    action_by=None,
):
    """Change a product's stock and persist the matching history record.

    Both writes go through the active unit of work, so they commit together
    with whatever else the calling handler persists.
    """
    change_type = StockChangeType(change_type).value
    stock_after = product.adjust_stock(quantity_change, change_type)
    current_domain.repository_for(type(product)).add(product)

    entry = StockHistory.record(
        product_id=product.id,
        change_type=change_type,
        quantity_change=quantity_change,
        stock_after_change=stock_after,
        size=size,
        color=color,
        note=note,
        related_order_id=related_order_id,
        action_by=action_by,
    )
    current_domain.repository_for(StockHistory).add(entry)
    return entry


def history_for_product(product_id):
    """All stock history records of a product, newest first."""
    records = fetch_all(current_domain.repository_for(StockHistory)._dao.query.filter(product_id=str(product_id)))
    return sorted(records, key=lambda r: r.created_at, reverse=True)
