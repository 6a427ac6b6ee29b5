"""Application tests for product listing and stock adjustment commands."""

import pytest
from factories import add_product
from marketplace.catalogue.listing import DeleteProduct, UpdateProduct
from marketplace.catalogue.product import Product
from marketplace.catalogue.queries import get_product, list_products
from marketplace.errors import ForbiddenError, ProductNotFoundError
from marketplace.inventory.adjustment import AdjustStock
from marketplace.inventory.stock_history import history_for_product
from protean import current_domain
from protean.exceptions import ValidationError


def _adjust(product_id, change_type, quantity_change, actor_id="seller-001", actor_role="customer", **extra):
    return current_domain.process(
        AdjustStock(
            product_id=product_id,
            actor_id=actor_id,
            actor_role=actor_role,
            change_type=change_type,
            quantity_change=quantity_change,
            **extra,
        ),
        asynchronous=False,
    )


class TestAddProductCommand:
    def test_product_persisted(self):
        product_id = add_product(dimensions='{"height": 10, "length": 20, "width": 5}')
        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Ikan Nila"
        assert product.dimensions.length == 20

    def test_initial_stock_recorded(self):
        product_id = add_product(stock=7)
        [entry] = history_for_product(product_id)
        assert entry.change_type == "penambahan"
        assert entry.quantity_change == 7
        assert entry.stock_after_change == 7

    def test_no_history_without_initial_stock(self):
        product_id = add_product(stock=0)
        assert history_for_product(product_id) == []


class TestUpdateProductCommand:
    def test_seller_updates_price(self):
        product_id = add_product()
        current_domain.process(
            UpdateProduct(product_id=product_id, actor_id="seller-001", actor_role="customer", price=150.0),
            asynchronous=False,
        )
        assert get_product(product_id).price == 150.0

    def test_other_customer_forbidden(self):
        product_id = add_product()
        with pytest.raises(ForbiddenError):
            current_domain.process(
                UpdateProduct(product_id=product_id, actor_id="user-002", actor_role="customer", price=1.0),
                asynchronous=False,
            )


class TestDeleteProductCommand:
    def test_admin_deletes(self):
        product_id = add_product()
        current_domain.process(
            DeleteProduct(product_id=product_id, actor_id="admin-001", actor_role="admin"),
            asynchronous=False,
        )
        with pytest.raises(ProductNotFoundError):
            get_product(product_id)


class TestAdjustStockCommand:
    def test_addition(self):
        product_id = add_product(stock=5)
        assert _adjust(product_id, "penambahan", 3, note="Restock") == 8
        latest = history_for_product(product_id)[0]
        assert latest.note == "Restock"
        assert latest.stock_after_change == 8

    def test_addition_must_be_positive(self):
        product_id = add_product(stock=5)
        with pytest.raises(ValidationError):
            _adjust(product_id, "penambahan", -1)

    def test_negative_correction(self):
        product_id = add_product(stock=5)
        assert _adjust(product_id, "koreksi", -2) == 3

    def test_correction_cannot_go_below_zero(self):
        product_id = add_product(stock=5)
        with pytest.raises(ValidationError):
            _adjust(product_id, "koreksi", -6)
        assert get_product(product_id).stock == 5
        assert len(history_for_product(product_id)) == 1

    def test_sales_cannot_be_entered_manually(self):
        product_id = add_product(stock=5)
        with pytest.raises(ValidationError):
            _adjust(product_id, "penjualan", -1)

    def test_only_seller_or_admin(self):
        product_id = add_product(stock=5)
        with pytest.raises(ForbiddenError):
            _adjust(product_id, "penambahan", 1, actor_id="user-002")
        assert _adjust(product_id, "penambahan", 1, actor_id="admin-001", actor_role="admin") == 6


class TestProductQueries:
    def test_unpublished_hidden_by_default(self):
        add_product(name="Visible")
        add_product(name="Hidden", is_published=False)
        assert [p.name for p in list_products()] == ["Visible"]
        assert len(list_products(include_unpublished=True)) == 2
