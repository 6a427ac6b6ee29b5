"""Tests for the Product aggregate."""

import pytest
from marketplace.catalogue.events import ProductAdded, StockAdjusted
from marketplace.catalogue.product import Product, calculate_discounted_price
from marketplace.errors import ForbiddenError
from protean.exceptions import ValidationError


def _product(**overrides):
    defaults = {
        "seller_id": "seller-001",
        "name": "Ikan Nila",
        "description": "Fresh tilapia",
        "price": 100.0,
        "stock": 10,
    }
    defaults.update(overrides)
    return Product.add(**defaults)


class TestDiscountedPrice:
    def test_no_discount(self):
        assert calculate_discounted_price(100.0, 0) == 100.0

    def test_percentage_discount(self):
        assert calculate_discounted_price(200.0, 25) == 150.0

    def test_full_discount(self):
        assert calculate_discounted_price(80.0, 100) == 0.0

    def test_negative_discount_is_ignored(self):
        assert calculate_discounted_price(100.0, -5) == 100.0

    def test_discount_above_hundred_is_ignored(self):
        assert calculate_discounted_price(100.0, 150) == 100.0

    def test_product_exposes_discounted_price(self):
        product = _product(price=50.0, discount=10)
        assert product.discounted_price == 45.0


class TestProductCreation:
    def test_add_sets_fields(self):
        product = _product(sizes=["S", "M"], colors=["red"])
        assert product.name == "Ikan Nila"
        assert product.stock == 10
        assert product.size_options == ["S", "M"]
        assert product.color_options == ["red"]
        assert product.is_published is False

    def test_add_raises_product_added(self):
        product = _product()
        assert len(product._events) == 1
        assert isinstance(product._events[0], ProductAdded)
        assert product._events[0].stock == 10

    def test_blank_variant_labels_are_dropped(self):
        product = _product(sizes=["S", " ", ""])
        assert product.size_options == ["S"]

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _product(price=-1.0)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            _product(stock=-1)

    def test_discount_above_hundred_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product(discount=120)
        assert "discount" in exc.value.messages


class TestVariantValidation:
    def test_any_variant_allowed_without_options(self):
        _product().validate_variant("default", "default")

    def test_declared_size_accepted(self):
        _product(sizes=["S", "M"]).validate_variant("M", "default")

    def test_undeclared_size_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product(sizes=["S", "M"]).validate_variant("XL", "default")
        assert "size" in exc.value.messages

    def test_undeclared_color_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product(colors=["red"]).validate_variant("default", "blue")
        assert "color" in exc.value.messages


class TestStockAdjustment:
    def test_addition_increases_stock(self):
        product = _product(stock=5)
        assert product.adjust_stock(3, "penambahan") == 8
        assert product.stock == 8

    def test_decrease_to_zero_allowed(self):
        product = _product(stock=5)
        assert product.adjust_stock(-5, "koreksi") == 0

    def test_decrease_below_zero_rejected(self):
        product = _product(stock=5)
        with pytest.raises(ValidationError):
            product.adjust_stock(-6, "koreksi")
        assert product.stock == 5

    def test_zero_change_rejected(self):
        with pytest.raises(ValidationError):
            _product().adjust_stock(0, "koreksi")

    def test_adjustment_raises_event(self):
        product = _product(stock=5)
        product.adjust_stock(2, "penambahan")
        event = product._events[-1]
        assert isinstance(event, StockAdjusted)
        assert event.stock_after_change == 7


class TestProductManagement:
    def test_seller_can_manage(self):
        _product().ensure_manageable_by("seller-001", "customer")

    def test_admin_can_manage(self):
        _product().ensure_manageable_by("someone-else", "admin")

    def test_other_customer_cannot_manage(self):
        with pytest.raises(ForbiddenError):
            _product().ensure_manageable_by("someone-else", "customer")

    def test_update_details_keeps_unspecified_fields(self):
        product = _product()
        product.update_details(price=120.0, name=None)
        assert product.price == 120.0
        assert product.name == "Ikan Nila"

    def test_publication_toggle(self):
        product = _product()
        product.set_publication(True)
        assert product.is_published is True
