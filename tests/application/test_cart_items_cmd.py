"""Application tests for cart item management commands."""

import pytest
from factories import add_product, add_to_cart
from marketplace.cart.cart import Cart
from marketplace.cart.items import ClearCart, OpenCart, RemoveFromCart, UpdateCartItem, find_cart
from marketplace.catalogue.listing import SetProductPublication
from marketplace.errors import (
    CartItemNotFoundError,
    CartNotFoundError,
    ProductNotFoundError,
    StaleCartError,
    StockExceededError,
)
from protean import current_domain
from protean.exceptions import ValidationError


class TestOpenCart:
    def test_creates_cart_lazily(self):
        cart_id = current_domain.process(OpenCart(user_id="user-001"), asynchronous=False)
        assert cart_id == "user-001"
        assert len(current_domain.repository_for(Cart).get("user-001").items) == 0

    def test_returns_existing_cart(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 2)
        current_domain.process(OpenCart(user_id="user-001"), asynchronous=False)
        assert find_cart("user-001").items[0].quantity == 2


class TestAddToCartCommand:
    def test_add_item_persists(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 2)
        cart = current_domain.repository_for(Cart).get("user-001")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_same_variant_accumulates(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 2)
        add_to_cart("user-001", product_id, 3)
        cart = find_cart("user-001")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_stock_boundary(self):
        product_id = add_product(stock=4)
        add_to_cart("user-001", product_id, 4)
        with pytest.raises(StockExceededError):
            add_to_cart("user-001", product_id, 1)
        assert find_cart("user-001").items[0].quantity == 4

    def test_missing_product_rejected(self):
        with pytest.raises(ProductNotFoundError):
            add_to_cart("user-001", "no-such-product", 1)

    def test_unpublished_product_rejected(self):
        product_id = add_product(is_published=False)
        with pytest.raises(ProductNotFoundError):
            add_to_cart("user-001", product_id, 1)

    def test_withdrawn_product_rejected(self):
        product_id = add_product()
        current_domain.process(
            SetProductPublication(
                product_id=product_id, actor_id="seller-001", actor_role="customer", is_published=False
            ),
            asynchronous=False,
        )
        with pytest.raises(ProductNotFoundError):
            add_to_cart("user-001", product_id, 1)

    def test_variant_must_be_offered(self):
        product_id = add_product(sizes='["S", "M"]')
        with pytest.raises(ValidationError):
            add_to_cart("user-001", product_id, 1, size="XL")
        add_to_cart("user-001", product_id, 1, size="M")
        assert find_cart("user-001").items[0].size == "M"

    def test_stale_version_rejected(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 1)
        with pytest.raises(StaleCartError):
            add_to_cart("user-001", product_id, 1, expected_version=0)
        assert find_cart("user-001").items[0].quantity == 1

    def test_current_version_accepted(self):
        product_id = add_product()
        version = add_to_cart("user-001", product_id, 1)
        assert add_to_cart("user-001", product_id, 1, expected_version=version) == version + 1


class TestUpdateCartItemCommand:
    def test_update_sets_quantity(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 2)
        current_domain.process(
            UpdateCartItem(user_id="user-001", product_id=product_id, quantity=6),
            asynchronous=False,
        )
        assert find_cart("user-001").items[0].quantity == 6

    def test_update_without_cart_rejected(self):
        product_id = add_product()
        with pytest.raises(CartNotFoundError):
            current_domain.process(
                UpdateCartItem(user_id="user-001", product_id=product_id, quantity=1),
                asynchronous=False,
            )

    def test_update_above_stock_rejected(self):
        product_id = add_product(stock=3)
        add_to_cart("user-001", product_id, 1)
        with pytest.raises(StockExceededError):
            current_domain.process(
                UpdateCartItem(user_id="user-001", product_id=product_id, quantity=4),
                asynchronous=False,
            )


class TestRemoveAndClearCommands:
    def test_remove_item_persists(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 1)
        current_domain.process(RemoveFromCart(user_id="user-001", product_id=product_id), asynchronous=False)
        assert len(find_cart("user-001").items) == 0

    def test_remove_from_missing_cart_rejected(self):
        with pytest.raises(CartNotFoundError):
            current_domain.process(RemoveFromCart(user_id="user-001", product_id="prod-001"), asynchronous=False)

    def test_remove_missing_item_rejected(self):
        current_domain.process(OpenCart(user_id="user-001"), asynchronous=False)
        with pytest.raises(CartItemNotFoundError):
            current_domain.process(RemoveFromCart(user_id="user-001", product_id="prod-001"), asynchronous=False)

    def test_clear_missing_cart_succeeds(self):
        assert current_domain.process(ClearCart(user_id="user-001"), asynchronous=False) is None
        assert find_cart("user-001") is None

    def test_clear_empties_cart(self):
        product_id = add_product()
        add_to_cart("user-001", product_id, 2)
        current_domain.process(ClearCart(user_id="user-001"), asynchronous=False)
        assert len(find_cart("user-001").items) == 0
