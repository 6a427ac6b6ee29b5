"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from factories import add_product, add_to_cart
from pytest_bdd import given, parsers, then


@pytest.fixture()
def customer_id():
    return "user-001"


@pytest.fixture()
def context():
    """Values produced by When steps and read back by Then steps."""
    return {"product_id": None, "order_id": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a published product "{name}" priced {price:d} with {stock:d} in stock'))
def published_product(context, name, price, stock):
    context["product_id"] = add_product(name=name, price=float(price), stock=stock)


@given(parsers.cfparse("the customer has {qty:d} of the product in the cart"))
def product_in_cart(context, customer_id, qty):
    add_to_cart(customer_id, context["product_id"], qty)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the request fails with {error_name}"))
def request_fails(context, error_name):
    assert context["exc"] is not None
    assert type(context["exc"]).__name__ == error_name
