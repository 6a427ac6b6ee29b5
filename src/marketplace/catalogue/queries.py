"""Read-side lookups over the product catalogue."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.errors import ProductNotFoundError
from marketplace.utils.paging import fetch_all


def get_product(product_id):
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError as exc:
        raise ProductNotFoundError(str(product_id)) from exc


def published_product(product_id):
    """A product that can be put in a cart. Unpublished products count as missing."""
    product = get_product(product_id)
    if not product.is_published:
        raise ProductNotFoundError(str(product_id))
    return product


def list_products(include_unpublished=False):
    """Products newest first. Unpublished products are only listed on request."""
    dao = current_domain.repository_for(Product)._dao
    query = dao.query if include_unpublished else dao.query.filter(is_published=True)
    return sorted(fetch_all(query), key=lambda p: p.created_at, reverse=True)
