"""Catalog lookups used by checkout."""

from .models import Product


def find_products(product_ids):
    """Return ``{id: Product}`` for every id that exists, in one query.

    Missing ids are simply absent from the result; callers decide whether
    that is an error.
    """
    ids = list(dict.fromkeys(product_ids))
    if not ids:
        return {}
    return Product.objects.in_bulk(ids)


def find_product(product_id):
    """Return the product with ``product_id`` or ``None``."""
    return Product.objects.filter(pk=product_id).first()
