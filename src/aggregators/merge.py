"""Product deduplication and merge logic for catalog aggregation."""

from typing import Iterable, List, Sequence, Set, Tuple

from models.product import Product

ProductKey = Tuple[str, int]


def product_key(product: Product) -> ProductKey:
    """Identity of a product across stores: (store id, product id)."""
    return (product.store.id, product.id)


def deduplicate(products: Iterable[Product]) -> List[Product]:
    """Remove duplicate products, keeping the first occurrence."""
    seen: Set[ProductKey] = set()
    unique = []
    for product in products:
        key = product_key(product)
        if key not in seen:
            seen.add(key)
            unique.append(product)
    return unique


def merge_products(
    existing: Sequence[Product],
    incoming: Iterable[Product],
) -> Tuple[Product, ...]:
    """
    Append incoming products that are not already present.

    A product is appended iff no element of ``existing`` (or an earlier
    appended product) shares its (store id, product id). The order of
    ``existing`` is kept and new products follow in arrival order, so
    ``merge_products(s, s) == tuple(s)`` for any deduplicated ``s``.

    Args:
        existing: Current aggregated products
        incoming: Products from the latest batch, in arrival order

    Returns:
        New tuple; neither argument is modified
    """
    seen: Set[ProductKey] = {product_key(p) for p in existing}
    merged = list(existing)

    for product in incoming:
        key = product_key(product)
        if key in seen:
            continue
        seen.add(key)
        merged.append(product)

    return tuple(merged)
