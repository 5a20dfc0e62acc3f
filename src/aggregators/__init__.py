"""Aggregators for unified product listings across multiple stores."""

from aggregators.catalog_aggregator import (
    CatalogAggregator,
    CatalogFetcher,
    fetch_all_stores,
)
from aggregators.merge import (
    deduplicate,
    merge_products,
    product_key,
)
from aggregators.view import (
    SortDirection,
    SortField,
    SortState,
    empty_state_message,
    sort_products,
)

__all__ = [
    "CatalogAggregator",
    "CatalogFetcher",
    "fetch_all_stores",
    "deduplicate",
    "merge_products",
    "product_key",
    "SortDirection",
    "SortField",
    "SortState",
    "empty_state_message",
    "sort_products",
]
