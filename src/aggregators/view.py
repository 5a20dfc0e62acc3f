"""Presentation helpers over an aggregated product snapshot.

Sorting never touches the aggregator's state: it works on a copy. Search is
not a local filter; a new search term starts a new aggregation session.
"""

import locale
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from models.product import Product


class SortField(str, Enum):
    ID = "id"
    NAME = "name"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


def _fold(text: str) -> str:
    """Case- and accent-insensitive form of a name."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def name_sort_key(name: str) -> tuple:
    """Collation key for product names under the current locale."""
    # strxfrm rejects embedded NUL characters
    name = (name or "").replace("\x00", "")
    return (locale.strxfrm(_fold(name)), locale.strxfrm(name))


def sort_products(
    products: Iterable[Product],
    field: SortField = SortField.ID,
    direction: SortDirection = SortDirection.DESC,
) -> List[Product]:
    """
    Sort a snapshot of products by id or name.

    The sort is stable in both directions: products that compare equal keep
    their insertion order.

    Args:
        products: Products to sort (not modified)
        field: SortField.ID (numeric) or SortField.NAME (locale-aware)
        direction: SortDirection.ASC or SortDirection.DESC

    Returns:
        New sorted list
    """
    field = SortField(field)
    reverse = SortDirection(direction) is SortDirection.DESC

    if field is SortField.ID:
        return sorted(products, key=lambda p: p.id, reverse=reverse)
    return sorted(products, key=lambda p: name_sort_key(p.name), reverse=reverse)


@dataclass
class SortState:
    """Current sort selection, toggled like a column header."""

    field: SortField = SortField.ID
    direction: SortDirection = SortDirection.DESC

    def toggle(self, field: SortField) -> "SortState":
        """Flip direction on the active field; a new field starts descending."""
        field = SortField(field)
        if field is self.field:
            self.direction = self.direction.flipped()
        else:
            self.field = field
            self.direction = SortDirection.DESC
        return self

    def apply(self, products: Iterable[Product]) -> List[Product]:
        return sort_products(products, self.field, self.direction)


def empty_state_message(
    products: Sequence[Product],
    search_term: str,
    selected_store_ids: Sequence[str],
) -> Optional[str]:
    """Message to show when there is nothing to list, or None if there is."""
    if products:
        return None
    if search_term:
        return "No products found matching your search criteria."
    if not selected_store_ids:
        return "Please select at least one store to view products."
    return "No products found."
