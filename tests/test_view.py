#!/usr/bin/env python
"""Tests for sorting and empty-state helpers.

Covers:
- Sort by id / name in both directions
- Stable ordering of ties
- Sorting never mutates the snapshot
- Round trip id -> name -> id
- SortState toggling
- Empty-state messages

Run with: pytest tests/test_view.py -v
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from aggregators.merge import merge_products
from aggregators.view import (
    SortDirection,
    SortField,
    SortState,
    empty_state_message,
    name_sort_key,
    sort_products,
)
from models.product import Product
from models.store import StoreRef


def make_product(product_id: int, name: str, store_id: str = "s1") -> Product:
    store = StoreRef(id=store_id, name=store_id.upper(), url=f"https://{store_id}.example.com")
    return Product(id=product_id, store=store, name=name)


@pytest.fixture
def snapshot():
    return merge_products((), [
        make_product(3, "cherry"),
        make_product(1, "Apple"),
        make_product(2, "banana"),
        make_product(1, "Apricot", store_id="s2"),
        make_product(4, "banana", store_id="s2"),
    ])


# === Test 1: basic sorting ===

def test_sort_by_id_ascending(snapshot):
    result = sort_products(snapshot, SortField.ID, SortDirection.ASC)
    assert [(p.store_id, p.id) for p in result] == [
        ("s1", 1), ("s2", 1), ("s1", 2), ("s1", 3), ("s2", 4),
    ]


def test_sort_by_id_descending_keeps_ties_in_insertion_order(snapshot):
    result = sort_products(snapshot, SortField.ID, SortDirection.DESC)
    assert [(p.store_id, p.id) for p in result] == [
        ("s2", 4), ("s1", 3), ("s1", 2), ("s1", 1), ("s2", 1),
    ]


def test_sort_by_name_ignores_case(snapshot):
    result = sort_products(snapshot, SortField.NAME, SortDirection.ASC)
    assert [p.name for p in result] == ["Apple", "Apricot", "banana", "banana", "cherry"]
    # Equal names keep insertion order
    assert [p.store_id for p in result if p.name == "banana"] == ["s1", "s2"]


def test_sort_by_name_descending(snapshot):
    result = sort_products(snapshot, "name", "desc")
    assert [p.name for p in result] == ["cherry", "banana", "banana", "Apricot", "Apple"]
    assert [p.store_id for p in result if p.name == "banana"] == ["s1", "s2"]


def test_name_key_folds_accents():
    assert name_sort_key("Éclair")[0] == name_sort_key("eclair")[0]


def test_name_with_nul_character_sorts():
    products = [make_product(1, "b\x00ox"), make_product(2, "apple")]

    result = sort_products(products, SortField.NAME, SortDirection.ASC)

    assert [p.id for p in result] == [2, 1]
    assert name_sort_key("b\x00ox") == name_sort_key("box")


# === Test 2: snapshot safety ===

def test_sort_does_not_mutate(snapshot):
    before = list(snapshot)
    sort_products(snapshot, SortField.NAME, SortDirection.ASC)
    assert list(snapshot) == before


def test_round_trip_id_name_id(snapshot):
    by_id = sort_products(snapshot, SortField.ID, SortDirection.ASC)
    sort_products(snapshot, SortField.NAME, SortDirection.DESC)
    again = sort_products(snapshot, SortField.ID, SortDirection.ASC)
    assert [p.key for p in again] == [p.key for p in by_id]


# === Test 3: SortState ===

def test_sort_state_defaults_to_id_desc():
    state = SortState()
    assert state.field is SortField.ID
    assert state.direction is SortDirection.DESC


def test_sort_state_toggle_same_field_flips_direction():
    state = SortState()
    state.toggle(SortField.ID)
    assert state.direction is SortDirection.ASC
    state.toggle(SortField.ID)
    assert state.direction is SortDirection.DESC


def test_sort_state_toggle_new_field_resets_to_desc():
    state = SortState(SortField.ID, SortDirection.ASC)
    state.toggle("name")
    assert state.field is SortField.NAME
    assert state.direction is SortDirection.DESC


def test_sort_state_apply(snapshot):
    state = SortState(SortField.NAME, SortDirection.ASC)
    assert state.apply(snapshot)[0].name == "Apple"


# === Test 4: empty states ===

def test_empty_state_none_with_products(snapshot):
    assert empty_state_message(snapshot, "anything", []) is None


def test_empty_state_messages():
    assert empty_state_message((), "shoes", ["s1"]) == (
        "No products found matching your search criteria."
    )
    assert empty_state_message((), "", []) == (
        "Please select at least one store to view products."
    )
    assert empty_state_message((), "", ["s1"]) == "No products found."
