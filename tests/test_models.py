#!/usr/bin/env python
"""Tests for product/progress models, error types, config and logging setup.

Run with: pytest tests/test_models.py -v
"""

import dataclasses
import logging
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.product import Product
from models.progress import AggregationResult, ProgressState, SourceFailure
from models.store import Store
from services.errors import (
    AggregationError,
    ErrorType,
    SourceRejectedError,
    SourceUnreachableError,
)

STORE = Store(id="s1", name="Store One", url="https://one.example.com")


# === Test 1: Product.from_api ===

def test_from_api_fills_defaults():
    product = Product.from_api({"id": 5}, STORE)

    assert product.key == ("s1", 5)
    assert product.store_id == "s1"
    assert product.name == ""
    assert product.images == ()
    assert product.on_sale is False
    assert product.primary_image is None


def test_from_api_full_record():
    record = {
        "id": 42,
        "name": "Blue Mug",
        "price": "8.50",
        "regular_price": "10.00",
        "sale_price": "8.50",
        "stock_status": "outofstock",
        "categories": [{"id": 1, "name": "Kitchen"}],
        "images": [{"id": 3, "src": "", "alt": ""}, {"id": 4, "src": "https://img/4.jpg", "alt": "mug"}],
    }
    product = Product.from_api(record, STORE)

    assert product.on_sale is True
    assert product.in_stock is False
    assert product.primary_image["id"] == 4
    data = product.to_dict()
    assert data["store"] == {"id": "s1", "name": "Store One", "url": "https://one.example.com"}
    assert data["categories"][0]["name"] == "Kitchen"


@pytest.mark.parametrize(
    "record",
    [{}, {"id": None}, {"id": "abc"}, {"id": True}, {"id": 7.9}, {"id": "7.9"}, {"id": float("inf")}, "not a dict"],
)
def test_from_api_rejects_bad_ids(record):
    with pytest.raises(ValueError):
        Product.from_api(record, STORE)


def test_from_api_accepts_integral_numbers():
    assert Product.from_api({"id": 7.0}, STORE).id == 7
    assert Product.from_api({"id": "12"}, STORE).id == 12


def test_product_is_immutable():
    product = Product.from_api({"id": 1, "images": [{"id": 3, "src": "x"}]}, STORE)

    with pytest.raises(dataclasses.FrozenInstanceError):
        product.id = 2
    with pytest.raises(dataclasses.FrozenInstanceError):
        product.images = ()
    assert isinstance(product.images, tuple)
    assert product.to_dict()["images"] == [{"id": 3, "src": "x"}]


# === Test 2: progress and results ===

def test_progress_percentage():
    assert ProgressState().percentage == 0
    assert ProgressState(total_sources=3, completed_sources=1).percentage == 33
    assert ProgressState(total_sources=2, completed_sources=2).done is True
    assert ProgressState().done is False


def test_aggregation_result_to_dict():
    product = Product.from_api({"id": 1, "name": "A"}, STORE)
    failure = SourceFailure("s2", "Store Two", "source_unreachable", "timeout")
    result = AggregationResult(
        session_id=3,
        page=1,
        products=(product,),
        added=1,
        batch_size=1,
        source_counts={"s1": 1, "s2": 0},
        failures=(failure,),
    )

    data = result.to_dict()
    assert result.total == 1
    assert data["failures"][0]["store_name"] == "Store Two"
    assert data["products"][0]["id"] == 1
    assert data["stale"] is False


# === Test 3: errors ===

def test_error_to_dict_and_str():
    error = SourceUnreachableError("s1", "timed out")
    assert str(error) == "[source_unreachable] timed out"
    assert error.to_dict() == {
        "type": "source_unreachable",
        "message": "timed out",
        "recoverable": True,
        "context": {"store_id": "s1"},
    }


@pytest.mark.parametrize("status,recoverable", [(400, False), (401, False), (429, True), (500, True), (None, False)])
def test_rejected_recoverability(status, recoverable):
    assert SourceRejectedError("s1", status=status).recoverable is recoverable


def test_aggregation_error_not_recoverable():
    error = AggregationError("broken")
    assert error.error_type is ErrorType.AGGREGATION_ERROR
    assert error.recoverable is False


# === Test 4: config and logging ===

def test_config_summary_has_no_secrets():
    from utils.config import Config

    summary = Config.get_summary()
    assert summary["page_size"] == Config.PAGE_SIZE
    assert "stores_file" in summary
    assert not any("secret" in key for key in summary)


def test_setup_logging_with_file(tmp_path):
    from utils.logging_setup import setup_logging

    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(verbose=True, log_dir=tmp_path, log_file_name="run.log")
        logging.getLogger("storecat.test").debug("hello from test")
        for handler in root.handlers:
            handler.flush()

        assert log_file == tmp_path / "run.log"
        assert root.level == logging.DEBUG
        assert "hello from test" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger("aiohttp").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_setup_logging_console_only():
    from utils.logging_setup import setup_logging

    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        assert setup_logging() is None
        assert len(root.handlers) == 1
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
