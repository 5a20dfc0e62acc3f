#!/usr/bin/env python3
"""Demo script to check store connections and aggregate the first page."""

import asyncio
import locale
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from aggregators.catalog_aggregator import CatalogAggregator
from aggregators.view import SortDirection, SortField, SortState, empty_state_message
from models.progress import ProgressState
from services.errors import AggregationError, ConfigurationError
from services.store_registry import StoreRegistry
from services.woocommerce import WooCommerceClient
from utils.config import Config
from utils.logging_setup import setup_logging


def print_header(title: str) -> None:
    """Print a formatted header."""
    print(f"\n{'='*50}")
    print(f"  {title}")
    print(f"{'='*50}\n")


def print_status(name: str, success: bool, message: str = "") -> None:
    """Print status with emoji."""
    status = "✅" if success else "❌"
    print(f"{status} {name}: {message}")


def print_progress(progress: ProgressState) -> None:
    if progress.current_source_name:
        print(
            f"  [{progress.percentage:3d}%] {progress.status} "
            f"({progress.current_position} of {progress.total_sources})"
        )


async def main() -> int:
    setup_logging(verbose=Config.DEBUG)
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        print_status("Locale", False, "falling back to C collation for name sorting")

    print_header("Configuration")
    for key, value in Config.get_summary().items():
        print(f"  {key}: {value}")

    try:
        registry = StoreRegistry.from_config()
    except ConfigurationError as e:
        print_status("Store registry", False, str(e))
        return 1

    if not len(registry):
        print_status("Store registry", False, f"no stores configured in {Config.STORES_FILE}")
        return 1

    search_term = " ".join(sys.argv[1:])
    selection = registry.default_selection()

    print_header("Fetching page 1")
    async with WooCommerceClient() as client:
        aggregator = CatalogAggregator(registry, client)
        aggregator.on_progress(print_progress)
        try:
            result = await aggregator.fetch_page(selection, page=1, search_term=search_term)
        except AggregationError as e:
            print_status("Aggregation", False, str(e))
            return 1

    print_header("Stores")
    for store in registry.list_sources():
        if store.id not in selection:
            print_status(store.name, False, "offline, not queried")
            continue
        failure = next((f for f in result.failures if f.store_id == store.id), None)
        if failure:
            print_status(store.name, False, failure.message)
        else:
            print_status(store.name, True, f"{result.source_counts.get(store.id, 0)} products")

    print_header("Products")
    message = empty_state_message(result.products, search_term, selection)
    if message:
        print(message)
    for product in SortState(SortField.NAME, SortDirection.ASC).apply(result.products):
        print(f"  [{product.store.name}] #{product.id} {product.name} - {product.price}")

    print(f"\n{result.total} products, more pages likely: {result.has_more}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
