"""Catalog aggregator: concurrent multi-store fetch with incremental merge."""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from aggregators.merge import merge_products
from models.product import Product
from models.progress import AggregationResult, ProgressState, SourceFailure
from models.store import Store
from services.errors import AggregationError, CatalogError, SourceError
from services.store_registry import StoreRegistry
from services.woocommerce import WooCommerceClient
from utils.config import Config

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressState], None]


class CatalogFetcher(Protocol):
    """Anything that can read one page of products from a store."""

    async def fetch(
        self,
        store: Store,
        page: int,
        per_page: int,
        search: str = "",
    ) -> List[Product]: ...


@dataclass
class _Session:
    """State of one aggregation session (fixed selection and search term)."""

    session_id: int
    store_ids: Tuple[str, ...]
    search_term: str
    page: int = 0
    products: Tuple[Product, ...] = ()
    has_more: bool = False
    in_flight: int = 0


class CatalogAggregator:
    """
    Aggregates product listings from several stores into one growing set.

    Every fetch fans out one request per selected store, waits for all of
    them to settle, and merges the batch once. A store that fails contributes
    nothing; the other stores' products are still merged.

    Sessions: a change of store selection or search term (or page 1) starts
    a new session with an empty set and a new session id. A batch whose
    session has been superseded by the time it settles is discarded.
    In-flight batches are never cancelled.
    """

    def __init__(
        self,
        registry: StoreRegistry,
        fetcher: CatalogFetcher,
        page_size: Optional[int] = None,
        max_concurrent: Optional[int] = None,
    ):
        self._registry = registry
        self._fetcher = fetcher
        self.page_size = page_size or Config.PAGE_SIZE
        self._semaphore = asyncio.Semaphore(max_concurrent or Config.MAX_CONCURRENT_REQUESTS)

        self._last_session_id = 0
        self._session = _Session(session_id=0, store_ids=(), search_term="")
        self._progress = ProgressState()
        self._observers: List[ProgressCallback] = []
        self.last_error: Optional[str] = None

    # -- read-only views -------------------------------------------------

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._session.products

    @property
    def progress(self) -> ProgressState:
        return self._progress

    @property
    def session_id(self) -> int:
        return self._session.session_id

    @property
    def page(self) -> int:
        return self._session.page

    @property
    def has_more(self) -> bool:
        return self._session.has_more

    @property
    def selected_store_ids(self) -> Tuple[str, ...]:
        return self._session.store_ids

    @property
    def search_term(self) -> str:
        return self._session.search_term

    @property
    def loading(self) -> bool:
        """True while a batch of the current session is in flight."""
        return self._session.in_flight > 0

    # -- progress observers ----------------------------------------------

    def on_progress(self, callback: ProgressCallback) -> Callable[[], None]:
        """Subscribe to progress snapshots. Returns an unsubscribe function."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._progress
        for callback in list(self._observers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Progress observer failed")

    def _update_progress(self, session: _Session, **changes) -> None:
        # Progress belongs to the current session only
        if session.session_id != self._session.session_id:
            return
        self._progress = replace(self._progress, **changes)
        self._notify()

    def _reset_progress(self, session: _Session, total: int) -> None:
        if session.session_id != self._session.session_id:
            return
        self._progress = ProgressState(total_sources=total, status="Connecting to stores...")
        self._notify()

    # -- sessions --------------------------------------------------------

    def _start_session(self, store_ids: Tuple[str, ...], search_term: str) -> _Session:
        self._last_session_id += 1
        self._session = _Session(
            session_id=self._last_session_id,
            store_ids=store_ids,
            search_term=search_term,
        )
        logger.info(
            f"Session {self._session.session_id}: stores={list(store_ids)} search={search_term!r}"
        )
        return self._session

    def reset(self) -> None:
        """Drop the current results. Batches still in flight become stale."""
        self._start_session((), "")
        self._progress = ProgressState()
        self.last_error = None
        self._notify()

    # -- fetching --------------------------------------------------------

    async def fetch_page(
        self,
        store_ids: Iterable[str],
        page: int = 1,
        search_term: str = "",
    ) -> AggregationResult:
        """
        Fetch one page from every selected store and merge it.

        Args:
            store_ids: Stores to query; order is kept, duplicates dropped
            page: 1-based page; page 1 always starts a new session
            search_term: Forwarded to every store

        Returns:
            AggregationResult with the current session's products

        Raises:
            ValueError: If page < 1
            AggregationError: If the orchestration itself fails
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")

        selection = tuple(dict.fromkeys(store_ids))
        search_term = (search_term or "").strip()

        current = self._session
        same_query = (
            current.session_id > 0
            and current.store_ids == selection
            and current.search_term == search_term
        )
        session = current if same_query and page > 1 else self._start_session(selection, search_term)

        self.last_error = None
        session.in_flight += 1
        try:
            return await self._run_batch(session, page)
        except Exception as e:
            logger.exception(f"Aggregation failed for session {session.session_id}")
            self.last_error = str(e) or "An unexpected error occurred"
            raise AggregationError(self.last_error, original_error=e) from e
        finally:
            session.in_flight -= 1

    async def load_more(self) -> AggregationResult:
        """Fetch the next page of the current session."""
        session = self._session
        if session.session_id == 0 or not session.store_ids:
            raise AggregationError("No active session to load more products for")
        return await self.fetch_page(session.store_ids, session.page + 1, session.search_term)

    async def search(
        self,
        search_term: str,
        store_ids: Optional[Iterable[str]] = None,
    ) -> AggregationResult:
        """Start a new session for a search term."""
        if store_ids is None:
            store_ids = self._current_or_default_selection()
        return await self.fetch_page(store_ids, 1, search_term)

    async def select(self, store_ids: Iterable[str]) -> AggregationResult:
        """Start a new session for a store selection, keeping the search term."""
        return await self.fetch_page(store_ids, 1, self._session.search_term)

    def _current_or_default_selection(self) -> Tuple[str, ...]:
        if self._session.session_id > 0 and self._session.store_ids:
            return self._session.store_ids
        return tuple(self._registry.default_selection())

    async def _fetch_store(
        self,
        session: _Session,
        store: Store,
        position: int,
        page: int,
    ) -> List[Product]:
        async with self._semaphore:
            self._update_progress(
                session,
                current_source_name=store.name,
                current_position=position,
                status=f"Fetching products from {store.name}...",
            )
            try:
                products = await self._fetcher.fetch(store, page, self.page_size, session.search_term)
            finally:
                completed = min(self._progress.completed_sources + 1, self._progress.total_sources)
                self._update_progress(session, completed_sources=completed)

        if not isinstance(products, list):
            raise TypeError(f"Fetcher returned {type(products).__name__} for {store.id}, expected list")
        return products

    def _record_failure(self, store: Store, error: Exception) -> SourceFailure:
        if isinstance(error, SourceError):
            logger.warning(f"Error fetching products from {store.name}: {error}")
        else:
            logger.error(
                f"Unexpected error fetching products from {store.name}: {error}",
                exc_info=error,
            )
        error_type = error.error_type.value if isinstance(error, CatalogError) else type(error).__name__
        return SourceFailure(
            store_id=store.id,
            store_name=store.name,
            error_type=error_type,
            message=str(error),
        )

    async def _run_batch(self, session: _Session, page: int) -> AggregationResult:
        stores = self._registry.resolve(session.store_ids)
        self._reset_progress(session, len(stores))

        # Execute store fetches in parallel, waiting for every one to settle
        tasks = [
            self._fetch_store(session, store, position, page)
            for position, store in enumerate(stores, start=1)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        batch: List[Product] = []
        source_counts: Dict[str, int] = {}
        failures: List[SourceFailure] = []

        for store, result in zip(stores, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures.append(self._record_failure(store, result))
                source_counts[store.id] = 0
            else:
                source_counts[store.id] = len(result)
                batch.extend(result)

        if session.session_id != self._session.session_id:
            logger.info(
                f"Discarding stale batch from session {session.session_id} "
                f"(current session is {self._session.session_id})"
            )
            current = self._session
            return AggregationResult(
                session_id=session.session_id,
                page=page,
                products=current.products,
                batch_size=len(batch),
                has_more=current.has_more,
                source_counts=source_counts,
                failures=tuple(failures),
                stale=True,
            )

        # Known approximation: a full page from every store suggests more pages
        has_more = bool(stores) and len(batch) == len(stores) * self.page_size

        self._update_progress(session, status="Processing product data...")
        before = len(session.products)
        session.products = merge_products(session.products, batch)
        session.page = page
        session.has_more = has_more
        added = len(session.products) - before

        logger.info(
            f"Session {session.session_id} page {page}: {len(batch)} fetched from "
            f"{len(stores)} stores, {added} new, {len(session.products)} total"
            + (f", {len(failures)} stores failed" if failures else "")
        )

        return AggregationResult(
            session_id=session.session_id,
            page=page,
            products=session.products,
            added=added,
            batch_size=len(batch),
            has_more=has_more,
            source_counts=source_counts,
            failures=tuple(failures),
        )


async def fetch_all_stores(
    registry: Optional[StoreRegistry] = None,
    search_term: str = "",
    store_ids: Optional[Iterable[str]] = None,
    page_size: Optional[int] = None,
) -> AggregationResult:
    """
    Convenience function to aggregate the first page from the configured stores.

    Args:
        registry: Store registry (default: loaded from Config.STORES_FILE)
        search_term: Search term forwarded to every store
        store_ids: Stores to query (default: the online stores)
        page_size: Products per store (default: Config.PAGE_SIZE)

    Returns:
        AggregationResult for page 1
    """
    registry = registry if registry is not None else StoreRegistry.from_config()
    if store_ids is None:
        store_ids = registry.default_selection()

    async with WooCommerceClient() as client:
        aggregator = CatalogAggregator(registry, client, page_size=page_size)
        return await aggregator.fetch_page(store_ids, page=1, search_term=search_term)
