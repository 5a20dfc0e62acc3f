"""WooCommerce catalog client - one product listing read per call.

API: GET {store_url}/wp-json/wc/v3/products?per_page=&page=&search=
Auth: HTTP basic auth with the store's consumer key/secret.
Response: JSON list of product records.
"""

import asyncio
import base64
import logging
from typing import List, Optional

import aiohttp

from models.product import Product
from models.store import Store
from services.errors import SourceRejectedError, SourceUnreachableError, transient_retry
from utils.config import Config

logger = logging.getLogger(__name__)


def _build_params(page: int, per_page: int, search: str) -> dict:
    params = {"per_page": per_page, "page": page}
    if search:
        params["search"] = search
    return params


def _headers_for(store: Store) -> dict:
    headers = {"Accept": "application/json"}
    if store.consumer_key:
        credentials = f"{store.consumer_key}:{store.consumer_secret}".encode("utf-8")
        headers["Authorization"] = f"Basic {base64.b64encode(credentials).decode('ascii')}"
    return headers


def parse_products(records: object, store: Store) -> List[Product]:
    """Convert a products payload into Products tagged with their store.

    Raises:
        SourceRejectedError: If the payload is not a list or a record is unusable
    """
    if not isinstance(records, list):
        raise SourceRejectedError(
            store.id,
            f"Expected a list of products from {store.name}, got {type(records).__name__}",
        )

    products = []
    for record in records:
        try:
            products.append(Product.from_api(record, store))
        except ValueError as e:
            raise SourceRejectedError(store.id, f"Invalid product record from {store.name}: {e}")
    return products


class WooCommerceClient:
    """
    Async client for WooCommerce product listings.

    Owns one aiohttp session, created lazily on first use. Use as an async
    context manager, or call close() when done. A session passed in by the
    caller is used as-is and not closed.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        min_wait: float = 0.5,
        max_wait: float = 8.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT
        self.max_attempts = max_attempts if max_attempts is not None else Config.MAX_RETRIES
        self.min_wait = min_wait
        self.max_wait = max_wait
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "WooCommerceClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def fetch(
        self,
        store: Store,
        page: int,
        per_page: int,
        search: str = "",
    ) -> List[Product]:
        """
        Fetch one page of products from a store.

        Args:
            store: Store to query
            page: 1-based page number
            per_page: Products per page
            search: Search term forwarded to the store (omitted if empty)

        Returns:
            Products tagged with the store they came from

        Raises:
            SourceUnreachableError: On network errors or timeouts
            SourceRejectedError: On non-2xx responses or malformed payloads
        """
        params = _build_params(page, per_page, search)

        async for attempt in transient_retry(self.max_attempts, self.min_wait, self.max_wait):
            with attempt:
                records = await self._get_products(store, params)

        products = parse_products(records, store)
        logger.debug(f"{store.name}: page {page} returned {len(products)} products")
        return products

    async def _get_products(self, store: Store, params: dict) -> object:
        url = f"{store.api_base}/products"
        session = self._get_session()

        try:
            async with session.get(
                url,
                params=params,
                headers=_headers_for(store),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    raise SourceRejectedError(
                        store.id,
                        f"{store.name} answered HTTP {response.status}: {text[:200]}",
                        status=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise SourceRejectedError(
                        store.id,
                        f"{store.name} returned invalid JSON: {e}",
                        status=response.status,
                    )
        except asyncio.TimeoutError as e:
            raise SourceUnreachableError(
                store.id,
                f"{store.name} timed out after {self.timeout:.0f}s",
                original_error=e,
            )
        except aiohttp.ClientError as e:
            raise SourceUnreachableError(
                store.id,
                f"Could not reach {store.name}: {e}",
                original_error=e,
            )
