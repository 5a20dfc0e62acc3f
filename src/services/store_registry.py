"""Store registry: the configured WooCommerce backends.

Stores are loaded from a YAML file (default ~/.storecat/stores.yaml,
overridable with STORECAT_STORES_FILE):

    stores:
      - id: main
        name: Main Shop
        url: https://shop.example.com
        consumer_key: ck_...
        consumer_secret: cs_...
        status: online

The aggregator only reads from the registry.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from models.store import Store, StoreStatus
from services.errors import ConfigurationError
from utils.config import Config

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("id", "name", "url")


def _store_from_dict(entry: Dict[str, Any], index: int) -> Store:
    """Build a Store from one YAML entry."""
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Store entry #{index} must be a mapping")

    missing = [key for key in _REQUIRED_KEYS if not entry.get(key)]
    if missing:
        raise ConfigurationError(
            f"Store entry #{index} is missing {', '.join(missing)}",
            context={"entry": index},
        )

    raw_status = str(entry.get("status") or StoreStatus.ONLINE.value).lower()
    try:
        status = StoreStatus(raw_status)
    except ValueError:
        raise ConfigurationError(
            f"Store {entry['id']!r} has unknown status {raw_status!r}",
            context={"store_id": str(entry["id"])},
        )

    return Store(
        id=str(entry["id"]),
        name=str(entry["name"]),
        url=str(entry["url"]).rstrip("/"),
        consumer_key=str(entry.get("consumer_key") or ""),
        consumer_secret=str(entry.get("consumer_secret") or ""),
        status=status,
    )


class StoreRegistry:
    """Ordered, read-only collection of configured stores."""

    def __init__(self, stores: Optional[Iterable[Store]] = None):
        self._stores: Dict[str, Store] = {}
        for store in stores or []:
            if store.id in self._stores:
                raise ConfigurationError(
                    f"Duplicate store id {store.id!r}",
                    context={"store_id": store.id},
                )
            self._stores[store.id] = store

    @classmethod
    def from_dicts(cls, entries: Iterable[Dict[str, Any]]) -> "StoreRegistry":
        return cls(_store_from_dict(entry, i) for i, entry in enumerate(entries))

    @classmethod
    def from_yaml(cls, path: Path) -> "StoreRegistry":
        """Load stores from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be parsed or is malformed
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read store registry {path}: {e}", original_error=e)

        entries = data.get("stores", []) if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ConfigurationError(f"{path}: 'stores' must be a list")

        registry = cls.from_dicts(entries)
        logger.info(f"Loaded {len(registry)} stores from {path}")
        return registry

    @classmethod
    def from_config(cls) -> "StoreRegistry":
        """Load the registry from Config.STORES_FILE (empty if it does not exist)."""
        path = Config.STORES_FILE
        if not path.exists():
            logger.warning(f"No store registry at {path}, starting with no stores")
            return cls()
        return cls.from_yaml(path)

    def list_sources(self) -> List[Store]:
        """All stores in registry order."""
        return list(self._stores.values())

    def get(self, store_id: str) -> Optional[Store]:
        return self._stores.get(store_id)

    def resolve(self, store_ids: Iterable[str]) -> List[Store]:
        """Map ids to stores, preserving order and skipping unknown ids."""
        stores = []
        for store_id in store_ids:
            store = self._stores.get(store_id)
            if store is None:
                logger.warning(f"Unknown store id {store_id!r}, skipping")
                continue
            stores.append(store)
        return stores

    def default_selection(self) -> List[str]:
        """Ids of the stores that are online, in registry order."""
        return [s.id for s in self._stores.values() if s.is_online]

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, store_id: object) -> bool:
        return store_id in self._stores
