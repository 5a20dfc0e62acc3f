"""Store models: one configured WooCommerce backend."""

from dataclasses import dataclass
from enum import Enum

from utils.config import Config


class StoreStatus(str, Enum):
    """Reachability flag maintained by whoever configures the store."""

    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class StoreRef:
    """The store a product came from, as attached to each product."""

    id: str
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass(frozen=True)
class Store:
    """
    A configured catalog source.

    Credentials are the WooCommerce REST consumer key/secret pair and are sent
    as HTTP basic auth. Instances are immutable for the duration of a fetch.
    """

    id: str
    name: str
    url: str
    consumer_key: str = ""
    consumer_secret: str = ""
    status: StoreStatus = StoreStatus.ONLINE

    @property
    def api_base(self) -> str:
        """Base URL of the store's REST API."""
        return f"{self.url.rstrip('/')}{Config.API_PREFIX}"

    @property
    def is_online(self) -> bool:
        return self.status == StoreStatus.ONLINE

    def to_ref(self) -> StoreRef:
        return StoreRef(id=self.id, name=self.name, url=self.url)

    def to_dict(self) -> dict:
        """Convert to dictionary representation (credentials omitted)."""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "status": self.status.value,
        }

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        return f"Store(id={self.id!r}, name={self.name!r}, url={self.url!r}, status={self.status.value!r})"
