"""Progress and result models emitted by the catalog aggregator."""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from models.product import Product


@dataclass(frozen=True)
class ProgressState:
    """Snapshot of an in-flight fetch cycle."""

    total_sources: int = 0
    completed_sources: int = 0
    current_source_name: str = ""
    current_position: int = 0  # 1-based ordinal of the store being started
    status: str = ""

    @property
    def percentage(self) -> int:
        """Completed share of the batch, rounded to a whole percent."""
        if self.total_sources == 0:
            return 0
        return round(self.completed_sources / self.total_sources * 100)

    @property
    def done(self) -> bool:
        return self.total_sources > 0 and self.completed_sources >= self.total_sources


@dataclass(frozen=True)
class SourceFailure:
    """A per-store failure that was degraded to an empty contribution."""

    store_id: str
    store_name: str
    error_type: str
    message: str

    def to_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "store_name": self.store_name,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of one fetch cycle.

    ``products`` is always the snapshot of the session that is current when
    the result is returned. When ``stale`` is True the batch belonged to a
    superseded session and was discarded without merging.
    """

    session_id: int
    page: int
    products: Tuple[Product, ...] = ()
    added: int = 0
    batch_size: int = 0
    has_more: bool = False
    source_counts: Dict[str, int] = field(default_factory=dict)
    failures: Tuple[SourceFailure, ...] = ()
    stale: bool = False

    @property
    def total(self) -> int:
        return len(self.products)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "session_id": self.session_id,
            "page": self.page,
            "total": self.total,
            "added": self.added,
            "batch_size": self.batch_size,
            "has_more": self.has_more,
            "source_counts": dict(self.source_counts),
            "failures": [f.to_dict() for f in self.failures],
            "stale": self.stale,
            "products": [p.to_dict() for p in self.products],
        }
