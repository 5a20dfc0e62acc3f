"""Product model normalized from WooCommerce product records."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from models.store import Store, StoreRef


@dataclass(frozen=True)
class Product:
    """
    A product as listed by one store.

    Identity is the pair (store id, product id): two stores may use the same
    numeric id for unrelated products.
    """

    id: int
    store: StoreRef
    name: str = ""

    # Pricing (WooCommerce sends prices as strings)
    price: str = ""
    regular_price: str = ""
    sale_price: str = ""

    status: str = ""
    stock_status: str = ""
    description: str = ""
    short_description: str = ""
    sku: str = ""
    permalink: str = ""

    categories: Tuple[Dict[str, Any], ...] = ()
    images: Tuple[Dict[str, Any], ...] = ()
    attributes: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def from_api(cls, record: dict, store: Store) -> "Product":
        """Convert a WooCommerce product record to a Product.

        Raises:
            ValueError: If the record has no usable integer id.
        """
        if not isinstance(record, dict):
            raise ValueError(f"Product record must be an object, got {type(record).__name__}")

        raw_id = record.get("id")
        if isinstance(raw_id, bool) or raw_id is None:
            raise ValueError(f"Product record has no id: {raw_id!r}")
        if isinstance(raw_id, float) and not raw_id.is_integer():
            raise ValueError(f"Product record has a non-integer id: {raw_id!r}")
        try:
            product_id = int(raw_id)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"Product record has a non-integer id: {raw_id!r}")

        return cls(
            id=product_id,
            store=store.to_ref(),
            name=record.get("name") or "",
            price=str(record.get("price") or ""),
            regular_price=str(record.get("regular_price") or ""),
            sale_price=str(record.get("sale_price") or ""),
            status=record.get("status") or "",
            stock_status=record.get("stock_status") or "",
            description=record.get("description") or "",
            short_description=record.get("short_description") or "",
            sku=record.get("sku") or "",
            permalink=record.get("permalink") or "",
            categories=tuple(record.get("categories") or ()),
            images=tuple(record.get("images") or ()),
            attributes=tuple(record.get("attributes") or ()),
        )

    @property
    def store_id(self) -> str:
        return self.store.id

    @property
    def key(self) -> Tuple[str, int]:
        """Identity within an aggregated set."""
        return (self.store.id, self.id)

    @property
    def on_sale(self) -> bool:
        """True when the current price differs from the regular price."""
        return bool(self.regular_price) and self.regular_price != self.price

    @property
    def in_stock(self) -> bool:
        return self.stock_status == "instock"

    @property
    def primary_image(self) -> Optional[Dict[str, Any]]:
        """First image with a source URL, if any."""
        for image in self.images:
            if image.get("src"):
                return image
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "store": self.store.to_dict(),
            "name": self.name,
            "price": self.price,
            "regular_price": self.regular_price,
            "sale_price": self.sale_price,
            "status": self.status,
            "stock_status": self.stock_status,
            "description": self.description,
            "short_description": self.short_description,
            "sku": self.sku,
            "permalink": self.permalink,
            "categories": list(self.categories),
            "images": list(self.images),
            "attributes": list(self.attributes),
        }
