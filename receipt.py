"""
receipt.py - Receipt accumulation and rendering.

The ReceiptAccumulator is the single mutable ledger of one processing run:
    purchased_items   code -> Product, insertion ordered
    unresolved_names  order lines that could not be resolved, in order

It converts into:
- terminal/file text via render()
- a JSON-ready dictionary via to_dict()
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from logging_config import get_logger
from models import MismatchedProductError, Product

logger = get_logger(__name__)

HEADER = "Receipt:"
TOTAL_LABEL = "Total:"
UNRESOLVED_LABEL = "Not found:"


class ReceiptAccumulator:
    """Purchased items plus a log of unresolved order names.

    Args:
        on_unresolved: Optional callback invoked with the name of every
            unresolved order line, in addition to the WARNING log record.
    """

    def __init__(self, on_unresolved: Optional[Callable[[str], None]] = None) -> None:
        self._items: dict[str, Product] = {}
        self._unresolved: list[str] = []
        self._on_unresolved = on_unresolved

    @property
    def purchased_items(self) -> dict[str, Product]:
        return dict(self._items)

    @property
    def unresolved_names(self) -> list[str]:
        return list(self._unresolved)

    def __len__(self) -> int:
        return len(self._items)

    def add_product(self, product: Product) -> Product:
        """Add a product, merging with an existing entry for the same item.

        Returns the entry as stored after the add.
        """
        existing = self._items.get(product.code)
        if existing is None:
            self._items[product.code] = product
            logger.debug(
                "receipt_add | code=%s | name=%r | quantity=%s | merged=False",
                product.code,
                product.name,
                product.quantity,
            )
            return product

        if not existing.same_line_item(product):
            raise MismatchedProductError(
                f"Conflicting records for product code {product.code!r}: "
                f"{existing.merge_key} vs {product.merge_key}"
            )

        merged = existing + product
        self._items[product.code] = merged
        logger.debug(
            "receipt_add | code=%s | name=%r | quantity=%s | merged=True",
            merged.code,
            merged.name,
            merged.quantity,
        )
        return merged

    def remove_product(self, name: str) -> int:
        """Delete every entry whose name equals `name`, whatever its quantity.

        Returns the number of entries removed.
        """
        codes = [code for code, item in self._items.items() if item.name == name]
        for code in codes:
            del self._items[code]
        logger.debug("receipt_remove | name=%r | removed=%s", name, len(codes))
        return len(codes)

    def add_unresolved(self, name: str) -> None:
        self._unresolved.append(name)
        logger.warning("receipt_unresolved | name=%r | count=%s", name, len(self._unresolved))
        if self._on_unresolved is not None:
            self._on_unresolved(name)

    def total(self) -> float:
        return sum((item.cost for item in self._items.values()), 0.0)

    def render(self) -> str:
        """Render the receipt text.

        Each item line is followed by the running total and, when there are
        unresolved names, by the full unresolved list. With no purchased
        items only the header is emitted.
        """
        lines: list[str] = [HEADER]
        for item in self._items.values():
            lines.append(item.description())
            lines.append(f"{TOTAL_LABEL} {self.total():.2f}")
            if self._unresolved:
                lines.append(UNRESOLVED_LABEL)
                lines.extend(self._unresolved)
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [
                {
                    "code": item.code,
                    "name": item.name,
                    "category": item.category.value,
                    "quantity": round(item.quantity, 2),
                    "unit_price": round(item.effective_price, 2),
                    "cost": round(item.cost, 2),
                }
                for item in self._items.values()
            ],
            "item_count": len(self._items),
            "total": round(self.total(), 2),
            "unresolved": list(self._unresolved),
        }
