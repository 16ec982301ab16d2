"""
catalog.py - Product catalog and order-name resolution.

The catalog is an ordered, read-only list of Products. Order lines are
resolved against it by plain substring containment on the product name:
the first entry (in catalog order) whose name contains the query wins.
There is no ranking between multiple matches and no normalization - the
query 'бан' does NOT match 'Банан'.

Resolution never raises for routine misses. It returns a Resolution whose
status says what happened:

    FOUND               -> Resolution.product is a copy of the entry
    NOT_FOUND           -> no name contains the query
    INSUFFICIENT_STOCK  -> entry cost (price * discount * stock) < requested

The stock check compares the entry's total COST against the requested
QUANTITY value. The units do not agree (see DESIGN.md).

Fuzzy suggestions (rapidfuzz) are diagnostic only. They explain an
unresolved line in the logs and never change a resolution.
"""

from __future__ import annotations

import os
from typing import Any, Iterable, Iterator, Optional

import pandas as pd
from rapidfuzz import fuzz

from logging_config import get_logger
from models import Category, Product, Resolution, ResolutionStatus

logger = get_logger(__name__)

REQUIRED_COLUMNS = ["code", "name", "unit_price", "quantity"]
OPTIONAL_COLUMNS = {"category": Category.OTHER.value, "discount_factor": 1.0}

SUGGESTION_MIN_SCORE = 60.0

# Built-in store assortment. Prices are per kg, quantity is stock in kg.
DEFAULT_CATALOG: list[dict[str, Any]] = [
    {"code": "001", "name": "Банан", "category": Category.FRUITS, "unit_price": 105.0, "discount_factor": 1.0, "quantity": 100},
    {"code": "002", "name": "Яблоко", "category": Category.FRUITS, "unit_price": 150.0, "discount_factor": 1.0, "quantity": 50},
    {"code": "003", "name": "Огурец", "category": Category.VEGETABLES, "unit_price": 200.0, "discount_factor": 1.0, "quantity": 30},
    {"code": "004", "name": "Помидор", "category": Category.VEGETABLES, "unit_price": 300.0, "discount_factor": 1.0, "quantity": 20},
    {"code": "005", "name": "Картошка", "category": Category.VEGETABLES, "unit_price": 50.0, "discount_factor": 1.0, "quantity": 100},
]


class Catalog:
    """Ordered, read-only collection of Products."""

    def __init__(self, products: Iterable[Product | dict[str, Any]]) -> None:
        items: list[Product] = []
        seen: set[str] = set()
        for raw in products:
            product = raw if isinstance(raw, Product) else Product.model_validate(raw)
            if product.code in seen:
                raise ValueError(f"Duplicate product code in catalog: {product.code!r}")
            seen.add(product.code)
            items.append(product)
        self._products: tuple[Product, ...] = tuple(items)
        logger.debug("catalog_built | products=%s", len(self._products))

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def names(self) -> list[str]:
        return [product.name for product in self._products]

    def get(self, code: str) -> Optional[Product]:
        """Return a copy of the entry with this code, or None."""
        for product in self._products:
            if product.code == code:
                return product.model_copy()
        return None

    def resolve(self, query: str, required_cost: float) -> Resolution:
        """Resolve a candidate name to a catalog entry.

        Args:
            query: Candidate name from the order line. Matched as a
                case-sensitive substring of each product name.
            required_cost: Requested amount. The matched entry's total cost
                must be at least this value.
        """
        match = next((product for product in self._products if query in product.name), None)

        if match is None:
            resolution = Resolution(
                status=ResolutionStatus.NOT_FOUND,
                query=query,
                evidence=f"No catalog product name contains '{query}'",
            )
        elif match.cost < required_cost:
            resolution = Resolution(
                status=ResolutionStatus.INSUFFICIENT_STOCK,
                query=query,
                evidence=(
                    f"Not enough '{match.name}' in stock: catalog value "
                    f"{match.cost:.2f} < requested {required_cost:g}"
                ),
            )
        else:
            resolution = Resolution(
                status=ResolutionStatus.FOUND,
                query=query,
                product=match.model_copy(),
                evidence=f"Matched '{query}' -> {match.code} '{match.name}'",
            )

        logger.debug(
            "catalog_resolve | query=%r | required=%s | status=%s",
            query,
            required_cost,
            resolution.status.value,
        )
        return resolution

    def suggest(self, query: str) -> Optional[tuple[str, float]]:
        """Closest catalog name for a query, or None if nothing is close."""
        if not query or not self._products:
            return None

        best_name = ""
        best_score = 0.0
        for product in self._products:
            score = round(float(fuzz.ratio(query.lower(), product.name.lower())), 1)
            if score > best_score:
                best_name, best_score = product.name, score

        if best_score < SUGGESTION_MIN_SCORE:
            return None
        return best_name, best_score


def default_catalog() -> Catalog:
    """Catalog seeded with the built-in store assortment."""
    return Catalog(DEFAULT_CATALOG)


def _parse_category(value: Any) -> Category:
    text = str(value or "").strip()
    if not text or text.lower() == "nan":
        return Category.OTHER
    for category in Category:
        if category.value.lower() == text.lower() or category.name.lower() == text.lower():
            return category
    logger.warning("catalog_category_warning | raw=%r | fallback=%s", text, Category.OTHER.value)
    return Category.OTHER


def load_catalog(csv_path: str) -> Catalog:
    """Load and validate a catalog CSV file.

    Columns: code, name, unit_price, quantity (required) and category,
    discount_factor (optional). Rows with a blank code or name, or an
    unusable price, discount or quantity, are skipped with a warning.
    """
    if csv_path is None:
        raise ValueError("csv_path cannot be None")

    csv_path = str(csv_path).strip()
    if not csv_path:
        raise ValueError("csv_path cannot be empty")

    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Catalog CSV not found: {csv_path}")

    try:
        df = pd.read_csv(csv_path, dtype=str, encoding="utf-8-sig")
    except pd.errors.EmptyDataError as exc:
        raise ValueError(f"Catalog CSV is empty: {csv_path}") from exc
    except Exception as exc:
        raise ValueError(f"Failed to read CSV '{csv_path}': {exc}") from exc

    df.columns = [str(col).strip().lower() for col in df.columns]
    df = df.dropna(how="all").copy()

    if df.empty:
        raise ValueError(f"Catalog CSV is empty: {csv_path}")

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(
            f"Catalog CSV missing required columns: {missing}\n"
            f"Required: {REQUIRED_COLUMNS}\n"
            f"Found: {list(df.columns)}"
        )

    for column, default in OPTIONAL_COLUMNS.items():
        if column not in df.columns:
            df[column] = default

    has_text = pd.Series(True, index=df.index)
    for column in ("code", "name"):
        has_text &= df[column].notna() & df[column].astype(str).str.strip().ne("")

    df["code"] = df["code"].astype(str).str.strip()
    df["name"] = df["name"].astype(str).str.strip()
    for column in ("unit_price", "discount_factor", "quantity"):
        df[column] = pd.to_numeric(df[column], errors="coerce")
    df["discount_factor"] = df["discount_factor"].fillna(1.0)

    valid = (
        has_text
        & (df["unit_price"] > 0)
        & (df["discount_factor"] > 0)
        & (df["discount_factor"] <= 1)
        & (df["quantity"] >= 0)
    )
    dropped = int((~valid).sum())
    if dropped > 0:
        logger.warning(
            "catalog_csv_warning | dropped_rows=%s | reason='blank code or name, invalid price, discount or quantity' | remaining_rows=%s",
            dropped,
            int(valid.sum()),
        )
    df = df[valid]

    if df.empty:
        raise ValueError(f"Catalog CSV has no valid product rows: {csv_path}")

    products = [
        Product(
            code=row["code"],
            name=row["name"],
            category=_parse_category(row["category"]),
            unit_price=float(row["unit_price"]),
            discount_factor=float(row["discount_factor"]),
            quantity=float(row["quantity"]),
        )
        for _, row in df.iterrows()
    ]

    catalog = Catalog(products)
    logger.info("catalog_loaded | path=%s | products=%s", csv_path, len(catalog))
    return catalog
