"""
models.py - Data Models for the Order Reconciliation Pipeline

This file defines ALL data structures used across the pipeline.
Every module communicates exclusively through these models:

    interpret.py ->  ParsedLine
    catalog.py   ->  Resolution (wrapping a Product copy)
    receipt.py   ->  str / dict (rendered from accumulated Products)
    process.py   ->  ProcessSummary

Design principles:
1. Each layer's output is the next layer's input
2. Lookup misses are values (Resolution), not exceptions
3. Arithmetic contract violations ARE exceptions and always propagate
4. All fields have descriptions - they double as API documentation

Schema relationships:
    Category       --used by--> Product.category
    Operation      --used by--> ParsedLine.operation
    Product        --used by--> Resolution.product
    ResolutionStatus --used by--> Resolution.status
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MismatchedProductError(ValueError):
    """Arithmetic between two products that are not the same line item."""


class InsufficientQuantityError(ValueError):
    """Subtraction would leave a product with negative quantity."""


class Category(str, Enum):
    """Product grouping used by the catalog."""

    VEGETABLES = "Vegetables"
    DAIRY = "Dairy"
    FRUITS = "Fruits"
    OTHER = "Other"


class Operation(str, Enum):
    """What an order line asks the receipt to do."""

    # Default for every line that does not mention removal.
    ADD = "add"

    # Any line containing "remove" or "delete" anywhere, e.g.
    # "remove 1x Банан", "please delete 2 Огурец".
    REMOVE = "remove"


class Product(BaseModel):
    """One catalog product, or one line item on a receipt.

    The same model serves both roles: the catalog holds the stock record and
    hands out copies, and the receipt accumulates those copies. Quantity is
    the only field that changes between the two (through + and -), so it is
    excluded from merge-equality - two records for the same code with
    different quantities are the same line item.

    Products are immutable. Arithmetic returns new instances.
    """

    code: str = Field(
        ...,
        min_length=1,
        description="Unique catalog identifier (SKU / barcode), e.g. '001'.",
    )
    name: str = Field(
        ...,
        description=(
            "Display name and match key. Order lines are resolved by "
            "substring containment against this value, e.g. 'Банан'."
        ),
    )
    category: Category = Field(
        default=Category.OTHER,
        description="Product category.",
    )
    unit_price: float = Field(
        ...,
        gt=0,
        description="Price per unit (per kg or per piece, product dependent).",
    )
    discount_factor: float = Field(
        default=1.0,
        gt=0,
        le=1,
        description=(
            "Multiplicative discount in (0, 1]. 1.0 means no discount, "
            "0.8 means 20% off."
        ),
    )
    quantity: float = Field(
        default=0.0,
        ge=0,
        description=(
            "Amount of the product. In the catalog this is stock on hand; "
            "on a receipt it is the purchased amount."
        ),
    )

    @property
    def effective_price(self) -> float:
        """Per-unit price after discount."""
        return self.unit_price * self.discount_factor

    @property
    def cost(self) -> float:
        """Line value: discounted unit price times quantity."""
        return self.unit_price * self.discount_factor * self.quantity

    @property
    def merge_key(self) -> tuple[str, str, Category, float, float]:
        """Identity used to decide whether two records are one line item."""
        return (
            self.code,
            self.name,
            self.category,
            self.unit_price,
            self.discount_factor,
        )

    def same_line_item(self, other: "Product") -> bool:
        return self.merge_key == other.merge_key

    def with_quantity(self, quantity: float) -> "Product":
        return self.model_copy(update={"quantity": quantity})

    def description(self) -> str:
        """Receipt line for this item: name, quantity, cost, unit price."""
        return (
            f"{self.name}....{self.quantity:.2f} {self.cost:.2f}"
            f"*{self.effective_price:.2f}...."
        )

    def _check_code(self, other: "Product") -> None:
        if self.code != other.code:
            raise MismatchedProductError(
                f"Cannot combine different products: {self.code!r} ({self.name}) "
                f"and {other.code!r} ({other.name})"
            )

    def __add__(self, other: "Product") -> "Product":
        if not isinstance(other, Product):
            return NotImplemented
        self._check_code(other)
        return self.with_quantity(self.quantity + other.quantity)

    def __sub__(self, other: "Product") -> "Product":
        if not isinstance(other, Product):
            return NotImplemented
        self._check_code(other)
        if self.quantity < other.quantity:
            raise InsufficientQuantityError(
                f"Not enough {self.name!r} to subtract: have {self.quantity:g}, "
                f"requested {other.quantity:g}"
            )
        return self.with_quantity(self.quantity - other.quantity)

    def __lt__(self, other: "Product") -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self.cost < other.cost

    def __le__(self, other: "Product") -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self.cost <= other.cost

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "code": "001",
                    "name": "Банан",
                    "category": "Fruits",
                    "unit_price": 105.0,
                    "discount_factor": 1.0,
                    "quantity": 100,
                }
            ]
        },
    )


class ParsedLine(BaseModel):
    """Structured intent extracted from one raw order line.

    Produced by interpret.parse_line(). Never represents a failure - lines
    the heuristic cannot anchor get candidate_name 'unknown', which then
    fails catalog resolution downstream.
    """

    operation: Operation = Field(
        default=Operation.ADD,
        description="ADD unless the line mentions 'remove' or 'delete'.",
    )
    quantity: float = Field(
        default=0.0,
        ge=0,
        description=(
            "Value of the FIRST ASCII digit in the line (0-9). Multi-digit "
            "numbers are not supported: '23' yields 2. 0 when no digit."
        ),
    )
    candidate_name: str = Field(
        default="unknown",
        description=(
            "Text after the first digit and one separator character, minus "
            "one trailing non-alphanumeric character."
        ),
    )
    raw: str = Field(
        default="",
        description="Original line text, kept for diagnostics.",
    )


class ResolutionStatus(str, Enum):
    """Outcome of a catalog lookup."""

    FOUND = "found"

    # No catalog name contains the query as a substring.
    NOT_FOUND = "not_found"

    # A name matched, but the catalog entry's total cost is below the
    # requested value.
    INSUFFICIENT_STOCK = "insufficient_stock"


class Resolution(BaseModel):
    """Result of Catalog.resolve() - a tagged union over ResolutionStatus."""

    status: ResolutionStatus = Field(..., description="Lookup outcome.")
    query: str = Field(..., description="Candidate name that was looked up.")
    product: Optional[Product] = Field(
        default=None,
        description="Copy of the matched catalog entry. Set only when FOUND.",
    )
    evidence: str = Field(
        default="",
        description="Human-readable reason for the outcome.",
    )

    @property
    def ok(self) -> bool:
        return self.status == ResolutionStatus.FOUND and self.product is not None


class ProcessSummary(BaseModel):
    """Counters for one run of the order processor."""

    lines: int = Field(default=0, ge=0, description="Lines consumed.")
    added: int = Field(default=0, ge=0, description="Lines that added a product.")
    removed: int = Field(
        default=0,
        ge=0,
        description="Lines that triggered a name-scoped removal.",
    )
    unresolved: int = Field(
        default=0,
        ge=0,
        description="Lines recorded as unresolved.",
    )
    skipped: int = Field(
        default=0,
        ge=0,
        description="Resolved add lines ignored because their quantity was 0.",
    )
