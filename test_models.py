"""
test_models.py - Product Model Tests

Validates:
- field validation (price, discount, quantity)
- derived values (cost, effective price)
- merge-equality and cost ordering
- product arithmetic and its guards

Usage: python test_models.py
"""

from __future__ import annotations

import os
import sys

# Ensure local imports resolve from project root.
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from pydantic import ValidationError

from models import (
    Category,
    InsufficientQuantityError,
    MismatchedProductError,
    Operation,
    ParsedLine,
    Product,
    Resolution,
    ResolutionStatus,
)


def _configure_output_symbols() -> tuple[str, str, str]:
    try:
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    except Exception:
        pass

    try:
        "✓✗═".encode(sys.stdout.encoding or "utf-8")
        return "✓", "✗", "═"
    except Exception:
        return "[OK]", "[FAIL]", "="


PASS, FAIL, LINE = _configure_output_symbols()


def check(name: str, condition: bool) -> None:
    print(f"    {PASS if condition else FAIL} {name}")
    assert condition, name


def _nearly_equal(a: float, b: float, tol: float = 1e-9) -> bool:
    return abs(a - b) <= tol


def banana(quantity: float = 1.0, **overrides) -> Product:
    fields = {
        "code": "001",
        "name": "Банан",
        "category": Category.FRUITS,
        "unit_price": 105.0,
        "discount_factor": 1.0,
        "quantity": quantity,
    }
    fields.update(overrides)
    return Product(**fields)


def test_validation() -> None:
    print("\n  Validation:")
    product = banana(3)
    check("valid product builds", product.code == "001" and product.quantity == 3)
    check("category defaults to Other", Product(code="9", name="X", unit_price=1.0).category == Category.OTHER)
    check("discount defaults to 1.0", Product(code="9", name="X", unit_price=1.0).discount_factor == 1.0)

    for label, overrides in [
        ("unit_price = 0 rejected", {"unit_price": 0.0}),
        ("negative unit_price rejected", {"unit_price": -5.0}),
        ("discount = 0 rejected", {"discount_factor": 0.0}),
        ("discount > 1 rejected", {"discount_factor": 1.5}),
        ("negative quantity rejected", {"quantity": -1.0}),
        ("empty code rejected", {"code": ""}),
    ]:
        try:
            banana(**overrides)
            check(label, False)
        except ValidationError:
            check(label, True)

    try:
        product.quantity = 5  # type: ignore[misc]
        check("products are immutable", False)
    except ValidationError:
        check("products are immutable", True)


def test_derived_values() -> None:
    print("\n  Derived values:")
    discounted = banana(4, discount_factor=0.5)
    check("cost = price * discount * quantity", _nearly_equal(discounted.cost, 210.0))
    check("effective_price = price * discount", _nearly_equal(discounted.effective_price, 52.5))
    check("zero quantity costs nothing", banana(0).cost == 0.0)
    check(
        "description has name, quantity, cost and unit price",
        discounted.description() == "Банан....4.00 210.00*52.50....",
    )


def test_merge_equality_and_ordering() -> None:
    print("\n  Merge-equality and ordering:")
    check("quantity ignored by merge key", banana(1).same_line_item(banana(50)))
    check("price difference breaks merge key", not banana(1).same_line_item(banana(1, unit_price=99.0)))
    check("discount difference breaks merge key", not banana(1).same_line_item(banana(1, discount_factor=0.9)))
    check("name difference breaks merge key", not banana(1).same_line_item(banana(1, name="Банан!")))
    check("category difference breaks merge key", not banana(1).same_line_item(banana(1, category=Category.OTHER)))

    cheap = Product(code="005", name="Картошка", unit_price=50.0, quantity=1)
    pricey = Product(code="004", name="Помидор", unit_price=300.0, quantity=1)
    check("ordering follows cost", cheap < pricey and not pricey < cheap)
    check("sorted() orders by cost", [p.code for p in sorted([pricey, banana(1), cheap])] == ["005", "001", "004"])


def test_arithmetic() -> None:
    print("\n  Arithmetic:")
    total = banana(2) + banana(3)
    check("same code adds quantities", total.quantity == 5)
    check("sum keeps identity fields", total.same_line_item(banana(0)))
    check("cost scales linearly", _nearly_equal(total.cost, banana(1).cost * 5))

    rest = banana(10) - banana(4)
    check("subtraction reduces quantity", rest.quantity == 6)
    check("subtract to exactly zero allowed", (banana(4) - banana(4)).quantity == 0)

    try:
        banana(10) - banana(50)
        check("subtracting more than available raises", False)
    except InsufficientQuantityError:
        check("subtracting more than available raises", True)

    apple = Product(code="002", name="Яблоко", category=Category.FRUITS, unit_price=150.0, quantity=1)
    try:
        banana(1) + apple
        check("adding different codes raises", False)
    except MismatchedProductError:
        check("adding different codes raises", True)

    try:
        banana(5) - apple
        check("subtracting different codes raises", False)
    except MismatchedProductError:
        check("subtracting different codes raises", True)

    check("arithmetic errors are ValueErrors", issubclass(MismatchedProductError, ValueError) and issubclass(InsufficientQuantityError, ValueError))


def test_supporting_models() -> None:
    print("\n  Supporting models:")
    parsed = ParsedLine()
    check("ParsedLine defaults to ADD", parsed.operation == Operation.ADD)
    check("ParsedLine defaults to unknown name", parsed.candidate_name == "unknown")
    check("ParsedLine defaults to zero quantity", parsed.quantity == 0.0)

    found = Resolution(status=ResolutionStatus.FOUND, query="Бан", product=banana(1))
    missing = Resolution(status=ResolutionStatus.NOT_FOUND, query="xyz")
    check("FOUND with product is ok", found.ok)
    check("NOT_FOUND is not ok", not missing.ok)
    check("FOUND without product is not ok", not Resolution(status=ResolutionStatus.FOUND, query="x").ok)


TESTS = [
    test_validation,
    test_derived_values,
    test_merge_equality_and_ordering,
    test_arithmetic,
    test_supporting_models,
]


def main() -> None:
    print(LINE * 62)
    print("  Product Model Tests")
    print(LINE * 62)

    failed = 0
    for test in TESTS:
        try:
            test()
        except AssertionError:
            failed += 1

    print(f"\n{LINE * 62}")
    print(f"  Results: {len(TESTS) - failed}/{len(TESTS)} groups passed")
    print(f"{LINE * 62}")
    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
