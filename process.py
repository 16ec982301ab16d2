"""
process.py - Order processing orchestration.

For each order line, in input order:
1. interpret   (interpret.parse_line)
2. resolve     (Catalog.resolve)
3. accumulate  (ReceiptAccumulator add / remove / add_unresolved)

No line aborts the run. Lookup misses become unresolved entries; product
arithmetic errors propagate to the caller.
"""

from __future__ import annotations

from typing import Iterable

from catalog import Catalog
from interpret import parse_line
from logging_config import get_logger
from models import Operation, ProcessSummary
from receipt import ReceiptAccumulator

logger = get_logger(__name__)


def process_orders(
    lines: Iterable[str],
    catalog: Catalog,
    receipt: ReceiptAccumulator,
) -> ProcessSummary:
    """Apply every order line to the receipt."""
    summary = ProcessSummary()

    for line_no, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        summary.lines += 1

        parsed = parse_line(line)
        resolution = catalog.resolve(parsed.candidate_name, parsed.quantity)

        if not resolution.ok:
            suggestion = catalog.suggest(parsed.candidate_name)
            logger.info(
                "order_unresolved | line=%s | name=%r | status=%s | closest=%r | evidence=%r",
                line_no,
                parsed.candidate_name,
                resolution.status.value,
                suggestion[0] if suggestion else None,
                resolution.evidence,
            )
            receipt.add_unresolved(parsed.candidate_name)
            summary.unresolved += 1
            continue

        if parsed.operation == Operation.REMOVE:
            removed = receipt.remove_product(parsed.candidate_name)
            summary.removed += 1
            logger.debug(
                "order_remove | line=%s | name=%r | entries_removed=%s",
                line_no,
                parsed.candidate_name,
                removed,
            )
        elif parsed.quantity <= 0:
            summary.skipped += 1
            logger.info(
                "order_skipped | line=%s | name=%r | reason='zero quantity'",
                line_no,
                parsed.candidate_name,
            )
        else:
            # The catalog copy carries stock on hand; the receipt gets the ordered amount.
            ordered = resolution.product.with_quantity(parsed.quantity)
            receipt.add_product(ordered)
            summary.added += 1
            logger.debug(
                "order_add | line=%s | code=%s | quantity=%s",
                line_no,
                ordered.code,
                ordered.quantity,
            )

    logger.info(
        "processing_complete | lines=%s | added=%s | removed=%s | unresolved=%s | skipped=%s | items=%s | total=%.2f",
        summary.lines,
        summary.added,
        summary.removed,
        summary.unresolved,
        summary.skipped,
        len(receipt),
        receipt.total(),
    )
    return summary
