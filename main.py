"""
main.py - CLI orchestration for the receipt builder.

This module is orchestration-only:
1. load catalog
2. read order lines
3. process orders
4. write receipt
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from catalog import Catalog, default_catalog, load_catalog
from config import load_settings
from logging_config import get_logger, level_from_name, setup_logging
from models import ProcessSummary
from process import process_orders
from receipt import ReceiptAccumulator

logger = get_logger("receipt-cli")


def _configure_output_symbols() -> tuple[str, str]:
    """Configure stdout encoding and return safe ok/fail symbols."""
    try:
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    except Exception:
        pass

    try:
        "✓✗".encode(sys.stdout.encoding or "utf-8")
        return "✓", "✗"
    except Exception:
        return "[OK]", "X"


OK_CHAR, FAIL_CHAR = _configure_output_symbols()


def read_orders(orders_path: str) -> list[str]:
    """Read order lines from a text file."""
    if orders_path is None:
        raise ValueError("orders_path cannot be None")

    orders_path = str(orders_path).strip()
    if not orders_path:
        raise ValueError("orders_path cannot be empty")

    if not os.path.exists(orders_path):
        raise FileNotFoundError(
            f"Failed to open the orders file: {orders_path}\n"
            "Provide a valid path with --orders"
        )

    try:
        text = Path(orders_path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.warning(
            "orders_encoding_warning | path=%s | reason='utf-8 decode failed' | fallback=cp1251",
            orders_path,
        )
        text = Path(orders_path).read_text(encoding="cp1251")

    # Only newlines delimit orders; read_text already folds \r\n into \n.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    logger.info("orders_loaded | path=%s | lines=%s", orders_path, len(lines))
    return lines


def build_catalog(csv_path: Optional[str]) -> Catalog:
    """Catalog from a CSV when given, otherwise the built-in assortment."""
    if csv_path:
        return load_catalog(csv_path)
    catalog = default_catalog()
    logger.info("catalog_loaded | source=built-in | products=%s", len(catalog))
    return catalog


def write_receipt(receipt: ReceiptAccumulator, output_path: str) -> None:
    target = Path(output_path)
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(receipt.render(), encoding="utf-8")
    logger.info("receipt_written | path=%s | items=%s", target, len(receipt))


def run_pipeline(
    orders_path: str,
    output_path: str,
    catalog: Catalog | None = None,
) -> tuple[ReceiptAccumulator, ProcessSummary]:
    """Run the full pipeline for one order file."""
    pipeline_start = time.time()
    logger.info("pipeline_start | orders=%s | output=%s", orders_path, output_path)

    if catalog is None:
        catalog = default_catalog()

    lines = read_orders(orders_path)
    receipt = ReceiptAccumulator()
    summary = process_orders(lines, catalog, receipt)
    write_receipt(receipt, output_path)

    logger.info(
        "pipeline_complete | total=%.2f | unresolved=%s | duration_s=%.2f",
        receipt.total(),
        summary.unresolved,
        time.time() - pipeline_start,
    )
    return receipt, summary


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    settings = load_settings()

    parser = argparse.ArgumentParser(
        prog="receipt-builder",
        description=(
            "Receipt Builder\n"
            "Resolves free-text order lines against the product catalog "
            "and writes an itemized receipt."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s\n"
            "  %(prog)s --orders orders.txt --output check.txt\n"
            "  %(prog)s --catalog products.csv --json\n"
        ),
    )
    parser.add_argument(
        "--orders",
        "-i",
        type=str,
        default=settings.orders_file,
        help=f"Order lines file (default: {settings.orders_file})",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=settings.receipt_file,
        help=f"Receipt output file (default: {settings.receipt_file})",
    )
    parser.add_argument(
        "--catalog",
        "-c",
        type=str,
        default=settings.catalog_csv,
        help="Catalog CSV (default: built-in assortment)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also print the receipt as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (DEBUG-level) logging",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=settings.log_json,
        help="Output logs as JSON lines",
    )

    args = parser.parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else level_from_name(settings.log_level),
        json_format=args.log_json,
    )

    try:
        catalog = build_catalog(args.catalog)
        receipt, summary = run_pipeline(args.orders, args.output, catalog)
        if args.json:
            payload = {"receipt": receipt.to_dict(), "summary": summary.model_dump()}
            print(json.dumps(payload, indent=2, ensure_ascii=False))
        print(f"{OK_CHAR} Receipt successfully generated in {args.output}")
    except FileNotFoundError as exc:
        logger.error("cli_error | type=FileNotFoundError | error=%s", exc)
        print(f"\n{FAIL_CHAR} Error: {exc}")
        raise SystemExit(1) from exc
    except ValueError as exc:
        logger.error("cli_error | type=ValueError | error=%s", exc)
        print(f"\n{FAIL_CHAR} Error: {exc}")
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        print("\nInterrupted.")
        raise SystemExit(130)
    except Exception as exc:
        logger.error(
            "cli_error | type=%s | error=%s",
            type(exc).__name__,
            exc,
            exc_info=True,
        )
        print(f"\n{FAIL_CHAR} Unexpected error: {exc}")
        print("Run with --verbose for full traceback.")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
