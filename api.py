"""
api.py - FastAPI HTTP layer for the receipt builder.

Endpoints:
  - GET  /health
  - GET  /catalog
  - POST /receipt

No parsing or accumulation logic is implemented here. Every request gets
its own ReceiptAccumulator; only the read-only catalog is shared.
"""

from __future__ import annotations

import os
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from catalog import Catalog, default_catalog
from config import load_settings
from logging_config import get_logger, level_from_name, setup_logging
from main import build_catalog
from models import InsufficientQuantityError, MismatchedProductError
from process import process_orders
from receipt import ReceiptAccumulator

logger = get_logger("receipt-api")

app = FastAPI(
    title="Receipt Builder API",
    version="1.0.0",
)

# Allows local UI use from file:// or another local host/port.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

catalog: Catalog = default_catalog()


class ReceiptRequest(BaseModel):
    """Order lines to turn into a receipt."""

    lines: list[str] = Field(
        ...,
        description="Free-text order lines, e.g. ['2x Банан', 'remove 1x Банан'].",
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/catalog")
def list_catalog() -> list[dict[str, Any]]:
    return [product.model_dump(mode="json") for product in catalog]


@app.post("/receipt")
def build_receipt(request: ReceiptRequest) -> dict[str, Any]:
    unresolved_events: list[str] = []
    receipt = ReceiptAccumulator(on_unresolved=unresolved_events.append)

    try:
        summary = process_orders(request.lines, catalog, receipt)
    except (MismatchedProductError, InsufficientQuantityError) as exc:
        logger.error(
            "api_receipt_error | error_type=%s | error=%s",
            type(exc).__name__,
            exc,
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    logger.info(
        "api_receipt | lines=%s | items=%s | unresolved=%s",
        summary.lines,
        len(receipt),
        len(unresolved_events),
    )
    return {
        "receipt": receipt.to_dict(),
        "text": receipt.render(),
        "summary": summary.model_dump(),
    }


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(level=level_from_name(settings.log_level), json_format=settings.log_json)
    catalog = build_catalog(settings.catalog_csv)
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port, reload=False)
