"""
config.py - Runtime settings.

Settings come from environment variables, optionally via a .env file in
the working directory:

    ORDERS_FILE    order lines to read            (default: orders.txt)
    RECEIPT_FILE   where the receipt is written   (default: check.txt)
    CATALOG_CSV    catalog CSV; unset = built-in  (default: none)
    LOG_LEVEL      DEBUG / INFO / WARNING / ERROR (default: INFO)
    LOG_JSON       1/true/yes/on for JSON logs    (default: off)
"""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from logging_config import LEVEL_NAMES, get_logger

logger = get_logger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Resolved configuration for the CLI and the HTTP API."""

    model_config = ConfigDict(extra="ignore")

    orders_file: str = "orders.txt"
    receipt_file: str = "check.txt"
    catalog_csv: Optional[str] = None
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("orders_file", mode="before")
    @classmethod
    def _orders_default(cls, value: Any) -> str:
        return str(value or "").strip() or "orders.txt"

    @field_validator("receipt_file", mode="before")
    @classmethod
    def _receipt_default(cls, value: Any) -> str:
        return str(value or "").strip() or "check.txt"

    @field_validator("catalog_csv", mode="before")
    @classmethod
    def _optional_path(cls, value: Any) -> Optional[str]:
        text = str(value or "").strip()
        return text or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_level(cls, value: Any) -> str:
        text = str(value or "").strip().upper()
        if text not in LEVEL_NAMES:
            if text:
                logger.warning("config_warning | log_level=%r | fallback=INFO", value)
            return "INFO"
        return text

    @field_validator("log_json", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value or "").strip().lower() in TRUE_VALUES


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read settings from the environment after loading a .env file."""
    try:
        load_dotenv(env_file)
    except UnicodeDecodeError:
        # Fallback for legacy Windows-encoded .env files.
        load_dotenv(env_file, encoding="cp1252")

    return Settings(
        orders_file=os.getenv("ORDERS_FILE", ""),
        receipt_file=os.getenv("RECEIPT_FILE", ""),
        catalog_csv=os.getenv("CATALOG_CSV"),
        log_level=os.getenv("LOG_LEVEL", ""),
        log_json=os.getenv("LOG_JSON", ""),
    )
