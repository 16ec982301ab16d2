"""
interpret.py - Order line interpretation.

One pure entry point:
    parse_line(line) -> ParsedLine

Four building blocks, usable on their own:
    detect_operation(line)           -> Operation
    extract_quantity(line)           -> float (first ASCII digit, 0-9)
    extract_candidate_name(line)     -> str ('unknown' if not anchored)
    trim_trailing_punctuation(name)  -> str (drops ONE trailing symbol)

Examples:
    "2x Помидор."       -> ADD,    2, 'Помидор'
    "remove 1x Банан"   -> REMOVE, 1, 'Банан'
    "buy 23 Банан"      -> ADD,    2, 'Банан'    (only one digit consumed)
    "Огурец"            -> ADD,    0, 'unknown'

Parsing never fails. Anything the heuristic cannot anchor degrades to the
name 'unknown', which the catalog then fails to resolve.
"""

from __future__ import annotations

from typing import Iterable

from logging_config import get_logger
from models import Operation, ParsedLine

logger = get_logger(__name__)

REMOVE_KEYWORDS: tuple[str, ...] = ("remove", "delete")
UNKNOWN_NAME = "unknown"
ASCII_DIGITS = "0123456789"


def _first_digit_position(line: str) -> int:
    """Index of the first ASCII digit in line, or -1."""
    for index, char in enumerate(line):
        if char in ASCII_DIGITS:
            return index
    return -1


def detect_operation(line: str) -> Operation:
    """REMOVE if the line mentions a removal keyword anywhere, else ADD."""
    if any(keyword in line for keyword in REMOVE_KEYWORDS):
        return Operation.REMOVE
    return Operation.ADD


def extract_quantity(line: str) -> float:
    """Value of the first ASCII digit in the line, 0.0 if there is none."""
    for char in line:
        if char in ASCII_DIGITS:
            return float(ord(char) - ord("0"))
    return 0.0


def extract_candidate_name(line: str) -> str:
    """Text after the first digit, skipping the digit and one separator.

    Leading whitespace left over after the separator is dropped, so
    '1x Банан' and '1 Банан' both yield 'Банан'.
    """
    num_pos = _first_digit_position(line)
    if num_pos >= 0 and num_pos + 2 < len(line):
        return line[num_pos + 2 :].lstrip() or UNKNOWN_NAME
    return UNKNOWN_NAME


def trim_trailing_punctuation(name: str) -> str:
    """Drop the last character if it is not alphanumeric. Single pass."""
    if name and not name[-1].isalnum():
        return name[:-1]
    return name


def parse_line(line: str) -> ParsedLine:
    """Interpret one raw order line."""
    if line is None:
        line = ""

    # An empty name would match every catalog entry.
    name = trim_trailing_punctuation(extract_candidate_name(line)) or UNKNOWN_NAME

    parsed = ParsedLine(
        operation=detect_operation(line),
        quantity=extract_quantity(line),
        candidate_name=name,
        raw=line,
    )
    logger.debug(
        "parse_line | raw=%r | operation=%s | quantity=%s | name=%r",
        line,
        parsed.operation.value,
        parsed.quantity,
        parsed.candidate_name,
    )
    return parsed


def parse_lines(lines: Iterable[str]) -> list[ParsedLine]:
    return [parse_line(line) for line in lines]
