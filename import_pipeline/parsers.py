"""
Cell parsers for spreadsheet imports
Dates end up as DD/MM/YYYY strings, amounts as floats, enumerations as
canonical names when a synonym matches
"""

import math
import re
from collections import namedtuple
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser

from database.models import DATE_FORMAT
from import_pipeline.constants import SYNONYMS, TRUE_WORDS

NormalizedValue = namedtuple("NormalizedValue", ["matched", "value"])

# Day 25569 of the 1900 date system is 1970-01-01
SERIAL_EPOCH = datetime(1970, 1, 1)
SERIAL_UNIX_OFFSET = 25569

_DMY_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")
_ISO_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")
_CURRENCY_RE = re.compile(r"(?i)us\$|usd|ars|u\$s|[$€£\s]")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_date(value) -> Optional[str]:
    """
    Parse a date cell into DD/MM/YYYY

    Args:
        value: Spreadsheet serial number, datetime/date, or text

    Returns:
        Formatted date, the original text when it cannot be parsed,
        or None for empty cells
    """
    if is_blank(value) or value == 0:
        return None

    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)

    if _is_number(value):
        try:
            parsed = SERIAL_EPOCH + timedelta(days=value - SERIAL_UNIX_OFFSET)
        except OverflowError:
            return str(value)
        return parsed.strftime(DATE_FORMAT)

    text = str(value).strip()
    if _DMY_RE.match(text):
        return text

    try:
        parsed = date_parser.parse(text, dayfirst=not _ISO_RE.match(text))
    except (ValueError, OverflowError):
        return text
    return parsed.strftime(DATE_FORMAT)


def parse_number(value) -> Optional[float]:
    """
    Parse an amount written with `.` thousands and `,` decimal separators

    Returns None for empty or unparseable cells; zero is a valid amount.
    """
    if is_blank(value):
        return None
    if _is_number(value):
        return float(value)

    cleaned = _CURRENCY_RE.sub("", str(value)).replace(".", "").replace(",", ".", 1)
    match = _LEADING_FLOAT_RE.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def parse_int(value, default: int = 1) -> int:
    """Leading integer of a cell, falling back to `default` when missing or < 1"""
    if is_blank(value):
        return default
    if _is_number(value):
        number = int(value)
    else:
        match = _LEADING_INT_RE.match(str(value))
        if not match:
            return default
        number = int(match.group(1))
    return number if number >= 1 else default


def parse_boolean(value) -> bool:
    if is_blank(value):
        return False
    if isinstance(value, bool):
        return value
    return str(value).lower().strip() in TRUE_WORDS


def parse_text(value) -> str:
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_value(value, field: str) -> NormalizedValue:
    """
    Map a raw cell to its canonical enumeration value

    Args:
        value: Raw cell value
        field: One of "payment_method", "entity", "responsible"

    Returns:
        NormalizedValue(matched, value): the canonical value when a synonym
        matches, otherwise the raw text unchanged
    """
    raw = parse_text(value)
    if not raw:
        return NormalizedValue(False, "")

    canonical = SYNONYMS[field].get(raw.lower())
    if canonical is None:
        return NormalizedValue(False, raw)
    return NormalizedValue(True, canonical)
