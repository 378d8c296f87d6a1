"""
Input validators for Brazilian identifiers and form values.
"""

import json
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

PLATE_PATTERN = re.compile(r"^[A-Z]{3}-\d[A-Z0-9]\d{2}$", re.IGNORECASE)
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def only_digits(value: str) -> str:
    """Strip every non-digit character."""
    return re.sub(r"\D", "", value or "")


def is_valid_cpf(cpf: str) -> bool:
    """
    Validate a CPF by length and check digits.

    Args:
        cpf: CPF, with or without punctuation

    Returns:
        True if the CPF has 11 digits, is not a repeated digit and both check digits match
    """
    digits = only_digits(cpf)
    if len(digits) != 11 or digits == digits[0] * 11:
        return False

    for position in (9, 10):
        total = sum(int(digits[i]) * (position + 1 - i) for i in range(position))
        remainder = (total * 10) % 11
        if remainder == 10:
            remainder = 0
        if remainder != int(digits[position]):
            return False
    return True


def is_valid_plate(plate: str) -> bool:
    """Accept old (ABC-1234) and Mercosul (ABC-1D23) plates."""
    if not plate or not isinstance(plate, str):
        return False
    return bool(PLATE_PATTERN.match(plate.strip()))


def normalize_plate(plate: str) -> str:
    """Uppercase and trim a plate."""
    if not plate:
        return ""
    return plate.strip().upper()


def is_valid_date(value: str) -> bool:
    """Validate a YYYY-MM-DD date string."""
    if not value or not ISO_DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_positive_number(value: Any) -> bool:
    """True for finite numbers greater than zero."""
    if isinstance(value, bool):
        return False
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return False
    return number.is_finite() and number > 0


def coerce_flag(value: Any) -> bool:
    """Normalise a 0/1/null/bool flag from the backend."""
    if value is None or value == "":
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return bool(value)


def coerce_date(value: Any) -> Any:
    """Reduce ISO timestamps to their date part; other values pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


def coerce_json_list(value: Any) -> list[Any]:
    """
    Parse a list field that may arrive JSON-encoded as a string.

    Args:
        value: List, JSON string, or null

    Returns:
        Parsed list (empty for null or blank)

    Raises:
        ValueError: If the string is not a JSON array
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Expected a JSON array, got {value!r}") from e
    if not isinstance(value, list):
        raise ValueError(f"Expected a list, got {type(value).__name__}")
    return value
