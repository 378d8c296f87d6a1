"""
pt-BR display formatting for money, quantities, dates and Brazilian identifiers.
"""

import datetime as dt
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

from freight_cms.data.validators import only_digits

Number = Union[Decimal, int, float, str, None]


def _to_decimal(value: Number) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_number(value: Number, decimals: int = 0) -> str:
    """
    Format a number with pt-BR separators.

    Args:
        value: Number to format (None counts as zero)
        decimals: Fixed number of decimal places

    Returns:
        e.g. format_number(1234.5, 2) -> "1.234,50"
    """
    number = _to_decimal(value)
    quantum = Decimal(1).scaleb(-decimals)
    rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{abs(rounded):,.{decimals}f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-{text}" if rounded < 0 else text


def format_currency(value: Number) -> str:
    """Two decimal places, no currency symbol (e.g. "1.234,56")."""
    return format_number(value, 2)


def format_price_per_liter(value: Number) -> str:
    return format_number(value, 4)


def format_price_per_km_ton(value: Number) -> str:
    return format_number(value, 6)


def format_date(value: Union[dt.date, str]) -> str:
    """Format a date as dd/mm/yyyy."""
    if isinstance(value, dt.datetime):
        value = value.date()
    if isinstance(value, str):
        value = dt.date.fromisoformat(value[:10])
    return value.strftime("%d/%m/%Y")


def format_balance(value: Number) -> str:
    """Currency string, or "-" when there is nothing to show."""
    number = _to_decimal(value)
    if number == 0:
        return "-"
    return format_currency(number)


def format_cpf(cpf: Optional[str]) -> str:
    """000.000.000-00, or the input unchanged if it is not 11 digits."""
    if not cpf:
        return "-"
    digits = only_digits(cpf)
    if len(digits) != 11:
        return cpf
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_phone(phone: Optional[str]) -> str:
    """(00) 00000-0000 for mobiles, (00) 0000-0000 for landlines."""
    if not phone:
        return "-"
    digits = only_digits(phone)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return phone


def format_plate(value: Any) -> str:
    """Uppercase a typed plate and insert the dash after the letters (ABC1D23 -> ABC-1D23)."""
    cleaned = re.sub(r"[^A-Z0-9]", "", str(value or "").upper())[:7]
    if len(cleaned) > 3:
        return f"{cleaned[:3]}-{cleaned[3:]}"
    return cleaned
