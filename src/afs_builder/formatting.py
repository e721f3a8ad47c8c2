# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Display formatting and identifier validation for AFS Builder.

Pure helpers used by views.py, the CLI and any external report generator:

- currency and percentage formatting,
- financial year derivation (South African companies commonly run a
  March-February year, so the default start month is 3),
- validation of company registration, income tax and VAT numbers.

None of these functions touch statement data; they only turn numbers
into strings or check string formats.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Union

# Company registration number: YYYY/NNNNNN/NN (e.g. 2015/123456/07).
REGISTRATION_NUMBER_PATTERN = re.compile(r"^\d{4}/\d{6}/\d{2}$")
# Income tax and VAT numbers: ten digits.
TAX_NUMBER_PATTERN = re.compile(r"^\d{10}$")
VAT_NUMBER_PATTERN = re.compile(r"^\d{10}$")


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _group(value: float, decimals: int, thousands_sep: str, decimal_sep: str) -> str:
    text = f"{value:,.{decimals}f}"
    if thousands_sep == "," and decimal_sep == ".":
        return text
    # Swap through a placeholder so ',' and '.' can trade places.
    return (
        text.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands_sep)
    )


def format_currency(
    amount: Any,
    include_currency: bool = True,
    symbol: str = "R",
    thousands_sep: str = ",",
    decimal_sep: str = ".",
) -> str:
    """Format a monetary amount with two decimals and grouped thousands.

    Examples:
        1234.5      → 'R 1,234.50'
        -1234.5     → '-R 1,234.50'
        1234.5 (include_currency=False) → '1,234.50'
        'abc'       → 'R 0.00'

    Args:
        amount: Amount to format. Non-numeric and non-finite values format as zero.
        include_currency: Prefix the currency symbol.
        symbol: Currency symbol (default 'R', South African rand).
        thousands_sep: Grouping separator.
        decimal_sep: Decimal separator.
    """
    if not _is_number(amount):
        amount = 0.0

    formatted = _group(abs(amount), 2, thousands_sep, decimal_sep)
    sign = "-" if amount < 0 else ""
    if include_currency:
        return f"{sign}{symbol} {formatted}"
    return f"{sign}{formatted}"


def format_percentage(value: Any, decimal_places: int = 2) -> str:
    """Format a ratio as a percentage (0.1234 → '12.34%').

    Non-numeric and non-finite values format as zero.
    """
    if not _is_number(value):
        value = 0.0
    return f"{value * 100:.{decimal_places}f}%"


def _to_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ValueError(
            f"Invalid date: {value!r}. Expected an ISO date (YYYY-MM-DD)."
        ) from exc


def financial_year(value: Union[date, datetime, str], start_month: int = 3) -> int:
    """Return the financial year a date falls in.

    A financial year is named after the calendar year in which it ends.
    With the default March start, 15 March 2023 belongs to financial year
    2024 and 15 February 2024 also belongs to 2024.

    Args:
        value: date, datetime or ISO date string.
        start_month: First month of the financial year (1-12). Dates in or
            after this month roll forward to the next year's number.

    Raises:
        ValueError: if the date cannot be parsed or start_month is invalid.
    """
    if not 1 <= start_month <= 12:
        raise ValueError("start_month must be between 1 and 12.")
    d = _to_date(value)
    if d.month >= start_month:
        return d.year + 1
    return d.year


def _matches(pattern: re.Pattern[str], value: Any) -> bool:
    if not value:
        return False
    return pattern.fullmatch(str(value)) is not None


def validate_registration_number(value: Any) -> bool:
    """True for company registration numbers formatted YYYY/NNNNNN/NN."""
    return _matches(REGISTRATION_NUMBER_PATTERN, value)


def validate_tax_number(value: Any) -> bool:
    """True for ten-digit income tax reference numbers."""
    return _matches(TAX_NUMBER_PATTERN, value)


def validate_vat_number(value: Any) -> bool:
    """True for ten-digit VAT registration numbers."""
    return _matches(VAT_NUMBER_PATTERN, value)
