# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for AFS Builder.

This module turns the statement dataclasses built by ``engine`` and the
ratio results built by ``ratios`` into pandas DataFrames ready for display
or CSV export.

Statement views share the columns:

    display_order, key, name, section, type, amount

where ``type`` is:

- "line":     a catalogued line item,
- "subtotal": a section total or an income statement subtotal,
- "total":    a statement total (total assets, total equity and
              liabilities, profit for the year).

``display_order`` is renumbered 10, 20, 30, ... after the rows have been
arranged, in the same way for every view.

Amounts are kept numeric. ``with_formatted_amounts`` adds a text column
for printing (e.g. 'R 1,234.50').
"""

from collections.abc import Iterable
from typing import Any

import pandas as pd

from .catalogue import (
    COMPREHENSIVE_INCOME,
    DEFAULT_CATALOGUE,
    INCOME_STATEMENT,
    POSITION_SECTIONS,
    SECTION_LABELS,
    Catalogue,
)
from .config import DisplayConfig
from .engine import ComprehensiveIncome, FinancialPosition
from .formatting import format_currency, format_percentage
from .ledger import as_entry
from .ratios import CATEGORY_ORDER, RatioResult

STATEMENT_COLUMNS = ["display_order", "key", "name", "section", "type", "amount"]
RATIO_COLUMNS = ["key", "label", "value", "unit", "category", "notes"]
UNMAPPED_COLUMNS = [
    "account_number",
    "account_name",
    "account_type",
    "mapped_line_item",
    "balance",
]

# Cascade results shown between the lines they are computed from.
_INCOME_SUBTOTALS = frozenset(
    {"gross_profit", "operating_profit", "profit_before_tax"}
)


def _renumber_display_order(
    df: pd.DataFrame, start: int = 10, step: int = 10
) -> pd.DataFrame:
    """Reassign display_order to be strictly sequential: start, start+step, ...
    Preserves the current order of the lines (as it appears in df).
    """
    df = df.copy()
    df = df.reset_index(drop=True)
    df["display_order"] = [start + i * step for i in range(len(df))]
    return df


def _finalize_view(rows: list[dict[str, Any]]) -> pd.DataFrame:
    """Build the DataFrame, renumber display_order and order the columns."""
    if not rows:
        return pd.DataFrame(columns=STATEMENT_COLUMNS)
    df = _renumber_display_order(pd.DataFrame(rows))
    return df[STATEMENT_COLUMNS]


def position_to_dataframe(
    position: FinancialPosition, catalogue: Catalogue = DEFAULT_CATALOGUE
) -> pd.DataFrame:
    """Return the Statement of Financial Position as a flat table.

    Rows are laid out section by section in catalogue order, each section
    followed by its total. Total assets comes after the two asset
    sections; total equity and liabilities closes the statement.

    Args:
        position: Statement built by ``engine.build_financial_position``.
        catalogue: Catalogue providing labels and line ordering.
    """
    rows: list[dict[str, Any]] = []

    for section_name in POSITION_SECTIONS:
        section = position.section(section_name)
        for key in catalogue.keys_in(section_name):
            rows.append(
                {
                    "key": key,
                    "name": catalogue.label(key),
                    "section": section_name,
                    "type": "line",
                    "amount": round(section.lines.get(key, 0.0), 2),
                }
            )
        rows.append(
            {
                "key": f"total_{section_name}",
                "name": f"Total {SECTION_LABELS[section_name].lower()}",
                "section": section_name,
                "type": "subtotal",
                "amount": round(section.total, 2),
            }
        )
        if section_name == "non_current_assets":
            rows.append(
                {
                    "key": "total_assets",
                    "name": "Total assets",
                    "section": "",
                    "type": "total",
                    "amount": round(position.total_assets, 2),
                }
            )

    rows.append(
        {
            "key": "total_equity_and_liabilities",
            "name": "Total equity and liabilities",
            "section": "",
            "type": "total",
            "amount": round(position.total_equity_and_liabilities, 2),
        }
    )
    return _finalize_view(rows)


def income_to_dataframe(
    income: ComprehensiveIncome, catalogue: Catalogue = DEFAULT_CATALOGUE
) -> pd.DataFrame:
    """Return the Statement of Comprehensive Income as a flat table.

    Lines follow the catalogue display order, which interleaves the
    cascade subtotals (gross profit, operating profit, profit before tax)
    with the lines they are computed from. Amounts are shown as stored:
    expense lines are positive and subtracted by the cascade.
    """
    values = income.to_dict()
    rows: list[dict[str, Any]] = []

    for item in catalogue.items:
        if item.statement != COMPREHENSIVE_INCOME or item.key not in values:
            continue
        if item.key == "profit_for_year":
            row_type = "total"
        elif item.key in _INCOME_SUBTOTALS:
            row_type = "subtotal"
        else:
            row_type = "line"
        rows.append(
            {
                "key": item.key,
                "name": item.label,
                "section": INCOME_STATEMENT,
                "type": row_type,
                "amount": round(values[item.key], 2),
            }
        )

    return _finalize_view(rows)


def unmapped_to_dataframe(entries: Iterable[Any]) -> pd.DataFrame:
    """Return entries left out of a statement, one row per entry."""
    rows = []
    for raw in entries:
        entry = as_entry(raw)
        rows.append(
            {
                "account_number": entry.account_number,
                "account_name": entry.account_name,
                "account_type": (
                    entry.account_type.value if entry.account_type else ""
                ),
                "mapped_line_item": entry.mapped_line_item or "",
                "balance": round(entry.balance, 2),
            }
        )
    return pd.DataFrame(rows, columns=UNMAPPED_COLUMNS)


def ratios_to_dataframe(ratios: list[RatioResult], decimals: int) -> pd.DataFrame:
    """
    Convert a list of RatioResult objects into a pandas DataFrame.

    The resulting DataFrame has the following columns:
        - key:      Internal ratio identifier (e.g. "current_ratio").
        - label:    Human-readable label to display.
        - value:    Numeric value, rounded to the requested number of
                    decimals (plus two for percent ratios, which are
                    fractions), or NaN if the ratio could not be computed.
        - unit:     Unit hint ("ratio" or "percent").
        - category: "liquidity", "profitability", "efficiency" or "leverage".
        - notes:    Formula description.

    Args:
        ratios:
            List of RatioResult instances as returned by
            ``ratios.ratio_results``.
        decimals:
            Number of decimal places to use when rounding numeric values.

    Returns:
        A pandas DataFrame containing one row per ratio, sorted by
        category (liquidity, profitability, efficiency, leverage, then
        others). Ratios keep their definition order inside a category.
    """
    if not ratios:
        return pd.DataFrame(columns=RATIO_COLUMNS)

    category_order = {name: i for i, name in enumerate(CATEGORY_ORDER)}

    rows: list[dict[str, object]] = []
    for r in ratios:
        if r.value is None:
            value = float("nan")
        else:
            # Percent ratios are fractions: keep two more digits.
            digits = decimals + 2 if r.unit == "percent" else decimals
            value = round(r.value, digits)

        rows.append(
            {
                "key": r.key,
                "label": r.label,
                "value": value,
                "unit": r.unit,
                "category": r.category,
                "notes": r.notes,
            }
        )

    df = pd.DataFrame(rows)

    df["__category_order__"] = df["category"].map(
        lambda c: category_order.get(c, 99)
    )
    df = df.sort_values(["__category_order__"], kind="stable").drop(
        columns=["__category_order__"]
    )
    df = df.reset_index(drop=True)

    return df[RATIO_COLUMNS]


# ---------------------------------------------------------------------------
# Formatted columns (printing only)
# ---------------------------------------------------------------------------


def with_formatted_amounts(
    df: pd.DataFrame, display: DisplayConfig = DisplayConfig()
) -> pd.DataFrame:
    """Return a copy of a statement view with a 'formatted' text column."""
    out = df.copy()
    out["formatted"] = [
        format_currency(
            amount,
            symbol=display.currency_symbol,
            thousands_sep=display.thousands_sep,
            decimal_sep=display.decimal_sep,
        )
        for amount in out["amount"]
    ]
    return out


def with_formatted_ratios(
    df: pd.DataFrame, display: DisplayConfig = DisplayConfig()
) -> pd.DataFrame:
    """Return a copy of a ratio view with a 'formatted' text column.

    Percent ratios are rendered with ``format_percentage``, other ratios
    as plain numbers; ratios that could not be computed show 'n/a'.
    """
    out = df.copy()
    formatted = []
    for value, unit in zip(out["value"], out["unit"]):
        if pd.isna(value):
            formatted.append("n/a")
        elif unit == "percent":
            formatted.append(format_percentage(value, display.ratio_decimals))
        else:
            formatted.append(f"{value:.{display.ratio_decimals}f}")
    out["formatted"] = formatted
    return out
