# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Line-item catalogue for AFS Builder.

The catalogue is the closed list of statement lines that ledger balances
can be mapped to. Each line item belongs to exactly one section of one
statement and carries the aggregation rule the builders apply to it:

- ``signed``   → add the normalized balance as-is (asset sections),
- ``absolute`` → add the absolute normalized balance (equity, liability
  sections and every mappable income statement line),
- ``derived``  → computed by the income statement cascade, never mapped.

Sections
--------
Statement of Financial Position:
    current_assets, non_current_assets, equity, current_liabilities,
    non_current_liabilities

Statement of Comprehensive Income:
    income_statement (a single flat section)

The module also holds the default account-number ranges used to suggest
(or, when configured, assign) a line item from an account number.

Both tables are immutable and built once at import time. Builders look a
key up with ``Catalogue.get`` instead of probing section contents.
"""

from dataclasses import dataclass
from typing import Optional

FINANCIAL_POSITION = "STATEMENT_OF_FINANCIAL_POSITION"
COMPREHENSIVE_INCOME = "STATEMENT_OF_COMPREHENSIVE_INCOME"

CURRENT_ASSETS = "current_assets"
NON_CURRENT_ASSETS = "non_current_assets"
EQUITY = "equity"
CURRENT_LIABILITIES = "current_liabilities"
NON_CURRENT_LIABILITIES = "non_current_liabilities"
INCOME_STATEMENT = "income_statement"

POSITION_SECTIONS: tuple[str, ...] = (
    CURRENT_ASSETS,
    NON_CURRENT_ASSETS,
    EQUITY,
    CURRENT_LIABILITIES,
    NON_CURRENT_LIABILITIES,
)
ASSET_SECTIONS: frozenset[str] = frozenset({CURRENT_ASSETS, NON_CURRENT_ASSETS})

SECTION_LABELS: dict[str, str] = {
    CURRENT_ASSETS: "Current assets",
    NON_CURRENT_ASSETS: "Non-current assets",
    EQUITY: "Equity",
    CURRENT_LIABILITIES: "Current liabilities",
    NON_CURRENT_LIABILITIES: "Non-current liabilities",
    INCOME_STATEMENT: "Statement of comprehensive income",
}

SIGNED = "signed"
ABSOLUTE = "absolute"
DERIVED = "derived"


@dataclass(frozen=True)
class LineItemDef:
    """Definition of a single statement line.

    Attributes:
        key: Stable identifier used in mappings (e.g. 'trade_receivables').
        label: Human-readable label for display.
        section: Section the line belongs to (one of the section constants).
        statement: FINANCIAL_POSITION or COMPREHENSIVE_INCOME.
        aggregation: 'signed', 'absolute' or 'derived'.
        display_order: Ordering hint used when rendering the statement.
    """

    key: str
    label: str
    section: str
    statement: str
    aggregation: str
    display_order: int

    @property
    def is_mappable(self) -> bool:
        """True if ledger balances can be mapped onto this line."""
        return self.aggregation != DERIVED


def _position_item(key: str, label: str, section: str, order: int) -> LineItemDef:
    aggregation = SIGNED if section in ASSET_SECTIONS else ABSOLUTE
    return LineItemDef(key, label, section, FINANCIAL_POSITION, aggregation, order)


def _income_item(
    key: str, label: str, order: int, aggregation: str = ABSOLUTE
) -> LineItemDef:
    return LineItemDef(
        key, label, INCOME_STATEMENT, COMPREHENSIVE_INCOME, aggregation, order
    )


class Catalogue:
    """Closed, immutable lookup from line-item key to its definition."""

    def __init__(self, items: tuple[LineItemDef, ...]):
        by_key: dict[str, LineItemDef] = {}
        for item in items:
            if item.key in by_key:
                raise ValueError(f"Duplicate line item key '{item.key}' in catalogue.")
            by_key[item.key] = item
        self.items: tuple[LineItemDef, ...] = tuple(
            sorted(items, key=lambda i: i.display_order)
        )
        self._by_key = by_key

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: Optional[str]) -> Optional[LineItemDef]:
        """Return the definition of ``key``, or None if it is not catalogued."""
        if key is None:
            return None
        return self._by_key.get(key)

    def section_of(self, key: str) -> Optional[str]:
        item = self.get(key)
        return item.section if item else None

    def keys_in(self, section: str) -> tuple[str, ...]:
        """Return the keys of ``section`` in display order."""
        return tuple(i.key for i in self.items if i.section == section)

    def mappable_keys(self, statement: Optional[str] = None) -> frozenset[str]:
        """Return every key a ledger balance may be mapped to.

        Args:
            statement: Restrict to FINANCIAL_POSITION or COMPREHENSIVE_INCOME.
        """
        return frozenset(
            i.key
            for i in self.items
            if i.is_mappable and (statement is None or i.statement == statement)
        )

    def label(self, key: str) -> str:
        item = self.get(key)
        return item.label if item else key


DEFAULT_CATALOGUE = Catalogue(
    (
        _position_item("cash", "Cash and cash equivalents", CURRENT_ASSETS, 10),
        _position_item("trade_receivables", "Trade receivables", CURRENT_ASSETS, 20),
        _position_item("other_receivables", "Other receivables", CURRENT_ASSETS, 30),
        _position_item("inventories", "Inventories", CURRENT_ASSETS, 40),
        _position_item("prepayments", "Prepayments", CURRENT_ASSETS, 50),
        _position_item(
            "property_plant_equipment",
            "Property, plant and equipment",
            NON_CURRENT_ASSETS,
            60,
        ),
        _position_item(
            "intangible_assets", "Intangible assets", NON_CURRENT_ASSETS, 70
        ),
        _position_item("investments", "Investments", NON_CURRENT_ASSETS, 80),
        _position_item(
            "deferred_tax_asset", "Deferred tax asset", NON_CURRENT_ASSETS, 90
        ),
        _position_item("share_capital", "Share capital", EQUITY, 100),
        _position_item("retained_earnings", "Retained earnings", EQUITY, 110),
        _position_item("other_reserves", "Other reserves", EQUITY, 120),
        _position_item("trade_payables", "Trade payables", CURRENT_LIABILITIES, 130),
        _position_item("other_payables", "Other payables", CURRENT_LIABILITIES, 140),
        _position_item(
            "short_term_borrowings",
            "Short-term borrowings",
            CURRENT_LIABILITIES,
            150,
        ),
        _position_item(
            "current_tax_liability",
            "Current tax liability",
            CURRENT_LIABILITIES,
            160,
        ),
        _position_item(
            "long_term_borrowings",
            "Long-term borrowings",
            NON_CURRENT_LIABILITIES,
            170,
        ),
        _position_item(
            "deferred_tax_liability",
            "Deferred tax liability",
            NON_CURRENT_LIABILITIES,
            180,
        ),
        _income_item("revenue", "Revenue", 200),
        _income_item("cost_of_sales", "Cost of sales", 210),
        _income_item("gross_profit", "Gross profit", 220, DERIVED),
        _income_item("other_income", "Other income", 230),
        _income_item("administrative_expenses", "Administrative expenses", 240),
        _income_item("distribution_costs", "Distribution costs", 250),
        _income_item("other_expenses", "Other expenses", 260),
        _income_item("operating_profit", "Operating profit", 270, DERIVED),
        _income_item("finance_income", "Finance income", 280),
        _income_item("finance_costs", "Finance costs", 290),
        _income_item("profit_before_tax", "Profit before tax", 300, DERIVED),
        _income_item("tax_expense", "Income tax expense", 310),
        _income_item("profit_for_year", "Profit for the year", 320, DERIVED),
    )
)


# ---------------------------------------------------------------------------
# Default account-number ranges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountRange:
    """Inclusive account-number range mapped to a line item."""

    start: int
    end: int
    line_item: str

    def contains(self, number: int) -> bool:
        return self.start <= number <= self.end


# Order matters: the first matching range wins.
DEFAULT_ACCOUNT_RANGES: tuple[AccountRange, ...] = (
    # Assets (1000-2999)
    AccountRange(1000, 1199, "cash"),
    AccountRange(1200, 1299, "trade_receivables"),
    AccountRange(1300, 1399, "inventories"),
    AccountRange(1400, 1499, "other_receivables"),
    AccountRange(1500, 1599, "prepayments"),
    AccountRange(2000, 2199, "property_plant_equipment"),
    AccountRange(2200, 2299, "intangible_assets"),
    AccountRange(2300, 2399, "investments"),
    # Liabilities (3000-4999)
    AccountRange(3000, 3199, "trade_payables"),
    AccountRange(3200, 3299, "other_payables"),
    AccountRange(3300, 3399, "short_term_borrowings"),
    AccountRange(3400, 3499, "current_tax_liability"),
    AccountRange(4000, 4199, "long_term_borrowings"),
    AccountRange(4200, 4299, "deferred_tax_liability"),
    # Equity (5000-5999)
    AccountRange(5000, 5199, "share_capital"),
    AccountRange(5800, 5999, "retained_earnings"),
    # Revenue (6000-6999)
    AccountRange(6000, 6999, "revenue"),
    # Expenses (7000-8999)
    AccountRange(7000, 7299, "cost_of_sales"),
    AccountRange(7300, 7599, "administrative_expenses"),
    AccountRange(7600, 7799, "distribution_costs"),
    AccountRange(8000, 8999, "other_expenses"),
)
