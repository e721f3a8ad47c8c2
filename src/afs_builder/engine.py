# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Statement builders for AFS Builder.

This module turns a flat list of classified ledger entries into the two
statutory statements of IFRS for SMEs:

1. Statement of Financial Position
   --------------------------------
   ``build_financial_position(entries, account_mappings)``:
   - resolves each entry's line item (its own ``mapped_line_item`` first,
     then the account-mapping overrides),
   - normalizes the balance sign (assets keep the recorded sign, every
     other account type is negated),
   - adds the normalized balance to asset lines, and its absolute value to
     equity and liability lines,
   - computes the section totals, ``total_assets`` and
     ``total_equity_and_liabilities``.

   The accounting identity (assets = equity + liabilities) is NOT enforced
   here. Callers check it with ``validation.check_accounting_identity``.

2. Statement of Comprehensive Income
   ---------------------------------
   ``build_comprehensive_income(entries, account_mappings)``:
   - keeps REVENUE and EXPENSE entries only,
   - adds the absolute balance of each entry to its line item,
   - runs the fixed subtotal cascade:
       gross_profit      = revenue - cost_of_sales
       operating_profit  = gross_profit - administrative_expenses
                           - distribution_costs - other_expenses
                           + other_income
       profit_before_tax = operating_profit + finance_income - finance_costs
       profit_for_year   = profit_before_tax - tax_expense

Unmapped entries
----------------
Entries without a resolvable line item or account type are left out of
the totals, exactly as before, but they are no longer lost: each statement
exposes them in its ``unmapped`` attribute so that callers can report
them. Entries that belong to the other statement (e.g. a revenue account
seen by the position builder) are skipped without being reported. An
asset, liability, equity or unknown account mapped to an income line is
reported by the income builder, since neither statement can carry it.

Both builders are pure: they never mutate their inputs and return equal
results for equal inputs.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional

from .accounts import classify_account
from .catalogue import (
    COMPREHENSIVE_INCOME,
    DEFAULT_CATALOGUE,
    FINANCIAL_POSITION,
    POSITION_SECTIONS,
    SIGNED,
    Catalogue,
)
from .ledger import AccountType, LedgerEntry, as_entry, parse_amount

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatementSection:
    """One section of the Statement of Financial Position.

    Attributes:
        lines: Read-only amount per line-item key, in catalogue order.
            Every key of the section is present (0.0 when nothing was
            mapped to it).
        total: Sum of ``lines``.
    """

    lines: Mapping[str, float] = field(hash=False)
    total: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", MappingProxyType(dict(self.lines)))

    def __getitem__(self, key: str) -> float:
        return self.lines[key]

    def to_dict(self) -> dict[str, float]:
        return {**self.lines, "total": self.total}


@dataclass(frozen=True)
class FinancialPosition:
    """Statement of Financial Position (balance sheet)."""

    current_assets: StatementSection
    non_current_assets: StatementSection
    equity: StatementSection
    current_liabilities: StatementSection
    non_current_liabilities: StatementSection
    total_assets: float
    total_equity_and_liabilities: float
    unmapped: tuple[LedgerEntry, ...] = ()

    def section(self, name: str) -> StatementSection:
        """Return a section by its name (e.g. 'current_assets')."""
        if name not in POSITION_SECTIONS:
            raise KeyError(f"Unknown statement section: {name!r}")
        return getattr(self, name)

    @property
    def total_liabilities(self) -> float:
        return self.current_liabilities.total + self.non_current_liabilities.total

    def to_dict(self) -> dict[str, Any]:
        """Return the statement as plain nested numbers (no unmapped entries)."""
        out: dict[str, Any] = {
            name: self.section(name).to_dict() for name in POSITION_SECTIONS
        }
        out["total_assets"] = self.total_assets
        out["total_equity_and_liabilities"] = self.total_equity_and_liabilities
        return out


@dataclass(frozen=True)
class ComprehensiveIncome:
    """Statement of Comprehensive Income for a single period."""

    revenue: float = 0.0
    cost_of_sales: float = 0.0
    gross_profit: float = 0.0
    administrative_expenses: float = 0.0
    distribution_costs: float = 0.0
    other_expenses: float = 0.0
    other_income: float = 0.0
    operating_profit: float = 0.0
    finance_income: float = 0.0
    finance_costs: float = 0.0
    profit_before_tax: float = 0.0
    tax_expense: float = 0.0
    profit_for_year: float = 0.0
    unmapped: tuple[LedgerEntry, ...] = ()

    def to_dict(self) -> dict[str, float]:
        """Return the named amounts as a flat dictionary."""
        return {key: getattr(self, key) for key in INCOME_FIELDS}


INCOME_FIELDS: tuple[str, ...] = (
    "revenue",
    "cost_of_sales",
    "gross_profit",
    "administrative_expenses",
    "distribution_costs",
    "other_expenses",
    "other_income",
    "operating_profit",
    "finance_income",
    "finance_costs",
    "profit_before_tax",
    "tax_expense",
    "profit_for_year",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_line_item(
    entry: LedgerEntry, account_mappings: Mapping[str, str]
) -> Optional[str]:
    """Return the entry's own line item, falling back to the overrides."""
    return entry.mapped_line_item or account_mappings.get(entry.account_number)


def _resolve_account_type(entry: LedgerEntry) -> AccountType:
    return entry.account_type or classify_account(entry.account_number)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_financial_position(
    entries: Iterable[Any],
    account_mappings: Optional[Mapping[str, str]] = None,
    catalogue: Catalogue = DEFAULT_CATALOGUE,
) -> FinancialPosition:
    """Aggregate ledger entries into a Statement of Financial Position.

    Args:
        entries: LedgerEntry instances or mappings with the same keys.
        account_mappings: Optional account number → line-item key
            overrides, used when an entry has no ``mapped_line_item``.
        catalogue: Line-item catalogue (defaults to the built-in one).

    Returns:
        A FinancialPosition. Entries without a resolvable line item, with
        a key outside the catalogue, or with an UNKNOWN account type are
        listed in ``unmapped``.
    """
    overrides = account_mappings or {}

    # 1) One accumulator per section, pre-filled with every catalogued line
    #    so that empty lines still appear with 0.0.
    lines: dict[str, dict[str, float]] = {
        section: {key: 0.0 for key in catalogue.keys_in(section)}
        for section in POSITION_SECTIONS
    }
    unmapped: list[LedgerEntry] = []

    # 2) Route each entry to its line.
    for raw in entries:
        entry = as_entry(raw)
        mapped_item = _resolve_line_item(entry, overrides)
        item = catalogue.get(mapped_item)

        if item is None:
            logger.debug(
                "Skipping account %r: no known line item (%r)",
                entry.account_number,
                mapped_item,
            )
            unmapped.append(entry)
            continue

        if item.statement != FINANCIAL_POSITION:
            # Income statement line, handled by build_comprehensive_income.
            continue

        account_type = _resolve_account_type(entry)
        if account_type is AccountType.UNKNOWN:
            logger.debug(
                "Skipping account %r: account type is unknown", entry.account_number
            )
            unmapped.append(entry)
            continue

        # Assets carry normal debit balances, everything else normal credit.
        balance = parse_amount(entry.balance)
        adjusted = balance if account_type is AccountType.ASSET else -balance

        if item.aggregation == SIGNED:
            lines[item.section][item.key] += adjusted
        else:
            lines[item.section][item.key] += abs(adjusted)

    # 3) Section totals and statement totals.
    sections = {
        name: StatementSection(lines=values, total=sum(values.values()))
        for name, values in lines.items()
    }
    total_assets = (
        sections["current_assets"].total + sections["non_current_assets"].total
    )
    total_equity_and_liabilities = (
        sections["equity"].total
        + sections["current_liabilities"].total
        + sections["non_current_liabilities"].total
    )

    return FinancialPosition(
        current_assets=sections["current_assets"],
        non_current_assets=sections["non_current_assets"],
        equity=sections["equity"],
        current_liabilities=sections["current_liabilities"],
        non_current_liabilities=sections["non_current_liabilities"],
        total_assets=total_assets,
        total_equity_and_liabilities=total_equity_and_liabilities,
        unmapped=tuple(unmapped),
    )


def build_comprehensive_income(
    entries: Iterable[Any],
    account_mappings: Optional[Mapping[str, str]] = None,
    catalogue: Catalogue = DEFAULT_CATALOGUE,
) -> ComprehensiveIncome:
    """Aggregate revenue and expense entries into an income statement.

    Args:
        entries: LedgerEntry instances or mappings with the same keys.
        account_mappings: Optional account number → line-item key overrides.
        catalogue: Line-item catalogue (defaults to the built-in one).

    Returns:
        A ComprehensiveIncome with the subtotal cascade applied. Revenue
        and expense entries that cannot be placed on a mappable income
        line are listed in ``unmapped``, as are entries of any other type
        mapped to an income line.
    """
    overrides = account_mappings or {}
    mappable = catalogue.mappable_keys(COMPREHENSIVE_INCOME)

    # 1) Accumulate the absolute balance per line item.
    amounts: dict[str, float] = {key: 0.0 for key in INCOME_FIELDS}
    unmapped: list[LedgerEntry] = []

    for raw in entries:
        entry = as_entry(raw)
        account_type = _resolve_account_type(entry)
        mapped_item = _resolve_line_item(entry, overrides)

        if account_type not in (AccountType.REVENUE, AccountType.EXPENSE):
            # Reported only when mapped to an income line.
            if mapped_item in mappable:
                logger.debug(
                    "Skipping account %r: %s account on income line %r",
                    entry.account_number,
                    account_type.value,
                    mapped_item,
                )
                unmapped.append(entry)
            continue

        if mapped_item not in mappable or mapped_item not in amounts:
            logger.debug(
                "Skipping account %r: no income statement line (%r)",
                entry.account_number,
                mapped_item,
            )
            unmapped.append(entry)
            continue

        amounts[mapped_item] += abs(parse_amount(entry.balance))

    # 2) Subtotal cascade; each step only uses values computed before it.
    amounts["gross_profit"] = amounts["revenue"] - amounts["cost_of_sales"]
    amounts["operating_profit"] = (
        amounts["gross_profit"]
        - amounts["administrative_expenses"]
        - amounts["distribution_costs"]
        - amounts["other_expenses"]
        + amounts["other_income"]
    )
    amounts["profit_before_tax"] = (
        amounts["operating_profit"]
        + amounts["finance_income"]
        - amounts["finance_costs"]
    )
    amounts["profit_for_year"] = amounts["profit_before_tax"] - amounts["tax_expense"]

    return ComprehensiveIncome(**amounts, unmapped=tuple(unmapped))
