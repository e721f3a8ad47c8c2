# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Account classification for AFS Builder.

This module maps account numbers (and names) onto the chart-of-accounts
conventions used by the statement builders.

Responsibilities:
- Derive the account type from the account number
  (1000-2999 assets, 3000-4999 liabilities, 5000-5999 equity,
  6000-6999 revenue, 7000-8999 expenses, thousands-digit fallback).
- Infer an account type from the free-text category/name found in
  trial balance exports that carry no usable account number.
- Suggest candidate line items from the default account ranges and from
  keywords in the account name. Suggestions are advisory: the builders
  only consume a single, already resolved ``mapped_line_item``.
- Fill in missing classification fields on a list of entries.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .catalogue import DEFAULT_ACCOUNT_RANGES, AccountRange
from .ledger import AccountType, LedgerEntry, as_entry

__all__ = [
    "AccountType",
    "classify_account",
    "classify_entries",
    "default_line_item",
    "infer_account_type",
    "suggest_line_items",
]

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")

# (keywords, line item). A rule fires if any keyword is in the name.
_NAME_KEYWORD_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("cash", "bank"), "cash"),
    (("receivable", "debtor"), "trade_receivables"),
    (("inventory", "stock"), "inventories"),
    (("payable", "creditor"), "trade_payables"),
    (("revenue", "sale", "income"), "revenue"),
)

# Checked in order; the first pattern matching "category name" wins.
_TYPE_KEYWORD_RULES: tuple[tuple[re.Pattern[str], AccountType], ...] = (
    (
        re.compile(r"asset|receivable|inventory|bank|cash|prepay|debtor", re.I),
        AccountType.ASSET,
    ),
    (
        re.compile(r"liabil|payable|creditor|vat|paye|uif|sdl|loan", re.I),
        AccountType.LIABILITY,
    ),
    (re.compile(r"equity|capital|retained|share", re.I), AccountType.EQUITY),
    (re.compile(r"sales|revenue|income", re.I), AccountType.REVENUE),
    (
        re.compile(r"expense|cost|cogs|purchase|wage|salary|rent|admin", re.I),
        AccountType.EXPENSE,
    ),
)


def _parse_account_number(account_number: Any) -> Optional[int]:
    """Return the leading integer of an account number, or None.

    Only the leading digits are read, so '1050-01' gives 1050 and
    'Bank' gives None.
    """
    if account_number is None or isinstance(account_number, bool):
        return None
    if isinstance(account_number, int):
        return account_number
    match = _LEADING_INTEGER.match(str(account_number))
    if match is None:
        return None
    return int(match.group(1))


def classify_account(account_number: Any) -> AccountType:
    """Return the account type implied by an account number.

    Rules:
        - 1000-2999 → ASSET
        - 3000-4999 → LIABILITY
        - 5000-5999 → EQUITY
        - 6000-6999 → REVENUE
        - 7000-8999 → EXPENSE
        - otherwise the thousands digit decides:
          1-2 ASSET, 3-4 LIABILITY, 5 EQUITY, 6 REVENUE, 7-9 EXPENSE
        - non-numeric or out-of-range numbers → UNKNOWN

    UNKNOWN is a regular result, not an error; callers exclude such
    entries from the statements.
    """
    num = _parse_account_number(account_number)
    if num is None:
        return AccountType.UNKNOWN

    if 1000 <= num <= 2999:
        return AccountType.ASSET
    if 3000 <= num <= 4999:
        return AccountType.LIABILITY
    if 5000 <= num <= 5999:
        return AccountType.EQUITY
    if 6000 <= num <= 6999:
        return AccountType.REVENUE
    if 7000 <= num <= 8999:
        return AccountType.EXPENSE

    if num < 0:
        return AccountType.UNKNOWN
    thousands = num // 1000
    if thousands in (1, 2):
        return AccountType.ASSET
    if thousands in (3, 4):
        return AccountType.LIABILITY
    if thousands == 5:
        return AccountType.EQUITY
    if thousands == 6:
        return AccountType.REVENUE
    if thousands in (7, 8, 9):
        return AccountType.EXPENSE
    return AccountType.UNKNOWN


def infer_account_type(
    category: Any, account_name: Any, account_number: Any = None
) -> AccountType:
    """Infer an account type from a free-text category and account name.

    Used for trial balance exports, which often carry a category column
    ('Current Assets', 'Expenses', ...) but no usable account number.

    Order of resolution:
        1. keywords in "category name" (first matching rule wins),
        2. the account number, when it classifies to a known type,
        3. EXPENSE, the most common kind of unlabelled line in such exports.
    """
    text = f"{category or ''} {account_name or ''}".strip()
    for pattern, account_type in _TYPE_KEYWORD_RULES:
        if text and pattern.search(text):
            return account_type

    by_number = classify_account(account_number)
    if by_number is not AccountType.UNKNOWN:
        return by_number
    return AccountType.EXPENSE


def default_line_item(
    account_number: Any,
    ranges: tuple[AccountRange, ...] = DEFAULT_ACCOUNT_RANGES,
) -> Optional[str]:
    """Return the line item of the first range containing the account number."""
    num = _parse_account_number(account_number)
    if num is None:
        return None
    for account_range in ranges:
        if account_range.contains(num):
            return account_range.line_item
    return None


def suggest_line_items(
    account_number: Any,
    account_name: Optional[str],
    ranges: tuple[AccountRange, ...] = DEFAULT_ACCOUNT_RANGES,
) -> set[str]:
    """Suggest candidate line items for an account.

    Two heuristics are combined:
      - the account-number range table (at most one hit),
      - case-insensitive keywords in the account name
        (e.g. 'Petty Cash' → 'cash', 'Cost of sales' → 'cost_of_sales').

    Args:
        account_number: Account code (numeric or string).
        account_name: Account label, may be empty or None.
        ranges: Range table to use (defaults to the built-in table).

    Returns:
        The set of candidate line-item keys (possibly empty).
    """
    suggestions: set[str] = set()

    by_number = default_line_item(account_number, ranges)
    if by_number is not None:
        suggestions.add(by_number)

    name = str(account_name or "").lower()
    for keywords, line_item in _NAME_KEYWORD_RULES:
        if any(k in name for k in keywords):
            suggestions.add(line_item)
    if "cost" in name and "sale" in name:
        suggestions.add("cost_of_sales")

    return suggestions


def classify_entries(
    entries: Iterable[Any],
    account_mappings: Optional[Mapping[str, str]] = None,
    use_default_ranges: bool = False,
    ranges: tuple[AccountRange, ...] = DEFAULT_ACCOUNT_RANGES,
) -> list[LedgerEntry]:
    """Fill in missing account types and line items on ledger entries.

    For each entry (LedgerEntry or mapping):
      - ``account_type``: kept if present, else ``classify_account``;
      - ``mapped_line_item``: kept if present, else the override from
        ``account_mappings``, else (only when ``use_default_ranges``) the
        default account range.

    Name-keyword suggestions are never applied here.

    Returns:
        A new list of LedgerEntry instances; the input is left untouched.
    """
    overrides = account_mappings or {}
    classified: list[LedgerEntry] = []

    for raw in entries:
        entry = as_entry(raw)
        item = overrides.get(entry.account_number)
        if item is None and use_default_ranges:
            item = default_line_item(entry.account_number, ranges)

        account_type = None
        if entry.account_type is None:
            account_type = classify_account(entry.account_number)
            if account_type is AccountType.UNKNOWN:
                logger.debug(
                    "Account %r could not be classified from its number",
                    entry.account_number,
                )

        classified.append(entry.with_classification(account_type, item))

    return classified
