# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Ledger entry model for AFS Builder.

A ledger entry is one line of a trial balance: an account with its debit
and credit totals and a signed balance. Entries are immutable values; the
classifier returns new entries instead of mutating the ones it receives.

Amount convention
-----------------
- ``debit_amount`` / ``credit_amount`` are unsigned magnitudes used by the
  trial balance validator.
- ``balance`` is signed (``debit - credit`` for imported files) and is the
  figure consumed by the statement builders, which normalize its sign per
  account type.

Malformed amounts never abort a computation: ``parse_amount`` coerces them
to zero so that a single bad row only degrades its own contribution.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any, Optional


class AccountType(StrEnum):
    """The five account types, plus UNKNOWN for unclassifiable accounts."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    UNKNOWN = "UNKNOWN"


def parse_amount(value: Any) -> float:
    """Convert a raw amount into a float, coercing anything unusable to 0.0.

    Accepted inputs:
        - int / float (NaN and infinities become 0.0),
        - strings such as "1,234.50" or "  -12 " (thousands separators and
          surrounding whitespace are ignored).

    Everything else (None, empty strings, free text, booleans, objects)
    yields 0.0.

    Args:
        value: Raw amount as found in a record.

    Returns:
        A finite float.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace(",", "").strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if not math.isfinite(number):
        return 0.0
    return number


def parse_account_type(value: Any) -> Optional[AccountType]:
    """Return the AccountType named by ``value``, or None when absent/invalid."""
    if value is None:
        return None
    if isinstance(value, AccountType):
        return value
    text = str(value).strip().upper()
    if not text:
        return None
    try:
        return AccountType(text)
    except ValueError:
        return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    # pandas hands missing cells over as NaN floats
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class LedgerEntry:
    """
    One trial balance line.

    Attributes:
        account_number: Account code as a string (e.g. '1050').
        account_name: Account label (e.g. 'Petty Cash').
        balance: Signed balance consumed by the statement builders.
        debit_amount: Debit total (unsigned).
        credit_amount: Credit total (unsigned).
        account_type: Optional manual classification. When None, the
            classifier derives it from the account number.
        mapped_line_item: Optional manual line-item key. When None, the
            account mapping overrides are consulted.
    """

    account_number: str
    account_name: str = ""
    balance: float = 0.0
    debit_amount: float = 0.0
    credit_amount: float = 0.0
    account_type: Optional[AccountType] = None
    mapped_line_item: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LedgerEntry":
        """Build an entry from a mapping (dict, pandas row, database record).

        Missing keys default to empty values; amounts go through
        ``parse_amount`` and the account type through ``parse_account_type``.
        """
        return cls(
            account_number=_optional_text(record.get("account_number")) or "",
            account_name=_optional_text(record.get("account_name")) or "",
            balance=parse_amount(record.get("balance")),
            debit_amount=parse_amount(record.get("debit_amount")),
            credit_amount=parse_amount(record.get("credit_amount")),
            account_type=parse_account_type(record.get("account_type")),
            mapped_line_item=_optional_text(record.get("mapped_line_item")),
        )

    def with_classification(
        self,
        account_type: Optional[AccountType] = None,
        mapped_line_item: Optional[str] = None,
    ) -> "LedgerEntry":
        """Return a copy with missing classification fields filled in.

        Values already present on the entry always win.
        """
        return replace(
            self,
            account_type=self.account_type or account_type,
            mapped_line_item=self.mapped_line_item or mapped_line_item,
        )

    def to_record(self) -> dict[str, Any]:
        """Return the entry as a plain dictionary (e.g. for DataFrames)."""
        return {
            "account_number": self.account_number,
            "account_name": self.account_name,
            "balance": self.balance,
            "debit_amount": self.debit_amount,
            "credit_amount": self.credit_amount,
            "account_type": self.account_type.value if self.account_type else None,
            "mapped_line_item": self.mapped_line_item,
        }


def as_entry(item: Any) -> LedgerEntry:
    """Return ``item`` as a LedgerEntry, converting mappings when needed."""
    if isinstance(item, LedgerEntry):
        return item
    if isinstance(item, Mapping):
        return LedgerEntry.from_record(item)
    raise TypeError(
        f"Expected a LedgerEntry or a mapping, got {type(item).__name__}."
    )
