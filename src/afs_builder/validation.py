# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Integrity checks for AFS Builder.

Two independent checks live here:

- ``validate_trial_balance``: total debits must equal total credits
  within a rounding tolerance. It is the gate a caller evaluates before
  generating statements; the builders never call it themselves.

- ``check_accounting_identity``: after building the Statement of
  Financial Position, total assets must equal total equity and
  liabilities. The builder does not enforce this; a mismatch is a data
  quality problem (unmapped accounts, misclassified balances) that the
  calling layer reports.

Both checks return result objects instead of raising.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .engine import FinancialPosition
from .ledger import LedgerEntry, parse_amount

DEFAULT_TOLERANCE = 0.01


@dataclass(frozen=True)
class TrialBalanceCheck:
    """Outcome of the debit/credit check."""

    is_balanced: bool
    total_debits: float
    total_credits: float
    difference: float


@dataclass(frozen=True)
class IdentityCheck:
    """Outcome of the assets = equity + liabilities check."""

    holds: bool
    total_assets: float
    total_equity_and_liabilities: float
    difference: float


def _debit_credit(item: Any) -> tuple[float, float]:
    if isinstance(item, LedgerEntry):
        return parse_amount(item.debit_amount), parse_amount(item.credit_amount)
    if isinstance(item, Mapping):
        return (
            parse_amount(item.get("debit_amount")),
            parse_amount(item.get("credit_amount")),
        )
    return 0.0, 0.0


def validate_trial_balance(
    entries: Any, tolerance: float = DEFAULT_TOLERANCE
) -> TrialBalanceCheck:
    """Check that total debits equal total credits.

    Args:
        entries: List or tuple of LedgerEntry instances or mappings with
            'debit_amount' / 'credit_amount' keys. Missing or non-numeric
            amounts count as zero.
        tolerance: Absolute tolerance in currency units (default 0.01).

    Returns:
        A TrialBalanceCheck. ``difference`` is debits minus credits.
        Anything other than a list/tuple yields an unbalanced, all-zero
        result.
    """
    if not isinstance(entries, (list, tuple)):
        return TrialBalanceCheck(
            is_balanced=False, total_debits=0.0, total_credits=0.0, difference=0.0
        )

    total_debits = 0.0
    total_credits = 0.0
    for item in entries:
        debit, credit = _debit_credit(item)
        total_debits += debit
        total_credits += credit

    difference = total_debits - total_credits
    return TrialBalanceCheck(
        is_balanced=abs(difference) < tolerance,
        total_debits=total_debits,
        total_credits=total_credits,
        difference=difference,
    )


def check_accounting_identity(
    position: FinancialPosition, tolerance: float = DEFAULT_TOLERANCE
) -> IdentityCheck:
    """Check total assets against total equity and liabilities.

    Args:
        position: Statement returned by ``build_financial_position``.
        tolerance: Absolute tolerance in currency units (default 0.01).

    Returns:
        An IdentityCheck; ``difference`` is assets minus equity and
        liabilities.
    """
    difference = position.total_assets - position.total_equity_and_liabilities
    return IdentityCheck(
        holds=abs(difference) < tolerance,
        total_assets=position.total_assets,
        total_equity_and_liabilities=position.total_equity_and_liabilities,
        difference=difference,
    )
