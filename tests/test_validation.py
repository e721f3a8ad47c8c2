import pytest

from afs_builder.engine import build_financial_position
from afs_builder.ledger import AccountType, LedgerEntry
from afs_builder.validation import (
    check_accounting_identity,
    validate_trial_balance,
)


@pytest.fixture
def balanced_entries() -> list[LedgerEntry]:
    return [
        LedgerEntry("1000", "Bank", 1500.0, debit_amount=1500.0),
        LedgerEntry("3000", "Trade payables", -400.0, credit_amount=400.0),
        LedgerEntry("5000", "Share capital", -1000.0, credit_amount=1000.0),
        LedgerEntry("7300", "Rent", 900.0, debit_amount=900.0),
        LedgerEntry("6000", "Sales", -1000.0, credit_amount=1000.0),
    ]


def test_validate_trial_balance_balanced(balanced_entries) -> None:
    check = validate_trial_balance(balanced_entries)

    assert check.is_balanced is True
    assert check.total_debits == pytest.approx(2400.0)
    assert check.total_credits == pytest.approx(2400.0)
    assert check.difference == pytest.approx(0.0)


def test_validate_trial_balance_reports_induced_skew(balanced_entries) -> None:
    """Raising one debit by 100 unbalances the set by exactly 100."""
    skewed = list(balanced_entries)
    first = skewed[0]
    skewed[0] = LedgerEntry(
        first.account_number,
        first.account_name,
        first.balance + 100.0,
        debit_amount=first.debit_amount + 100.0,
    )

    check = validate_trial_balance(skewed)

    assert check.is_balanced is False
    assert check.difference == pytest.approx(100.0)


def test_validate_trial_balance_tolerance() -> None:
    entries = [
        {"debit_amount": 100.004, "credit_amount": 0},
        {"debit_amount": 0, "credit_amount": 100.0},
    ]
    assert validate_trial_balance(entries).is_balanced is True
    assert validate_trial_balance(entries, tolerance=0.001).is_balanced is False


def test_validate_trial_balance_coerces_bad_amounts() -> None:
    entries = [
        {"debit_amount": "1,000.00", "credit_amount": None},
        {"debit_amount": "abc", "credit_amount": "1000"},
        {"account_number": "9999"},
    ]
    check = validate_trial_balance(entries)

    assert check.is_balanced is True
    assert check.total_debits == pytest.approx(1000.0)
    assert check.total_credits == pytest.approx(1000.0)


@pytest.mark.parametrize("value", [None, "entries", 42, {"debit_amount": 1}])
def test_validate_trial_balance_non_sequence_input(value) -> None:
    check = validate_trial_balance(value)

    assert check.is_balanced is False
    assert (check.total_debits, check.total_credits, check.difference) == (0, 0, 0)


def test_validate_trial_balance_empty_list_is_balanced() -> None:
    assert validate_trial_balance([]).is_balanced is True


def test_check_accounting_identity_holds_and_fails() -> None:
    balanced = build_financial_position(
        [
            LedgerEntry("1000", balance=1000.0, mapped_line_item="cash"),
            LedgerEntry("5000", balance=-1000.0, mapped_line_item="share_capital"),
        ]
    )
    identity = check_accounting_identity(balanced)
    assert identity.holds is True
    assert identity.difference == pytest.approx(0.0)

    lopsided = build_financial_position(
        [
            LedgerEntry(
                "1000",
                balance=1250.0,
                account_type=AccountType.ASSET,
                mapped_line_item="cash",
            ),
            LedgerEntry("5000", balance=-1000.0, mapped_line_item="share_capital"),
        ]
    )
    identity = check_accounting_identity(lopsided)
    assert identity.holds is False
    assert identity.total_assets == pytest.approx(1250.0)
    assert identity.total_equity_and_liabilities == pytest.approx(1000.0)
    assert identity.difference == pytest.approx(250.0)
