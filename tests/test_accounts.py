import pytest

from afs_builder.accounts import (
    AccountType,
    classify_account,
    classify_entries,
    default_line_item,
    infer_account_type,
    suggest_line_items,
)
from afs_builder.ledger import LedgerEntry


@pytest.mark.parametrize(
    "low, high, expected",
    [
        (1000, 2999, AccountType.ASSET),
        (3000, 4999, AccountType.LIABILITY),
        (5000, 5999, AccountType.EQUITY),
        (6000, 6999, AccountType.REVENUE),
        (7000, 8999, AccountType.EXPENSE),
    ],
)
def test_classify_account_ranges(low: int, high: int, expected: AccountType) -> None:
    """Every number of a range, including both bounds, maps to the range type."""
    for number in (low, low + 1, (low + high) // 2, high - 1, high):
        assert classify_account(number) is expected
        assert classify_account(str(number)) is expected


def test_classify_account_thousands_digit_fallback() -> None:
    """Numbers outside the explicit ranges use their thousands digit."""
    assert classify_account(9500) is AccountType.EXPENSE
    assert classify_account("9999") is AccountType.EXPENSE


@pytest.mark.parametrize(
    "value",
    [None, "", "Bank", "abc123", 999, 0, -1500, 10000, True],
)
def test_classify_account_unknown(value) -> None:
    """Non-numeric, out-of-range and negative numbers are UNKNOWN, not errors."""
    assert classify_account(value) is AccountType.UNKNOWN


def test_classify_account_reads_leading_digits() -> None:
    """Only the leading integer part of the account number is read."""
    assert classify_account("1050-01") is AccountType.ASSET
    assert classify_account(" 3100 ") is AccountType.LIABILITY


def test_suggest_line_items_petty_cash_deduplicated() -> None:
    """1050 'Petty Cash' is 'cash' by range and by keyword, reported once."""
    assert suggest_line_items(1050, "Petty Cash") == {"cash"}
    assert suggest_line_items("1050", "Petty Cash") == {"cash"}


def test_suggest_line_items_unions_both_heuristics() -> None:
    """Range and keyword suggestions are combined."""
    suggestions = suggest_line_items("1200", "Bank - current account")
    assert suggestions == {"trade_receivables", "cash"}


def test_suggest_line_items_cost_of_sales_keywords() -> None:
    """"cost" together with "sale" suggests cost_of_sales."""
    suggestions = suggest_line_items("7000", "Cost of Sales")
    # 'sale' also triggers the revenue keyword; suggestions are advisory.
    assert {"cost_of_sales", "revenue"} <= suggestions


def test_suggest_line_items_without_hits() -> None:
    """No range and no keyword gives an empty set."""
    assert suggest_line_items("9500", "Sundry") == set()
    assert suggest_line_items(None, None) == set()


def test_default_line_item_first_matching_range() -> None:
    """The default range table yields one line item or None."""
    assert default_line_item(1100) == "cash"
    assert default_line_item("3450") == "current_tax_liability"
    assert default_line_item(1900) is None
    assert default_line_item("Bank") is None


@pytest.mark.parametrize(
    "category, name, expected",
    [
        ("Current Assets", "Petty Cash", AccountType.ASSET),
        ("Current Liabilities", "VAT Payable", AccountType.LIABILITY),
        ("Equity", "Retained Earnings", AccountType.EQUITY),
        ("Sales", "Sales", AccountType.REVENUE),
        ("Expenses", "Bank Charges", AccountType.ASSET),
        ("Expenses", "Accounting Fees", AccountType.EXPENSE),
        ("", "", AccountType.EXPENSE),
    ],
)
def test_infer_account_type_keywords(category, name, expected) -> None:
    """Keyword rules are checked in order (asset rules before expense rules)."""
    assert infer_account_type(category, name) is expected


def test_infer_account_type_uses_number_before_default() -> None:
    """Without keywords the account number decides, then EXPENSE."""
    assert infer_account_type("", "Sundry", "5100") is AccountType.EQUITY
    assert infer_account_type("", "Sundry", "n/a") is AccountType.EXPENSE


def test_classify_entries_fills_missing_fields_only() -> None:
    """Types and line items already on an entry are never replaced."""
    entries = [
        LedgerEntry(account_number="1100", balance=50.0),
        LedgerEntry(
            account_number="1200",
            balance=10.0,
            account_type=AccountType.EQUITY,
            mapped_line_item="share_capital",
        ),
        {"account_number": "9500", "balance": "12.5"},
    ]
    overrides = {"1100": "cash", "1200": "trade_receivables", "9500": "other_expenses"}

    classified = classify_entries(entries, overrides)

    assert classified[0].account_type is AccountType.ASSET
    assert classified[0].mapped_line_item == "cash"
    # Pre-populated values win over the classifier and the overrides.
    assert classified[1].account_type is AccountType.EQUITY
    assert classified[1].mapped_line_item == "share_capital"
    assert classified[2].account_type is AccountType.EXPENSE
    assert classified[2].mapped_line_item == "other_expenses"
    assert classified[2].balance == pytest.approx(12.5)
    # Inputs are left untouched.
    assert entries[0].account_type is None


def test_classify_entries_default_ranges_are_opt_in() -> None:
    """Default ranges are applied only when requested."""
    entries = [LedgerEntry(account_number="1300", balance=5.0)]

    assert classify_entries(entries)[0].mapped_line_item is None
    with_ranges = classify_entries(entries, use_default_ranges=True)
    assert with_ranges[0].mapped_line_item == "inventories"


def test_classify_entries_keeps_unknown_type() -> None:
    """An unclassifiable account number is marked UNKNOWN."""
    classified = classify_entries([LedgerEntry(account_number="Suspense")])
    assert classified[0].account_type is AccountType.UNKNOWN
