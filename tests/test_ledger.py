import math

import pytest

from afs_builder.ledger import (
    AccountType,
    LedgerEntry,
    as_entry,
    parse_account_type,
    parse_amount,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (1234.5, 1234.5),
        (-12, -12.0),
        ("1,234.50", 1234.5),
        ("  -12 ", -12.0),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("-inf", 0.0),
    ],
)
def test_parse_amount(raw, expected: float) -> None:
    result = parse_amount(raw)
    assert math.isfinite(result)
    assert result == pytest.approx(expected)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("asset", AccountType.ASSET),
        (" Revenue ", AccountType.REVENUE),
        (AccountType.EQUITY, AccountType.EQUITY),
        ("", None),
        ("goodwill", None),
        (None, None),
    ],
)
def test_parse_account_type(raw, expected) -> None:
    assert parse_account_type(raw) is expected


def test_from_record_coerces_values() -> None:
    entry = LedgerEntry.from_record(
        {
            "account_number": 1050.0,
            "account_name": " Petty Cash ",
            "balance": "2,500.00",
            "debit_amount": "n/a",
            "account_type": "asset",
            "mapped_line_item": "",
        }
    )

    assert entry == LedgerEntry(
        "1050",
        "Petty Cash",
        2500.0,
        account_type=AccountType.ASSET,
    )


def test_from_record_nan_cells_are_missing() -> None:
    entry = LedgerEntry.from_record(
        {"account_number": "1000", "mapped_line_item": float("nan")}
    )

    assert entry.mapped_line_item is None
    assert entry.account_name == ""


def test_with_classification_keeps_existing_values() -> None:
    entry = LedgerEntry("1000", mapped_line_item="cash")

    filled = entry.with_classification(AccountType.ASSET, "prepayments")

    assert filled.account_type is AccountType.ASSET
    assert filled.mapped_line_item == "cash"
    assert entry.account_type is None


def test_as_entry() -> None:
    entry = LedgerEntry("1000")
    assert as_entry(entry) is entry
    assert as_entry({"account_number": "1000"}) == entry

    with pytest.raises(TypeError):
        as_entry(["1000", "Bank"])
