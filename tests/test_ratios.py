import math

import pytest

from afs_builder.engine import build_comprehensive_income, build_financial_position
from afs_builder.ledger import LedgerEntry
from afs_builder.ratios import (
    CATEGORY_ORDER,
    RATIO_DEFINITIONS,
    compute_ratios,
    ratio_results,
)


def _line(number: str, balance: float, item: str) -> LedgerEntry:
    return LedgerEntry(number, balance=balance, mapped_line_item=item)


@pytest.fixture
def position():
    return build_financial_position(
        [
            _line("1000", 150.0, "cash"),
            _line("1300", 50.0, "inventories"),
            _line("2000", 300.0, "property_plant_equipment"),
            _line("3000", -100.0, "trade_payables"),
            _line("4000", -150.0, "long_term_borrowings"),
            _line("5000", -250.0, "share_capital"),
        ]
    )


@pytest.fixture
def income():
    return build_comprehensive_income(
        [
            _line("6000", -1000.0, "revenue"),
            _line("7000", 600.0, "cost_of_sales"),
            _line("7300", 300.0, "administrative_expenses"),
        ]
    )


def test_compute_ratios_all_defined(position, income) -> None:
    """A complete pair of statements yields every ratio."""
    ratios = compute_ratios(position, income)

    assert ratios["current_ratio"] == pytest.approx(2.0)
    assert ratios["quick_ratio"] == pytest.approx(1.5)
    assert ratios["gross_profit_margin"] == pytest.approx(0.4)
    assert ratios["net_profit_margin"] == pytest.approx(0.1)
    assert ratios["return_on_assets"] == pytest.approx(0.2)
    assert ratios["return_on_equity"] == pytest.approx(0.4)
    assert ratios["debt_to_equity_ratio"] == pytest.approx(1.0)
    assert set(ratios) == {d.key for d in RATIO_DEFINITIONS}


def test_current_ratio_absent_without_current_liabilities(income) -> None:
    """Liquidity ratios are omitted when current liabilities are zero."""
    position = build_financial_position(
        [
            LedgerEntry("1000", balance=200.0, mapped_line_item="cash"),
            LedgerEntry("5000", balance=-200.0, mapped_line_item="share_capital"),
        ]
    )

    ratios = compute_ratios(position, income)

    assert "current_ratio" not in ratios
    assert "quick_ratio" not in ratios
    assert ratios["debt_to_equity_ratio"] == pytest.approx(0.0)


def test_compute_ratios_never_contains_non_finite_values() -> None:
    """Empty statements give no ratios at all."""
    empty_position = build_financial_position([])
    empty_income = build_comprehensive_income([])

    ratios = compute_ratios(empty_position, empty_income)

    assert ratios == {}


def test_zero_equity_omits_equity_ratios(income) -> None:
    """Zero equity omits the equity-based ratios."""
    position = build_financial_position(
        [
            LedgerEntry("1000", balance=100.0, mapped_line_item="cash"),
            LedgerEntry("3000", balance=-100.0, mapped_line_item="trade_payables"),
        ]
    )
    ratios = compute_ratios(position, income)

    assert "return_on_equity" not in ratios
    assert "debt_to_equity_ratio" not in ratios
    assert all(math.isfinite(v) for v in ratios.values())


def test_compute_ratios_missing_statement(position, income) -> None:
    """A missing statement gives an empty result."""
    assert compute_ratios(None, income) == {}
    assert compute_ratios(position, None) == {}


def test_ratio_results_metadata(position, income) -> None:
    """Ratio records carry labels, units and categories in definition order."""
    results = ratio_results(position, income)

    assert [r.key for r in results] == [d.key for d in RATIO_DEFINITIONS]
    assert {r.category for r in results} <= set(CATEGORY_ORDER)
    by_key = {r.key: r for r in results}
    assert by_key["current_ratio"].unit == "ratio"
    assert by_key["gross_profit_margin"].unit == "percent"


def test_ratio_results_not_computable_is_none(income) -> None:
    """A ratio that cannot be computed has value None."""
    results = ratio_results(build_financial_position([]), income)
    by_key = {r.key: r for r in results}

    assert by_key["current_ratio"].value is None
    assert by_key["gross_profit_margin"].value == pytest.approx(0.4)
