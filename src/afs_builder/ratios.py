# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Computation of financial ratios for AFS Builder.

This module derives ratios from the two completed statements built by
engine.py. It never aggregates ledger entries itself.

1. Ratios
   -------
   ``compute_ratios(position, income)`` returns a plain dictionary
   ``{ratio_key -> float}``:

   Liquidity
       current_ratio        = current assets / current liabilities
       quick_ratio          = (current assets - inventories)
                              / current liabilities
   Profitability
       gross_profit_margin  = gross profit / revenue
       net_profit_margin    = profit for the year / revenue
   Efficiency
       return_on_assets     = profit for the year / total assets
       return_on_equity     = profit for the year / total equity
   Leverage
       debt_to_equity_ratio = (current + non-current liabilities)
                              / total equity

   Each ratio is only computed when its denominator is strictly positive.
   A ratio that cannot be computed is absent from the dictionary: it is
   never set to 0.0, None, inf or NaN.

2. Ratio results for display
   --------------------------
   ``ratio_results(position, income)`` returns one RatioResult per known
   ratio, with label, unit and category metadata from RATIO_DEFINITIONS.
   Here a ratio that cannot be computed has ``value=None`` so that display
   layers can still list it.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .engine import ComprehensiveIncome, FinancialPosition

LIQUIDITY = "liquidity"
PROFITABILITY = "profitability"
EFFICIENCY = "efficiency"
LEVERAGE = "leverage"

# Display ordering of categories.
CATEGORY_ORDER: tuple[str, ...] = (LIQUIDITY, PROFITABILITY, EFFICIENCY, LEVERAGE)


@dataclass(frozen=True)
class RatioDef:
    """Static description of a ratio."""

    key: str
    label: str
    unit: str
    category: str
    notes: str = ""


@dataclass(frozen=True)
class RatioResult:
    """
    Computed ratio as returned by ``ratio_results``.

    Attributes:
        key: Internal identifier (e.g. 'current_ratio').
        label: Human-readable label for display (e.g. 'Current ratio').
        value: Numeric value, or None if not computable.
        unit: Unit hint ('ratio' or 'percent').
        notes: Formula description.
        category: 'liquidity', 'profitability', 'efficiency' or 'leverage'.
    """

    key: str
    label: str
    value: Optional[float]
    unit: str
    notes: str
    category: str


RATIO_DEFINITIONS: tuple[RatioDef, ...] = (
    RatioDef(
        "current_ratio",
        "Current ratio",
        "ratio",
        LIQUIDITY,
        "Current assets / current liabilities",
    ),
    RatioDef(
        "quick_ratio",
        "Quick ratio",
        "ratio",
        LIQUIDITY,
        "(Current assets - inventories) / current liabilities",
    ),
    RatioDef(
        "gross_profit_margin",
        "Gross profit margin",
        "percent",
        PROFITABILITY,
        "Gross profit / revenue",
    ),
    RatioDef(
        "net_profit_margin",
        "Net profit margin",
        "percent",
        PROFITABILITY,
        "Profit for the year / revenue",
    ),
    RatioDef(
        "return_on_assets",
        "Return on assets",
        "percent",
        EFFICIENCY,
        "Profit for the year / total assets",
    ),
    RatioDef(
        "return_on_equity",
        "Return on equity",
        "percent",
        EFFICIENCY,
        "Profit for the year / total equity",
    ),
    RatioDef(
        "debt_to_equity_ratio",
        "Debt to equity",
        "ratio",
        LEVERAGE,
        "Total liabilities / total equity",
    ),
)


def _store(ratios: dict[str, float], key: str, value: float) -> None:
    """Store ``value`` under ``key`` unless it is not a finite number."""
    if math.isfinite(value):
        ratios[key] = float(value)


def compute_ratios(
    position: Optional[FinancialPosition],
    income: Optional[ComprehensiveIncome],
) -> dict[str, float]:
    """
    Compute liquidity, profitability, efficiency and leverage ratios.

    Args:
        position: Statement of Financial Position (from engine.py).
        income: Statement of Comprehensive Income (from engine.py).

    Returns:
        A dictionary {ratio_key -> value}. Ratios whose denominator is zero
        or negative are omitted. If either statement is missing, the
        result is empty.
    """
    if position is None or income is None:
        return {}

    ratios: dict[str, float] = {}

    # Liquidity
    current_liabilities = position.current_liabilities.total
    if current_liabilities > 0:
        current_assets = position.current_assets.total
        inventories = position.current_assets.lines.get("inventories", 0.0)
        _store(ratios, "current_ratio", current_assets / current_liabilities)
        _store(
            ratios, "quick_ratio", (current_assets - inventories) / current_liabilities
        )

    # Profitability
    if income.revenue > 0:
        _store(ratios, "gross_profit_margin", income.gross_profit / income.revenue)
        _store(ratios, "net_profit_margin", income.profit_for_year / income.revenue)

    # Efficiency
    if position.total_assets > 0:
        _store(
            ratios, "return_on_assets", income.profit_for_year / position.total_assets
        )

    equity = position.equity.total
    if equity > 0:
        _store(ratios, "return_on_equity", income.profit_for_year / equity)
        # Leverage
        _store(ratios, "debt_to_equity_ratio", position.total_liabilities / equity)

    return ratios


def ratio_results(
    position: Optional[FinancialPosition],
    income: Optional[ComprehensiveIncome],
) -> list[RatioResult]:
    """
    Compute ratios and attach their display metadata.

    Returns:
        One RatioResult per entry of RATIO_DEFINITIONS, in definition
        order. Ratios that cannot be computed have value=None.
    """
    values = compute_ratios(position, income)
    return [
        RatioResult(
            key=d.key,
            label=d.label,
            value=values.get(d.key),
            unit=d.unit,
            notes=d.notes,
            category=d.category,
        )
        for d in RATIO_DEFINITIONS
    ]
