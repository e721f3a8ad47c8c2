# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rate-based tax and payroll levies for AFS Builder.

Default rates follow the South African 2024/2025 tax year:

- corporate income tax  27%
- VAT                   15%
- dividends tax         20%
- CGT inclusion rate    80% (companies)
- UIF                   1% employee + 1% employer, on salaries capped at
                        the UIF ceiling (R17 712 per month)
- SDL                   1% of payroll, only above R500 000 annual payroll

Rates are held in an immutable TaxRates value. Every function accepts an
optional ``rates`` argument so that a configuration loaded from TOML (see
config.py) can be passed through; the module never mutates the defaults.
"""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TaxRates:
    """Jurisdiction rate table."""

    corporate_tax: float = 0.27
    vat: float = 0.15
    dividend_tax: float = 0.20
    cgt_inclusion_rate: float = 0.80
    uif_employee: float = 0.01
    uif_employer: float = 0.01
    sdl: float = 0.01
    uif_salary_ceiling: float = 17712.0
    sdl_payroll_threshold: float = 500000.0


DEFAULT_TAX_RATES = TaxRates()


@dataclass(frozen=True)
class UIFContribution:
    """Unemployment Insurance Fund contributions for one salary."""

    employee: float
    employer: float
    total: float


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def corporate_income_tax(
    taxable_income: float, rates: TaxRates = DEFAULT_TAX_RATES
) -> float:
    """Corporate income tax on taxable income; losses give zero tax."""
    return max(0.0, taxable_income * rates.corporate_tax)


def vat(
    amount: Any, inclusive: bool = False, rates: TaxRates = DEFAULT_TAX_RATES
) -> float:
    """VAT on an amount.

    Args:
        amount: Supply value. Non-numeric values give 0.0.
        inclusive: If True, ``amount`` already includes VAT and the VAT
            portion is extracted (amount * r / (1 + r)).
        rates: Rate table.
    """
    if not _is_number(amount):
        return 0.0
    if inclusive:
        return amount * rates.vat / (1 + rates.vat)
    return amount * rates.vat


def dividends_tax(dividend: float, rates: TaxRates = DEFAULT_TAX_RATES) -> float:
    """Dividends tax withheld on a declared dividend."""
    return max(0.0, dividend * rates.dividend_tax)


def taxable_capital_gain(gain: float, rates: TaxRates = DEFAULT_TAX_RATES) -> float:
    """Portion of a capital gain included in taxable income (losses give 0)."""
    return max(0.0, gain * rates.cgt_inclusion_rate)


def uif_contributions(
    salary: float, rates: TaxRates = DEFAULT_TAX_RATES
) -> UIFContribution:
    """UIF contributions on a monthly salary, capped at the UIF ceiling."""
    applicable = min(salary, rates.uif_salary_ceiling)
    employee = applicable * rates.uif_employee
    employer = applicable * rates.uif_employer
    return UIFContribution(
        employee=employee, employer=employer, total=employee + employer
    )


def skills_development_levy(
    total_payroll: float, rates: TaxRates = DEFAULT_TAX_RATES
) -> float:
    """SDL on annual payroll; zero unless payroll exceeds the threshold."""
    if total_payroll > rates.sdl_payroll_threshold:
        return total_payroll * rates.sdl
    return 0.0
