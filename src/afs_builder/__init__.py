# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
AFS Builder
-----------

A Python toolkit that turns a trial balance into annual financial
statements for small and medium-sized entities reporting under IFRS for
SMEs, with South African defaults for tax rates and formatting.

Main capabilities:
- trial balance import from common accounting exports (CSV / Excel),
- debit/credit validation of the trial balance,
- account classification by account number and by keywords,
- Statement of Financial Position and Statement of Comprehensive Income,
- liquidity, profitability, efficiency and leverage ratios,
- corporate tax, VAT, dividends tax, CGT, UIF and SDL helpers,
- currency / percentage formatting and identifier validation.

Computation (accounts, engine, ratios, tax) is kept separate from
configuration (TOML) and presentation (views / CLI).


Version: 0.1.0

Usage:
    python -m afs_builder.cli --help
"""

__all__ = ["accounts", "engine", "io", "ratios", "validation", "views"]

__version__ = "0.1.0"
