# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for AFS Builder.

This module is responsible for:
- loading the application configuration from a TOML file,
- falling back to built-in South African defaults when no file exists,
- exposing immutable dataclasses used by the rest of the application.

Configuration values are built once (at CLI start-up) and passed down to
the classifier, builders and formatters; nothing mutates them afterwards.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .tax import DEFAULT_TAX_RATES, TaxRates

DEFAULT_CONFIG_FILE = "afs_builder_config.toml"

DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")


@dataclass(frozen=True)
class DisplayConfig:
    """Display options for tables, CSV exports and formatted amounts."""

    mode: str = "table"
    ratio_decimals: int = 2
    currency_symbol: str = "R"
    thousands_sep: str = ","
    decimal_sep: str = "."


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for AFS Builder.

    This aggregates:
    - the jurisdiction and presentation currency,
    - the first month of the financial year,
    - the tax rate table,
    - trial balance options (tolerance, default account ranges),
    - the optional account-mapping overrides file,
    - display options.
    """

    jurisdiction: str = "ZA"
    currency: str = "ZAR"
    fiscal_year_start_month: int = 3
    tax_rates: TaxRates = DEFAULT_TAX_RATES
    tolerance: float = 0.01
    use_default_ranges: bool = False
    mapping_overrides_file: Optional[Path] = None
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return value


def _parse_tax_rates(section: Mapping[str, Any]) -> TaxRates:
    """
    Build a TaxRates table from the [tax_rates] section.

    Missing keys keep their default value.

    Raises:
        ValueError: on unknown keys or non-numeric / negative values.
    """
    known = {f.name for f in fields(TaxRates)}
    overrides: dict[str, float] = {}
    for key, value in section.items():
        if key not in known:
            raise ValueError(
                f"Unknown tax rate '{key}' in [tax_rates]. "
                f"Expected one of: {', '.join(sorted(known))}."
            )
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid value for 'tax_rates.{key}': expected a number."
            ) from exc
        if number < 0:
            raise ValueError(f"Invalid value for 'tax_rates.{key}': must be >= 0.")
        overrides[key] = number

    return TaxRates(**overrides)


def _parse_display(
    section: Mapping[str, Any], jurisdiction: Mapping[str, Any]
) -> DisplayConfig:
    defaults = DisplayConfig()

    mode = str(section.get("mode", defaults.mode))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display mode {mode!r}. Expected one of: "
            f"{', '.join(DISPLAY_MODES)}."
        )

    ratio_decimals = section.get("ratio_decimals", defaults.ratio_decimals)
    if (
        not isinstance(ratio_decimals, int)
        or isinstance(ratio_decimals, bool)
        or ratio_decimals < 0
    ):
        raise ValueError(
            "Invalid value for 'display.ratio_decimals'. "
            "Expected a non-negative integer."
        )

    return DisplayConfig(
        mode=mode,
        ratio_decimals=ratio_decimals,
        currency_symbol=str(
            jurisdiction.get("currency_symbol", defaults.currency_symbol)
        ),
        thousands_sep=str(section.get("thousands_sep", defaults.thousands_sep)),
        decimal_sep=str(section.get("decimal_sep", defaults.decimal_sep)),
    )


def default_config() -> AppConfig:
    """Return the built-in configuration (South Africa, March year start)."""
    return AppConfig()


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the AFS Builder configuration from a TOML file.

    Expected top-level sections (all optional)
    ------------------------------------------
    [jurisdiction]
        name, currency, currency_symbol.

    [fiscal_year]
        start_month: first month of the financial year (1-12).

    [tax_rates]
        Any TaxRates field (corporate_tax, vat, dividend_tax,
        cgt_inclusion_rate, uif_employee, uif_employer, sdl,
        uif_salary_ceiling, sdl_payroll_threshold).

    [trial_balance]
        tolerance: debit/credit tolerance in currency units.
        use_default_ranges: assign line items from the default account
        ranges when no mapping is available.

    [mappings]
        overrides_file: CSV of account number → line item overrides,
        resolved relative to the directory of the TOML file.

    [display]
        mode ("table" | "csv" | "both"), ratio_decimals, thousands_sep,
        decimal_sep.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML file. If omitted, 'afs_builder_config.toml' in the
        current directory is used when it exists; otherwise the built-in
        defaults are returned.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    FileNotFoundError
        If an explicit config_path does not exist.
    ValueError
        If a value is invalid.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return default_config()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent
    defaults = default_config()

    # 1) Jurisdiction
    jurisdiction_section = _section(raw, "jurisdiction")
    jurisdiction = str(jurisdiction_section.get("name") or defaults.jurisdiction)
    currency = str(jurisdiction_section.get("currency") or defaults.currency)

    # 2) Fiscal year
    fiscal_section = _section(raw, "fiscal_year")
    try:
        start_month = int(
            fiscal_section.get("start_month", defaults.fiscal_year_start_month)
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'fiscal_year.start_month'. Expected an integer."
        ) from exc
    if not 1 <= start_month <= 12:
        raise ValueError("'fiscal_year.start_month' must be between 1 and 12.")

    # 3) Tax rates
    tax_rates = _parse_tax_rates(_section(raw, "tax_rates"))

    # 4) Trial balance options
    tb_section = _section(raw, "trial_balance")
    try:
        tolerance = float(tb_section.get("tolerance", defaults.tolerance))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'trial_balance.tolerance'. Expected a number."
        ) from exc
    if tolerance <= 0:
        raise ValueError("'trial_balance.tolerance' must be greater than zero.")
    use_default_ranges = tb_section.get(
        "use_default_ranges", defaults.use_default_ranges
    )
    if not isinstance(use_default_ranges, bool):
        raise ValueError(
            "Invalid value for 'trial_balance.use_default_ranges'. "
            "Expected true or false."
        )

    # 5) Mapping overrides
    mappings_section = _section(raw, "mappings")
    overrides_raw = mappings_section.get("overrides_file") or None
    mapping_overrides_file = (
        (base_dir / str(overrides_raw)).resolve() if overrides_raw else None
    )

    # 6) Display options
    display = _parse_display(_section(raw, "display"), jurisdiction_section)

    return AppConfig(
        jurisdiction=jurisdiction,
        currency=currency,
        fiscal_year_start_month=start_month,
        tax_rates=tax_rates,
        tolerance=tolerance,
        use_default_ranges=use_default_ranges,
        mapping_overrides_file=mapping_overrides_file,
        display=display,
    )
