# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for AFS Builder.

This module wires together the main building blocks of AFS Builder:

- application configuration (jurisdiction, fiscal year, tax rates,
  trial balance options, display options),
- trial balance import and account-mapping overrides,
- trial balance validation,
- account classification,
- statement builders and ratios engine,
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement accounting or tax
logic itself. It orchestrates the underlying modules based on
command-line arguments and the configuration file.


Commands
--------

    python -m afs_builder.cli [--version] [--config PATH] [--verbose] <command>

validate TB_FILE
    Import a trial balance and print total debits, total credits and
    whether they balance within the configured tolerance.

statements TB_FILE [--mappings CSV] [--scope position|income|ratios|all]
                   [--display-mode table|csv|both] [--output DIR]
                   [--allow-unbalanced]
    Full pipeline:

    1) load the configuration (``afs_builder_config.toml`` by default),
    2) import the trial balance,
    3) validate debits against credits; an unbalanced trial balance stops
       the run unless ``--allow-unbalanced`` is given,
    4) load account-mapping overrides (``--mappings`` or
       ``[mappings].overrides_file``),
    5) classify entries (account type, line item),
    6) build the requested statements and ratios,
    7) check the accounting identity and report unmapped entries,
    8) render tables on the console and/or CSV files.

    CSV files are written to ``--output`` (default ``data/output``) with a
    timestamp-based name, e.g.:

        financial_position_2025-01-31-14-03-12.csv
        comprehensive_income_2025-01-31-14-03-12.csv
        ratios_2025-01-31-14-03-12.csv

suggest ACCOUNT_NUMBER ACCOUNT_NAME
    Print the account type implied by the number and the candidate line
    items from the default ranges and name keywords.

tax [--taxable-income X] [--vat-amount X [--vat-inclusive]]
    [--salary X] [--payroll X]
    Print corporate income tax, VAT, UIF and SDL with the configured
    rates.


Logging
-------
Warnings (imbalance, identity mismatch, unmapped entries) go through the
``logging`` module; ``--verbose`` lowers the level to DEBUG so that each
skipped entry is reported by the builders. Regular output is printed.

End of module description.
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .accounts import classify_account, classify_entries, suggest_line_items
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .engine import build_comprehensive_income, build_financial_position
from .formatting import format_currency
from .io import load_account_mappings, read_trial_balance
from .ratios import ratio_results
from .tax import (
    corporate_income_tax,
    skills_development_levy,
    uif_contributions,
    vat,
)
from .validation import check_accounting_identity, validate_trial_balance
from .views import (
    income_to_dataframe,
    position_to_dataframe,
    ratios_to_dataframe,
    unmapped_to_dataframe,
    with_formatted_amounts,
    with_formatted_ratios,
)

logger = logging.getLogger(__name__)

SCOPES = ("position", "income", "ratios", "all")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m afs_builder.cli",
        description=(
            "AFS Builder - Annual financial statements from trial balances. "
            "Imports a trial balance, validates it, classifies accounts and "
            "renders the Statement of Financial Position, the Statement of "
            "Comprehensive Income and financial ratios."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of afs_builder and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'afs_builder_config.toml' in the current directory is used when "
            "present, otherwise built-in defaults apply."
        ),
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging (e.g. every entry skipped by the builders).",
    )

    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="One of: validate, statements, suggest, tax.",
    )

    # ------------------------------------------------------------------
    # validate
    # ------------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check that a trial balance balances (debits = credits).",
    )
    validate_parser.add_argument(
        "tb_file", metavar="TB_FILE", help="Trial balance file (.csv or .xlsx)."
    )

    # ------------------------------------------------------------------
    # statements
    # ------------------------------------------------------------------
    statements_parser = subparsers.add_parser(
        "statements",
        help="Build financial statements and ratios from a trial balance.",
    )
    statements_parser.add_argument(
        "tb_file", metavar="TB_FILE", help="Trial balance file (.csv or .xlsx)."
    )
    statements_parser.add_argument(
        "--mappings",
        dest="mappings_path",
        metavar="CSV",
        help=(
            "Account number → line item overrides. Overrides "
            "[mappings].overrides_file from the configuration."
        ),
    )
    statements_parser.add_argument(
        "--scope",
        choices=SCOPES,
        default="all",
        help=(
            "What to produce: 'position' (financial position), 'income' "
            "(comprehensive income), 'ratios', or 'all' (default)."
        ),
    )
    statements_parser.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=DISPLAY_MODES,
        help=(
            "Output mode: 'table' (console), 'csv' (files) or 'both'. "
            "If omitted, the configuration value is used."
        ),
    )
    statements_parser.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Directory where CSV files are written when the display mode "
            "includes 'csv'. If omitted, 'data/output' is used."
        ),
    )
    statements_parser.add_argument(
        "--allow-unbalanced",
        action="store_true",
        help="Build statements even if total debits and credits differ.",
    )

    # ------------------------------------------------------------------
    # suggest
    # ------------------------------------------------------------------
    suggest_parser = subparsers.add_parser(
        "suggest",
        help="Suggest an account type and line items for an account.",
    )
    suggest_parser.add_argument("account_number", metavar="ACCOUNT_NUMBER")
    suggest_parser.add_argument("account_name", metavar="ACCOUNT_NAME")

    # ------------------------------------------------------------------
    # tax
    # ------------------------------------------------------------------
    tax_parser = subparsers.add_parser(
        "tax",
        help="Compute corporate tax, VAT, UIF and SDL with the configured rates.",
    )
    tax_parser.add_argument(
        "--taxable-income",
        dest="taxable_income",
        type=float,
        help="Taxable income for corporate income tax.",
    )
    tax_parser.add_argument(
        "--vat-amount",
        dest="vat_amount",
        type=float,
        help="Supply value for VAT.",
    )
    tax_parser.add_argument(
        "--vat-inclusive",
        dest="vat_inclusive",
        action="store_true",
        help="Treat --vat-amount as VAT-inclusive and extract the VAT portion.",
    )
    tax_parser.add_argument(
        "--salary",
        type=float,
        help="Monthly salary for UIF contributions.",
    )
    tax_parser.add_argument(
        "--payroll",
        type=float,
        help="Annual payroll for the skills development levy.",
    )

    return ap


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _money(amount: float, config: AppConfig) -> str:
    return format_currency(
        amount,
        symbol=config.display.currency_symbol,
        thousands_sep=config.display.thousands_sep,
        decimal_sep=config.display.decimal_sep,
    )


def _print_trial_balance_check(check, config: AppConfig) -> None:
    print(f"Total debits:  {_money(check.total_debits, config)}")
    print(f"Total credits: {_money(check.total_credits, config)}")
    print(f"Difference:    {_money(check.difference, config)}")
    print(f"Balanced:      {'yes' if check.is_balanced else 'no'}")


def _import_trial_balance(parser: argparse.ArgumentParser, tb_file: str):
    """Read the trial balance, turning file problems into CLI errors."""
    try:
        return read_trial_balance(tb_file)
    except FileNotFoundError:
        parser.error(f"Trial balance file not found: {tb_file}")
    except ValueError as exc:
        parser.error(str(exc))


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_validate(
    args: argparse.Namespace, config: AppConfig, parser: argparse.ArgumentParser
) -> None:
    tb = _import_trial_balance(parser, args.tb_file)
    print(f"Entries imported: {len(tb.entries)}")

    check = validate_trial_balance(tb.entries, config.tolerance)
    _print_trial_balance_check(check, config)
    if not check.is_balanced:
        logger.warning(
            "Trial balance is out of balance by %.2f", check.difference
        )


def _handle_statements(
    args: argparse.Namespace, config: AppConfig, parser: argparse.ArgumentParser
) -> None:
    # 1) Import and validate the trial balance.
    tb = _import_trial_balance(parser, args.tb_file)
    print(f"Entries imported: {len(tb.entries)}")

    check = validate_trial_balance(tb.entries, config.tolerance)
    if not check.is_balanced:
        logger.warning(
            "Trial balance is out of balance by %.2f", check.difference
        )
        if not args.allow_unbalanced:
            _print_trial_balance_check(check, config)
            parser.error(
                "Trial balance does not balance. Fix the trial balance or "
                "pass --allow-unbalanced to build statements anyway."
            )

    # 2) Account-mapping overrides: CLI first, then configuration.
    mappings_path: Optional[Path] = (
        Path(args.mappings_path)
        if args.mappings_path
        else config.mapping_overrides_file
    )
    mappings: dict[str, str] = {}
    if mappings_path is not None:
        try:
            mappings = load_account_mappings(mappings_path)
        except FileNotFoundError:
            parser.error(f"Account mappings file not found: {mappings_path}")
        except ValueError as exc:
            parser.error(str(exc))

    # 3) Classification.
    entries = classify_entries(
        tb.entries,
        account_mappings=mappings,
        use_default_ranges=config.use_default_ranges,
    )

    # 4) Statements and ratios.
    scope = args.scope
    want_position = scope in {"position", "all"}
    want_income = scope in {"income", "all"}
    want_ratios = scope in {"ratios", "all"}

    position = build_financial_position(entries, mappings)
    income = build_comprehensive_income(entries, mappings)

    identity = check_accounting_identity(position, config.tolerance)
    if want_position and not identity.holds:
        logger.warning(
            "Total assets differ from total equity and liabilities by %.2f",
            identity.difference,
        )

    # An entry with no line item at all is reported by both builders.
    unmapped = list(
        {e.account_number: e for e in (*position.unmapped, *income.unmapped)}.values()
    )
    if unmapped:
        logger.warning(
            "%d entries could not be placed on a statement line; "
            "provide account mappings for them",
            len(unmapped),
        )

    views: list[tuple[str, str, pd.DataFrame]] = []
    if want_position:
        views.append(
            (
                "Statement of Financial Position",
                "financial_position",
                position_to_dataframe(position),
            )
        )
    if want_income:
        views.append(
            (
                "Statement of Comprehensive Income",
                "comprehensive_income",
                income_to_dataframe(income),
            )
        )
    if want_ratios:
        views.append(
            (
                "Ratios",
                "ratios",
                ratios_to_dataframe(
                    ratio_results(position, income),
                    decimals=config.display.ratio_decimals,
                ),
            )
        )
    if unmapped:
        views.append(
            ("Unmapped entries", "unmapped", unmapped_to_dataframe(unmapped))
        )

    # 5) Resolve display mode: config value overridden by CLI if provided.
    display_mode = args.display_mode or config.display.mode

    # 6) Render to console (table mode).
    if display_mode in {"table", "both"}:
        for title, key, df in views:
            if key == "ratios":
                shown = with_formatted_ratios(df, config.display)
            elif key == "unmapped":
                shown = df
            else:
                shown = with_formatted_amounts(df, config.display).drop(
                    columns=["amount"]
                )
            print()
            print(f"=== {title} ===")
            print(shown.to_string(index=False))

    # 7) Render to CSV files (csv mode).
    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

        for _, key, df in views:
            path = output_dir / f"{key}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _handle_suggest(args: argparse.Namespace) -> None:
    account_type = classify_account(args.account_number)
    suggestions = sorted(suggest_line_items(args.account_number, args.account_name))

    print(f"Account:     {args.account_number} {args.account_name}")
    print(f"Type:        {account_type.value}")
    if suggestions:
        print(f"Line items:  {', '.join(suggestions)}")
    else:
        print("Line items:  (no suggestion)")


def _handle_tax(args: argparse.Namespace, config: AppConfig) -> None:
    rates = config.tax_rates
    printed = False

    if args.taxable_income is not None:
        tax = corporate_income_tax(args.taxable_income, rates)
        print(
            f"Corporate income tax ({rates.corporate_tax:.0%}): "
            f"{_money(tax, config)}"
        )
        printed = True

    if args.vat_amount is not None:
        amount = vat(args.vat_amount, inclusive=args.vat_inclusive, rates=rates)
        label = "VAT included" if args.vat_inclusive else "VAT"
        print(f"{label} ({rates.vat:.0%}): {_money(amount, config)}")
        printed = True

    if args.salary is not None:
        uif = uif_contributions(args.salary, rates)
        print(f"UIF employee: {_money(uif.employee, config)}")
        print(f"UIF employer: {_money(uif.employer, config)}")
        print(f"UIF total:    {_money(uif.total, config)}")
        printed = True

    if args.payroll is not None:
        sdl = skills_development_levy(args.payroll, rates)
        print(f"Skills development levy: {_money(sdl, config)}")
        printed = True

    if not printed:
        print(
            "Nothing to compute. Use --taxable-income, --vat-amount, "
            "--salary or --payroll."
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the AFS Builder CLI.

    Parses command-line arguments, configures logging, loads the
    application configuration and dispatches to the requested command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"afs_builder version {__version__}")
        return

    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return

    try:
        config = load_app_config(args.config_path)
    except FileNotFoundError:
        parser.error(f"Config file not found: {args.config_path}")
    except ValueError as exc:
        parser.error(str(exc))

    if args.command == "validate":
        _handle_validate(args, config, parser)
    elif args.command == "statements":
        _handle_statements(args, config, parser)
    elif args.command == "suggest":
        _handle_suggest(args)
    elif args.command == "tax":
        _handle_tax(args, config)


if __name__ == "__main__":
    main()
