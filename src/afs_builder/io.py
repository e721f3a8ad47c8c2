# AFS Builder - Annual financial statements from trial balances
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for AFS Builder.

This module reads trial balance exports and account-mapping overrides and
normalizes them into the structures consumed by the classifier and the
statement builders.

Trial balance files
-------------------
Accounting packages export trial balances with slightly different
layouts. The importer accepts CSV (comma, semicolon or tab separated) and
Excel ``.xlsx`` files and tolerates:

- a UTF-8 byte order mark,
- an Excel ``sep=,`` hint line,
- title lines above the header row (the header is the first line that
  mentions both "debit" and "credit"),
- column name variants (case-insensitive):

    account code : Account Code, Account, Code, Account Number,
                   Account No, Number
    account name : Account Name, Account Description, Description, Name,
                   Account, Ledger, GL Account
    debit        : Debit, Debit Amount, DR, Debits
    credit       : Credit, Credit Amount, CR, Credits
    category     : Category, Account Type, Type
    source       : Source

- total rows (no account name) and a trailing "Net profit ..." summary
  row, which are skipped.

Each kept row becomes a LedgerEntry with ``balance = debit - credit`` and
an account type inferred from its category and name.

Account-mapping overrides
-------------------------
A CSV with an account column ('account_number', 'account' or 'code') and
a line item column ('line_item', 'mapped_line_item' or 'line_item_code').
Line items must belong to the catalogue.
"""

import io
import logging
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import pandas as pd

from .accounts import infer_account_type
from .catalogue import DEFAULT_CATALOGUE, Catalogue
from .ledger import LedgerEntry, as_entry, parse_amount

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

CODE_COLUMNS = (
    "Account Code",
    "Account",
    "Code",
    "Account Number",
    "Account No",
    "Number",
)
NAME_COLUMNS = (
    "Account Name",
    "Account Description",
    "Description",
    "Name",
    "Account",
    "Ledger",
    "GL Account",
)
DEBIT_COLUMNS = ("Debit", "Debit Amount", "DR", "Debits")
CREDIT_COLUMNS = ("Credit", "Credit Amount", "CR", "Credits")
CATEGORY_COLUMNS = ("Category", "Account Type", "Type")
SOURCE_COLUMNS = ("Source",)

_SEP_LINE = re.compile(r"^\s*sep\s*=\s*.+\s*$", re.I)
_NET_PROFIT = re.compile(r"^net\s+profit", re.I)
_DELIMITERS = (",", ";", "\t")


@dataclass(frozen=True)
class TrialBalanceImport:
    """Entries read from a trial balance file and their debit/credit totals."""

    entries: tuple[LedgerEntry, ...]
    total_debits: float
    total_credits: float


# ---------------------------------------------------------------------------
# Trial balance parsing
# ---------------------------------------------------------------------------


def normalize_csv_text(csv_text: str) -> str:
    """Strip export noise so that the first line is the header row.

    Removes a leading BOM and any ``sep=`` line, then drops every line
    above the first one containing 'debit', 'credit' and a delimiter. If
    no such line exists, the text is returned without the BOM/sep lines.
    """
    text = (csv_text or "").lstrip("\ufeff")
    lines = [line for line in re.split(r"\r?\n", text) if not _SEP_LINE.match(line)]

    for index, line in enumerate(lines):
        lowered = line.lower()
        if (
            "debit" in lowered
            and "credit" in lowered
            and any(d in line for d in _DELIMITERS)
        ):
            return "\n".join(lines[index:])
    return "\n".join(lines)


def _detect_delimiter(header_line: str) -> str:
    counts = {d: header_line.count(d) for d in _DELIMITERS}
    best = max(counts, key=lambda d: counts[d])
    return best if counts[best] else ","


def _casefold_row(row: Mapping[Any, Any]) -> dict[str, Any]:
    return {str(k).strip().lower(): v for k, v in row.items()}


def _first_value(row: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first non-blank value among ``keys`` (already lowercased row)."""
    for key in keys:
        value = row.get(key.lower())
        if value is None:
            continue
        if isinstance(value, float) and pd.isna(value):
            continue
        if str(value).strip() != "":
            return value
    return ""


def build_trial_balance_entries(
    rows: Iterable[Mapping[Any, Any]],
) -> TrialBalanceImport:
    """Convert parsed trial balance rows into ledger entries.

    Args:
        rows: One mapping per line (column name → cell value), as produced
            by ``DataFrame.to_dict(orient="records")``.

    Returns:
        A TrialBalanceImport with the kept entries and the debit/credit
        totals of those entries.
    """
    entries: list[LedgerEntry] = []
    total_debits = 0.0
    total_credits = 0.0

    for raw in rows or []:
        row = _casefold_row(raw)
        category = str(_first_value(row, CATEGORY_COLUMNS)).strip()
        source = str(_first_value(row, SOURCE_COLUMNS)).strip()
        account_code = str(_first_value(row, CODE_COLUMNS)).strip()
        account_name = str(_first_value(row, NAME_COLUMNS)).strip()
        debit = parse_amount(_first_value(row, DEBIT_COLUMNS))
        credit = parse_amount(_first_value(row, CREDIT_COLUMNS))

        # Post-total lines such as "Net Profit/Loss After Tax" are summaries.
        if (
            _NET_PROFIT.match(account_name)
            and not category
            and not source
            and not account_code
        ):
            logger.debug("Skipping summary row %r", account_name)
            continue

        if not account_name or (debit == 0 and credit == 0):
            continue

        entries.append(
            LedgerEntry(
                account_number=account_code or account_name,
                account_name=account_name,
                balance=debit - credit,
                debit_amount=debit,
                credit_amount=credit,
                account_type=infer_account_type(category, account_name, account_code),
            )
        )
        total_debits += debit
        total_credits += credit

    return TrialBalanceImport(
        entries=tuple(entries), total_debits=total_debits, total_credits=total_credits
    )


def _read_csv_rows(path: Path) -> list[dict[str, Any]]:
    text = normalize_csv_text(path.read_text(encoding="utf-8-sig"))
    if not text.strip():
        return []
    header_line = text.split("\n", 1)[0]
    df = pd.read_csv(
        io.StringIO(text),
        sep=_detect_delimiter(header_line),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    return df.to_dict(orient="records")


def _read_excel_rows(path: Path) -> list[dict[str, Any]]:
    raw = pd.read_excel(path, header=None, dtype=str, engine="openpyxl")
    for index, values in raw.iterrows():
        cells = [str(v) for v in values if pd.notna(v)]
        joined = " ".join(cells).lower()
        if "debit" in joined and "credit" in joined:
            columns = [
                str(v).strip() if pd.notna(v) else f"column_{i}"
                for i, v in enumerate(values)
            ]
            body = raw.loc[index + 1 :].copy()
            body.columns = columns
            return body.fillna("").to_dict(orient="records")
    raise ValueError(
        f"Could not find a header row with 'Debit' and 'Credit' columns in {path}."
    )


def read_trial_balance(path: PathLike) -> TrialBalanceImport:
    """
    Read a trial balance export and convert it into ledger entries.

    Parameters
    ----------
    path:
        Path to a ``.csv``/``.txt`` or ``.xlsx`` file.

    Returns
    -------
    TrialBalanceImport
        Entries plus total debits and credits.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the format is unsupported or no Debit/Credit header is found.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Trial balance file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix in (".csv", ".txt"):
        rows = _read_csv_rows(file_path)
    elif suffix == ".xlsx":
        rows = _read_excel_rows(file_path)
    else:
        raise ValueError(
            f"Unsupported trial balance format: {suffix or '(none)'}. "
            "Please export it as .csv or .xlsx."
        )

    result = build_trial_balance_entries(rows)
    logger.info(
        "Read %d trial balance entries from %s", len(result.entries), file_path
    )
    return result


# ---------------------------------------------------------------------------
# Account-mapping overrides
# ---------------------------------------------------------------------------


def load_account_mappings(
    path: PathLike, catalogue: Catalogue = DEFAULT_CATALOGUE
) -> dict[str, str]:
    """Load account number → line item overrides from CSV.

    Expected structure
    ------------------
    The CSV must contain:
        - one account column: 'account_number', 'account' or 'code'
        - one line item column: 'line_item', 'mapped_line_item' or
          'line_item_code'

    Column names are matched case-insensitively and trimmed. Rows with an
    empty line item are ignored; later rows override earlier ones.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if a column is missing or a line item is not a
            mappable catalogue key.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Account mappings file not found: {file_path}")

    df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
    col_map = {str(c).strip().lower(): c for c in df.columns}

    code_col = next(
        (col_map[c] for c in ("account_number", "account", "code") if c in col_map),
        None,
    )
    if code_col is None:
        raise ValueError(
            "Could not find an account column in the account mappings file. "
            "Expected one of: 'account_number', 'account', 'code'."
        )

    item_col = next(
        (
            col_map[c]
            for c in ("line_item", "mapped_line_item", "line_item_code")
            if c in col_map
        ),
        None,
    )
    if item_col is None:
        raise ValueError(
            "Could not find a line item column in the account mappings file. "
            "Expected one of: 'line_item', 'mapped_line_item', 'line_item_code'."
        )

    allowed = catalogue.mappable_keys()
    mappings: dict[str, str] = {}
    unknown: set[str] = set()
    for code, item in zip(df[code_col], df[item_col]):
        code = str(code).strip()
        item = str(item).strip()
        if not code or not item:
            continue
        if item not in allowed:
            unknown.add(item)
            continue
        mappings[code] = item

    if unknown:
        raise ValueError(
            "Unknown line items in account mappings file: "
            f"{', '.join(sorted(unknown))}."
        )
    return mappings


# ---------------------------------------------------------------------------
# DataFrame conversion
# ---------------------------------------------------------------------------


def entries_to_dataframe(entries: Iterable[Any]) -> pd.DataFrame:
    """Return ledger entries as a DataFrame (one row per entry)."""
    columns = [
        "account_number",
        "account_name",
        "balance",
        "debit_amount",
        "credit_amount",
        "account_type",
        "mapped_line_item",
    ]
    records = [as_entry(e).to_record() for e in entries]
    return pd.DataFrame(records, columns=columns)


def entries_from_dataframe(df: pd.DataFrame) -> list[LedgerEntry]:
    """Build ledger entries from a DataFrame with LedgerEntry column names."""
    return [LedgerEntry.from_record(row) for row in df.to_dict(orient="records")]
