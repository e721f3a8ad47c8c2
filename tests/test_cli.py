import pandas as pd
import pytest

from afs_builder import __version__
from afs_builder.cli import main

BALANCED_TB = (
    "Account Code,Account Name,Debit,Credit\n"
    "1000,Bank,1500,\n"
    "3000,Trade Payables,,500\n"
    "5000,Share Capital,,1000\n"
    "6000,Sales,,800\n"
    "7000,Purchases,300,\n"
    "7300,Rent,500,\n"
)

MAPPINGS = (
    "account_number,line_item\n"
    "1000,cash\n"
    "3000,trade_payables\n"
    "5000,share_capital\n"
    "6000,revenue\n"
    "7000,cost_of_sales\n"
    "7300,administrative_expenses\n"
)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test from an empty directory (no default config file)."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def tb_file(tmp_path):
    path = tmp_path / "tb.csv"
    path.write_text(BALANCED_TB, encoding="utf-8")
    return path


@pytest.fixture
def mappings_file(tmp_path):
    path = tmp_path / "mappings.csv"
    path.write_text(MAPPINGS, encoding="utf-8")
    return path


def test_version(capsys) -> None:
    main(["--version"])
    assert f"afs_builder version {__version__}" in capsys.readouterr().out


def test_validate_balanced(tb_file, capsys) -> None:
    main(["validate", str(tb_file)])

    out = capsys.readouterr().out
    assert "Entries imported: 6" in out
    assert "Total debits:  R 2,300.00" in out
    assert "Balanced:      yes" in out


def test_validate_unbalanced(tmp_path, capsys) -> None:
    path = tmp_path / "skewed.csv"
    path.write_text(BALANCED_TB + "7500,Sundry,100,\n", encoding="utf-8")

    main(["validate", str(path)])

    out = capsys.readouterr().out
    assert "Difference:    R 100.00" in out
    assert "Balanced:      no" in out


def test_validate_missing_file(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["validate", str(tmp_path / "missing.csv")])
    assert exc.value.code == 2


def test_statements_refuses_unbalanced_trial_balance(tmp_path) -> None:
    path = tmp_path / "skewed.csv"
    path.write_text(BALANCED_TB + "7500,Sundry,100,\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main(["statements", str(path)])
    assert exc.value.code == 2


def test_statements_csv_output(tb_file, mappings_file, tmp_path, capsys) -> None:
    output_dir = tmp_path / "out"

    main(
        [
            "statements",
            str(tb_file),
            "--mappings",
            str(mappings_file),
            "--display-mode",
            "csv",
            "--output",
            str(output_dir),
        ]
    )

    written = sorted(p.name.rsplit("_", 1)[0] for p in output_dir.glob("*.csv"))
    assert written == ["comprehensive_income", "financial_position", "ratios"]

    position = pd.read_csv(next(output_dir.glob("financial_position_*.csv")))
    amounts = dict(zip(position["key"], position["amount"]))
    assert amounts["total_assets"] == pytest.approx(1500.0)
    assert amounts["total_equity_and_liabilities"] == pytest.approx(1500.0)

    income = pd.read_csv(next(output_dir.glob("comprehensive_income_*.csv")))
    amounts = dict(zip(income["key"], income["amount"]))
    assert amounts["gross_profit"] == pytest.approx(500.0)
    assert amounts["profit_for_year"] == pytest.approx(0.0)

    assert "Wrote" in capsys.readouterr().out


def test_statements_table_reports_unmapped(tb_file, capsys) -> None:
    main(["statements", str(tb_file), "--scope", "position"])

    out = capsys.readouterr().out
    assert "=== Statement of Financial Position ===" in out
    assert "=== Statement of Comprehensive Income ===" not in out
    assert "=== Unmapped entries ===" in out


def test_statements_allow_unbalanced(tmp_path, mappings_file, capsys) -> None:
    path = tmp_path / "skewed.csv"
    path.write_text(BALANCED_TB + "7500,Sundry,100,\n", encoding="utf-8")

    main(
        [
            "statements",
            str(path),
            "--mappings",
            str(mappings_file),
            "--scope",
            "income",
            "--allow-unbalanced",
        ]
    )

    assert "=== Statement of Comprehensive Income ===" in capsys.readouterr().out


def test_statements_mappings_from_config(
    tb_file, mappings_file, tmp_path, capsys
) -> None:
    """Mapping overrides named in the configuration file are applied."""
    config = tmp_path / "afs.toml"
    config.write_text(
        f'[mappings]\noverrides_file = "{mappings_file.name}"\n', encoding="utf-8"
    )

    main(["--config", str(config), "statements", str(tb_file), "--scope", "all"])

    out = capsys.readouterr().out
    assert "=== Ratios ===" in out
    assert "=== Unmapped entries ===" not in out


def test_suggest(capsys) -> None:
    main(["suggest", "1050", "Petty Cash"])

    out = capsys.readouterr().out
    assert "ASSET" in out
    assert "cash" in out


def test_tax(capsys) -> None:
    main(
        [
            "tax",
            "--taxable-income",
            "100000",
            "--vat-amount",
            "1150",
            "--vat-inclusive",
            "--salary",
            "30000",
            "--payroll",
            "600000",
        ]
    )

    out = capsys.readouterr().out
    assert "R 27,000.00" in out
    assert "VAT included (15%): R 150.00" in out
    assert "UIF total:    R 354.24" in out
    assert "Skills development levy: R 6,000.00" in out


def test_invalid_config(tmp_path) -> None:
    config = tmp_path / "bad.toml"
    config.write_text("[fiscal_year]\nstart_month = 0\n", encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["--config", str(config), "tax", "--salary", "1000"])


def test_statements_warns_about_asset_mapped_to_expense_line(
    tb_file, tmp_path, capsys, caplog
) -> None:
    """A bank account mapped to an expense line shows up as unmapped."""
    mappings = tmp_path / "bank_as_expense.csv"
    mappings.write_text(
        MAPPINGS.replace("1000,cash", "1000,administrative_expenses"),
        encoding="utf-8",
    )

    main(["statements", str(tb_file), "--mappings", str(mappings), "--scope", "income"])

    out = capsys.readouterr().out
    assert "=== Unmapped entries ===" in out
    assert "could not be placed" in caplog.text
