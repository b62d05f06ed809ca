from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from spo_precheck.cli.args import parse_args
from spo_precheck.cli.controller import EXIT_FATAL, EXIT_OK, main
from spo_precheck.tests.fakes import FakeEngine

DEST = "https://contoso.sharepoint.com/sites/Target"
HR = "https://contoso.sharepoint.com/sites/HR"
FIN = "https://contoso.sharepoint.com/sites/Finance"
GONE = "https://contoso.sharepoint.com/sites/Gone"


# -----------------------------
# Helpers
# -----------------------------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("PRECHECK_PASSWORD", raising=False)
    monkeypatch.delenv("PRECHECK_INI", raising=False)


def write_config(tmp_path: Path, sites: list[str] | None) -> Path:
    root = tmp_path.as_posix()
    if sites is not None:
        (tmp_path / "sites.csv").write_text("SourceSite\n" + "".join(s + "\n" for s in sites), encoding="utf-8")
    ini = tmp_path / "SPOPreCheck.ini"
    ini.write_text(
        f"""
[paths]
source_list_path = {root}/sites.csv
report_path = {root}/Reports
consolidated_output_file = {root}/Final/Consolidated.xlsx
log_file = {root}/PreCheck.log

[sharepoint]
destination_url = {DEST}

[credentials]
username = admin@contoso.com
password = s3cret
""",
        encoding="utf-8",
    )
    return ini


def report_files(tmp_path: Path) -> list[Path]:
    return sorted((tmp_path / "Reports").glob("*.xlsx"))


# -----------------------------
# Tests
# -----------------------------
def test_unreachable_site_with_clean_sites_exits_zero(tmp_path: Path):
    ini = write_config(tmp_path, [HR, GONE, FIN])
    engine = FakeEngine(unreachable=(GONE,))

    code = main(["--config", str(ini)], engine=engine)

    assert code == EXIT_OK
    assert report_files(tmp_path) == []
    assert engine.checked == [HR, FIN]
    # nothing to consolidate
    assert not (tmp_path / "Final" / "Consolidated.xlsx").exists()


def test_destination_failure_exits_non_zero_before_any_site(tmp_path: Path):
    ini = write_config(tmp_path, [HR, FIN])
    engine = FakeEngine(results={HR: ("HR", 1, 1)}, unreachable=(DEST,))

    code = main(["--config", str(ini)], engine=engine)

    assert code == EXIT_FATAL
    assert engine.connected == [DEST]
    assert report_files(tmp_path) == []
    assert not (tmp_path / "Final" / "Consolidated.xlsx").exists()


def test_end_to_end_writes_consolidated_workbook(tmp_path: Path):
    ini = write_config(tmp_path, [HR, FIN])
    engine = FakeEngine(
        results={HR: ("HR", 2, 1), FIN: ("Finance", 0, 0)},
        rows={
            HR: [
                {"Type": "User", "Result": "Warning", "Message": "a"},
                {"Type": "User", "Result": "Warning", "Message": "b"},
                {"Type": "Group", "Result": "Error", "Message": "c"},
            ]
        },
    )

    code = main(["--config", str(ini)], engine=engine)

    assert code == EXIT_OK
    assert [p.name.split("_PreCheck_")[0] for p in report_files(tmp_path)] == ["HR"]
    sheets = pd.read_excel(tmp_path / "Final" / "Consolidated.xlsx", sheet_name=None, engine="openpyxl")
    assert list(sheets) == ["ConsolidatedData", "FilteredUserWarnings", "FilteredGroup"]
    assert [len(sheets[name]) for name in sheets] == [3, 2, 1]
    assert "SUCCESS" in (tmp_path / "PreCheck.log").read_text(encoding="utf-8")


def test_missing_site_list_is_fatal(tmp_path: Path):
    ini = write_config(tmp_path, None)
    engine = FakeEngine()

    assert main(["--config", str(ini)], engine=engine) == EXIT_FATAL
    assert engine.connected == []


def test_unavailable_engine_is_fatal(tmp_path: Path):
    ini = write_config(tmp_path, [HR])
    engine = FakeEngine(available=False)

    assert main(["--config", str(ini)], engine=engine) == EXIT_FATAL
    assert engine.connected == []


def test_aggregate_stage_does_not_touch_engine(tmp_path: Path):
    ini = write_config(tmp_path, [HR])
    reports = tmp_path / "Reports"
    reports.mkdir()
    pd.DataFrame([{"Type": "Group", "Result": "Warning"}]).to_excel(reports / "X_PreCheck_20240101_000000.xlsx", index=False)
    engine = FakeEngine(available=False)

    code = main(["--config", str(ini), "--stage", "aggregate"], engine=engine)

    assert code == EXIT_OK
    assert engine.connected == []
    sheets = pd.read_excel(tmp_path / "Final" / "Consolidated.xlsx", sheet_name=None, engine="openpyxl")
    assert len(sheets["FilteredGroup"]) == 1


def test_precheck_stage_skips_aggregation(tmp_path: Path):
    ini = write_config(tmp_path, [HR])
    engine = FakeEngine(results={HR: ("HR", 1, 0)})

    code = main(["--config", str(ini), "--stage", "precheck"], engine=engine)

    assert code == EXIT_OK
    assert len(report_files(tmp_path)) == 1
    assert not (tmp_path / "Final" / "Consolidated.xlsx").exists()


def test_missing_ini_warning_reaches_log_file(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    missing = tmp_path / "missing.ini"

    code = main(["--config", str(missing), "--stage", "aggregate"], engine=FakeEngine())

    assert code == EXIT_OK
    log_text = (tmp_path / "PreCheck.log").read_text(encoding="utf-8")
    assert "[WARNING] INI file not found or unreadable" in log_text
    assert "missing.ini" in log_text


def test_parse_args_defaults():
    args = parse_args([])
    assert args.config is None
    assert args.stage == "all"
    assert not args.verbose
