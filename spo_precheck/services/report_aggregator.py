from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from spo_precheck.domain.errors import ReportWriteError
from spo_precheck.domain.models import AggregateResult, FileLoad
from spo_precheck.log_setup import log_success
from spo_precheck.repositories.report_repository import ReportRepository

logger = logging.getLogger(__name__)

SHEET_CONSOLIDATED = "ConsolidatedData"
SHEET_USER = "FilteredUserWarnings"
SHEET_GROUP = "FilteredGroup"

FLAGGED_RESULTS = ("Warning", "Error")


def flagged_rows(rows: pd.DataFrame, type_tag: str) -> pd.DataFrame:
    """Rows with Type == type_tag and Result in Warning/Error."""
    if "Type" not in rows.columns or "Result" not in rows.columns:
        return rows.iloc[0:0]
    mask = (rows["Type"] == type_tag) & rows["Result"].isin(FLAGGED_RESULTS)
    return rows[mask]


def _concat(frames: list[pd.DataFrame]) -> pd.DataFrame:
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True, sort=False)


@dataclass
class ReportAggregator:
    """
    Merges every per-site artifact in a directory into one workbook with a
    consolidated sheet plus User and Group sheets holding only Warning/Error rows.
    """
    report_repo: ReportRepository

    def aggregate(self, input_dir: Path, output_file: Path) -> Optional[AggregateResult]:
        files = self.report_repo.list_artifacts(input_dir, exclude=output_file)
        if not files:
            logger.warning("No reports found in %s; nothing to consolidate.", input_dir)
            return None

        consolidated: list[pd.DataFrame] = []
        users: list[pd.DataFrame] = []
        groups: list[pd.DataFrame] = []
        loaded: list[Path] = []
        failed: list[tuple[Path, str]] = []

        for path in files:
            load = self.load_file(path)
            if not load.ok:
                failed.append((path, load.error))
                continue

            loaded.append(path)
            rows = load.rows
            if rows.empty:
                continue
            consolidated.append(rows)
            for bucket, tag in ((users, "User"), (groups, "Group")):
                subset = flagged_rows(rows, tag)
                if not subset.empty:
                    bucket.append(subset)

        sheets = {
            SHEET_CONSOLIDATED: _concat(consolidated),
            SHEET_USER: _concat(users),
            SHEET_GROUP: _concat(groups),
        }

        try:
            self.report_repo.write_sheets(output_file, sheets)
        except Exception as e:
            raise ReportWriteError(f"Failed to write consolidated report {output_file}: {e}") from e

        result = AggregateResult(
            output_file=output_file,
            loaded_files=tuple(loaded),
            failed_files=tuple(failed),
            consolidated_rows=len(sheets[SHEET_CONSOLIDATED]),
            user_rows=len(sheets[SHEET_USER]),
            group_rows=len(sheets[SHEET_GROUP]),
        )
        log_success(
            logger,
            "Consolidated %d file(s) (%d skipped) into %s: %d rows, %d user, %d group",
            len(loaded), len(failed), output_file,
            result.consolidated_rows, result.user_rows, result.group_rows,
        )
        return result

    def load_file(self, path: Path) -> FileLoad:
        load = self.report_repo.load(path)
        if load.ok:
            logger.info("Loaded %d row(s) from %s", len(load.rows), path.name)
        else:
            logger.error("Skipping unreadable report %s: %s", path.name, load.error)
        return load
