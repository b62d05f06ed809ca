from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd

from spo_precheck.domain.models import FileLoad

EXCEL_ENGINE = "openpyxl"


@dataclass
class ReportRepository:
    """
    Repository pattern: encapsulates locating per-site artifacts, loading them,
    and writing the consolidated workbook.
    """
    extension: str = ".xlsx"

    def list_artifacts(self, report_dir: Path, exclude: Optional[Path] = None) -> list[Path]:
        if not report_dir.is_dir():
            return []

        excluded = exclude.resolve() if exclude else None
        candidates = [
            p for p in report_dir.iterdir()
            if p.suffix.lower() == self.extension
            and p.is_file()
            and not p.name.startswith("~$")
            and p.resolve() != excluded
        ]
        return sorted(candidates, key=lambda p: p.name)

    def load(self, path: Path) -> FileLoad:
        try:
            rows = pd.read_excel(path, sheet_name=0, engine=EXCEL_ENGINE)
        except Exception as e:
            # corrupt zip, not a workbook, permission denied...
            return FileLoad(path=path, rows=None, error=f"{type(e).__name__}: {e}")
        return FileLoad(path=path, rows=rows)

    def write_sheets(self, output_file: Path, sheets: Mapping[str, pd.DataFrame]) -> None:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(output_file, engine=EXCEL_ENGINE) as w:
            for sheet_name, frame in sheets.items():
                frame.to_excel(w, index=False, sheet_name=sheet_name)
