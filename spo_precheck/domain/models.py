######## models.py
########

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

# Outcome statuses. The first two count as succeeded, the rest as failed.
STATUS_ISSUES = "issues"
STATUS_CLEAN = "clean"
STATUS_INVALID = "invalid"
STATUS_CONNECT_FAILED = "connect_failed"
STATUS_CHECK_FAILED = "check_failed"
STATUS_EXPORT_FAILED = "export_failed"

SUCCEEDED_STATUSES = frozenset({STATUS_ISSUES, STATUS_CLEAN})


@dataclass(frozen=True)
class SiteEntry:
    url: str
    row_number: int = 0


@dataclass(frozen=True)
class Credential:
    username: str
    password: str = field(default="", repr=False)


@dataclass(frozen=True)
class PreCheckResult:
    title: str
    warnings: int
    errors: int
    report_ref: str = ""        # opaque handle the engine needs for export

    @property
    def has_issues(self) -> bool:
        return (self.warnings + self.errors) > 0


@dataclass(frozen=True)
class SiteOutcome:
    entry: SiteEntry
    status: str
    detail: str = ""
    artifact: Optional[Path] = None
    warnings: int = 0
    errors: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status in SUCCEEDED_STATUSES


@dataclass(frozen=True)
class BatchSummary:
    outcomes: tuple[SiteOutcome, ...]

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    @property
    def artifacts(self) -> list[Path]:
        return [o.artifact for o in self.outcomes if o.artifact is not None]


@dataclass(frozen=True)
class FileLoad:
    path: Path
    rows: Optional[pd.DataFrame]
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.rows is not None


@dataclass(frozen=True)
class AggregateResult:
    output_file: Path
    loaded_files: tuple[Path, ...]
    failed_files: tuple[tuple[Path, str], ...]
    consolidated_rows: int
    user_rows: int
    group_rows: int
