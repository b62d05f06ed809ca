from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from spo_precheck.domain.errors import SourceListError
from spo_precheck.domain.models import SiteEntry

logger = logging.getLogger(__name__)


@dataclass
class SiteListRepository:
    """
    Reads the delimited site list (header row required).
    """
    path: Path
    source_column: str = "SourceSite"
    delimiter: str = ","

    def load(self) -> list[SiteEntry]:
        if not self.path.is_file():
            raise SourceListError(f"Site list not found: {self.path}")

        try:
            df = pd.read_csv(
                self.path,
                sep=self.delimiter,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
            )
        except pd.errors.EmptyDataError as e:
            raise SourceListError(f"Site list is empty: {self.path}") from e
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise SourceListError(f"Site list unreadable: {self.path}: {e}") from e

        column = self._pick_column(list(df.columns))

        # row 1 is the header
        entries = [
            SiteEntry(url=(value or "").strip(), row_number=i + 2)
            for i, value in enumerate(df[column].tolist())
        ]
        logger.info("Loaded %d site(s) from %s (column '%s')", len(entries), self.path, column)
        return entries

    def _pick_column(self, columns: list[str]) -> str:
        stripped = {str(c).strip(): c for c in columns}
        if self.source_column in stripped:
            return stripped[self.source_column]
        if len(columns) == 1:
            logger.warning(
                "Column '%s' not found in %s; using its only column '%s'",
                self.source_column, self.path, columns[0],
            )
            return columns[0]
        raise SourceListError(
            f"Column '{self.source_column}' not found in {self.path}; columns: {', '.join(map(str, columns))}"
        )
