from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from spo_precheck.adapters.precheck_engine import PreCheckEngine, SiteConnection
from spo_precheck.domain import models
from spo_precheck.domain.errors import DestinationConnectionError, EngineError
from spo_precheck.domain.models import BatchSummary, Credential, SiteEntry, SiteOutcome
from spo_precheck.log_setup import log_success
from spo_precheck.services.naming import artifact_name
from spo_precheck.services.url_normalization import UrlNormalizer

logger = logging.getLogger(__name__)


@dataclass
class BatchPreCheckRunner:
    """
    Service layer: runs the vendor pre-check for every source site against one
    destination and exports a report for each site that has warnings or errors.
    Sites are processed one at a time, in input order.
    """
    engine: PreCheckEngine
    url_normalizer: UrlNormalizer
    report_dir: Path
    clock: Callable[[], datetime] = datetime.now

    def run(self, destination_url: str, credential: Credential, sites: Iterable[SiteEntry]) -> BatchSummary:
        self.report_dir.mkdir(parents=True, exist_ok=True)

        destination_norm = self.url_normalizer.normalize(destination_url)
        if not destination_norm:
            raise DestinationConnectionError(f"Destination URL is missing or malformed: {destination_url!r}")

        logger.info("Connecting to destination %s", destination_norm)
        try:
            destination = self.engine.connect(destination_norm, credential)
        except EngineError as e:
            raise DestinationConnectionError(f"Could not connect to destination {destination_norm}: {e}") from e

        outcomes: list[SiteOutcome] = []
        with destination:
            for entry in sites:
                outcome = self.process_site(entry, destination, credential)
                outcomes.append(outcome)

        summary = BatchSummary(outcomes=tuple(outcomes))
        logger.info(
            "Pre-check finished: attempted=%d succeeded=%d failed=%d artifacts=%d",
            summary.attempted, summary.succeeded, summary.failed, len(summary.artifacts),
        )
        return summary

    def process_site(self, entry: SiteEntry, destination: SiteConnection, credential: Credential) -> SiteOutcome:
        url = self.url_normalizer.normalize(entry.url)
        if not url:
            logger.error("Row %d: invalid source site identifier %r", entry.row_number, entry.url)
            return SiteOutcome(entry=entry, status=models.STATUS_INVALID, detail="missing or malformed URL")

        logger.info("Processing %s", url)

        try:
            source = self.engine.connect(url, credential)
        except EngineError as e:
            logger.error("Failed to connect to %s: %s", url, e)
            return SiteOutcome(entry=entry, status=models.STATUS_CONNECT_FAILED, detail=str(e))

        with source:
            try:
                result = self.engine.check(source, destination)
            except EngineError as e:
                logger.error("Pre-check failed for %s: %s", url, e)
                return SiteOutcome(entry=entry, status=models.STATUS_CHECK_FAILED, detail=str(e))

            if not result.has_issues:
                log_success(logger, "No issues found for %s", url)
                return SiteOutcome(entry=entry, status=models.STATUS_CLEAN)

            path = self.report_dir / artifact_name(result.title or source.title, self.clock(), fallback=url)
            if path.exists():
                logger.error("Refusing to overwrite existing report %s for %s", path, url)
                return SiteOutcome(
                    entry=entry,
                    status=models.STATUS_EXPORT_FAILED,
                    detail=f"report already exists: {path.name}",
                    warnings=result.warnings,
                    errors=result.errors,
                )

            try:
                self.engine.export(result, path)
            except (EngineError, OSError) as e:
                logger.error("Export failed for %s: %s", url, e)
                # path did not exist before the export, so anything there is a partial write
                try:
                    path.unlink(missing_ok=True)
                except OSError as cleanup_error:
                    logger.error("Could not remove partial report %s: %s", path, cleanup_error)
                return SiteOutcome(
                    entry=entry,
                    status=models.STATUS_EXPORT_FAILED,
                    detail=str(e),
                    warnings=result.warnings,
                    errors=result.errors,
                )

        logger.warning(
            "%s: %d warning(s), %d error(s); report saved to %s",
            url, result.warnings, result.errors, path,
        )
        return SiteOutcome(
            entry=entry,
            status=models.STATUS_ISSUES,
            artifact=path,
            warnings=result.warnings,
            errors=result.errors,
        )
