from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from spo_precheck.adapters.precheck_engine import CommandPreCheckEngine, PreCheckEngine
from spo_precheck.config.ini_config import AppSettings
from spo_precheck.repositories.report_repository import ReportRepository
from spo_precheck.repositories.site_list_repository import SiteListRepository
from spo_precheck.services.batch_runner import BatchPreCheckRunner
from spo_precheck.services.report_aggregator import ReportAggregator
from spo_precheck.services.url_normalization import SiteUrlNormalizer


@dataclass(frozen=True)
class App:
    settings: AppSettings
    engine: PreCheckEngine
    site_list: SiteListRepository
    runner: BatchPreCheckRunner
    aggregator: ReportAggregator


def create_app(settings: AppSettings, engine: Optional[PreCheckEngine] = None) -> App:
    """Composition root: wires settings into repositories and services."""
    if engine is None:
        engine = CommandPreCheckEngine(
            command=settings.engine_command,
            timeout_seconds=settings.engine_timeout_seconds,
        )

    url_norm = SiteUrlNormalizer(default_scheme=settings.default_scheme)

    site_list = SiteListRepository(
        path=settings.source_list_path,
        source_column=settings.source_column,
        delimiter=settings.delimiter,
    )

    runner = BatchPreCheckRunner(
        engine=engine,
        url_normalizer=url_norm,
        report_dir=settings.report_path,
    )

    aggregator = ReportAggregator(report_repo=ReportRepository())

    return App(
        settings=settings,
        engine=engine,
        site_list=site_list,
        runner=runner,
        aggregator=aggregator,
    )
