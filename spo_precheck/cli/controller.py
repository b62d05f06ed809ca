from __future__ import annotations

import logging
from typing import Optional, Sequence

from spo_precheck.adapters.precheck_engine import PreCheckEngine
from spo_precheck.app_factory import App, create_app
from spo_precheck.cli.args import STAGE_AGGREGATE, STAGE_PRECHECK, parse_args
from spo_precheck.config.ini_config import IniConfig
from spo_precheck.domain.errors import FatalError
from spo_precheck.domain.models import Credential
from spo_precheck.log_setup import PACKAGE_LOGGER, setup_logging

logger = logging.getLogger(PACKAGE_LOGGER)

EXIT_OK = 0
EXIT_FATAL = 1


def run_stages(app: App, stage: str) -> None:
    settings = app.settings

    if stage != STAGE_AGGREGATE:
        app.engine.ensure_available()
        sites = app.site_list.load()
        summary = app.runner.run(
            settings.destination_url,
            Credential(username=settings.username, password=settings.password),
            sites,
        )
        for outcome in summary.outcomes:
            if not outcome.succeeded:
                logger.error("  row %d %s: %s %s", outcome.entry.row_number, outcome.entry.url, outcome.status, outcome.detail)

    if stage != STAGE_PRECHECK:
        app.aggregator.aggregate(settings.report_path, settings.consolidated_output_file)


def main(argv: Optional[Sequence[str]] = None, *, engine: Optional[PreCheckEngine] = None) -> int:
    """
    CLI boundary: the only place fatal errors become exit codes.
    `engine` lets callers (tests) substitute the vendor engine.
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        ini = IniConfig.from_env_or_default(args.config)
        settings = ini.load_settings()
        setup_logging(settings.log_file, verbose=args.verbose)
        if ini.found:
            logger.info("Using configuration %s", ini.ini_path)
        else:
            logger.warning("INI file not found or unreadable: %s; using built-in defaults", ini.ini_path)

        app = create_app(settings, engine=engine)
        run_stages(app, args.stage)
    except FatalError as e:
        logger.error("Fatal: %s", e, exc_info=True)
        return EXIT_FATAL
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        return EXIT_FATAL

    return EXIT_OK
