"""
iocost-bot entry point.

Runs once per GitHub issue / issue_comment event:

    GITHUB_CONTEXT='${{ toJson(github) }}' GITHUB_TOKEN=... python main.py

Exit codes: 0 when results were published or there was nothing to do,
1 on any pipeline failure.
"""
import logging
import sys
from typing import Mapping, Optional

from iocost_bot.agents.orchestrator import IngestPipeline
from iocost_bot.core.config import load_settings
from iocost_bot.core.errors import ConfigurationError, IngestError
from iocost_bot.utils.logging_config import setup_logging

logger = logging.getLogger("main")


def run(environ: Optional[Mapping[str, str]] = None) -> int:
    try:
        settings = load_settings(environ)
    except ConfigurationError as e:
        setup_logging()
        logger.error("%s", e)
        return 1

    setup_logging(level=settings.log_level, log_dir=settings.log_dir)

    pipeline = IngestPipeline.from_settings(settings)
    try:
        report = pipeline.run(settings.payload)
    except IngestError as e:
        logger.error("Run aborted: %s", e)
        return 1
    finally:
        pipeline.close()

    logger.info("Run finished: %s", report.outcome)
    return 0


if __name__ == "__main__":
    sys.exit(run())
