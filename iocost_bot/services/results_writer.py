"""
Results Writer
==============
Serializes a RunReport to JSON for the workflow step that opens the PR.
"""
import logging
from pathlib import Path
from typing import Optional

from iocost_bot.models.run_report import RunReport

logger = logging.getLogger(__name__)


class ResultsWriter:

    @staticmethod
    def write_report(report: RunReport, output_path: Path) -> Optional[Path]:
        """
        Write report to output_path, creating parent directories.

        The report lives outside the staged change set and is never committed.
        It is written after publishing, so a write failure is logged and
        returns None instead of changing the run's outcome.
        """
        output_path = Path(output_path).resolve()
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Writing run report to %s", output_path)
            output_path.write_text(report.model_dump_json(indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write run report to %s: %s", output_path, e, exc_info=True)
            return None
        return output_path
