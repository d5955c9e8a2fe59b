"""
Orchestrator
============
Drives one ingestion run from event payload to pushed bot branch.

Flow:
    decode payload → (inactive issue? stop) → resolve body → extract links
    → (no accepted links? stop) → per URL: download → identify → place
    → per touched model directory: merge → publish once

Failure policy:
    Whole-run atomicity. Any error for any URL propagates immediately and
    nothing is published; files already moved stay where they are. The
    caller decides the exit code.
"""
import logging
from pathlib import Path
from typing import Optional

from iocost_bot.agents.publisher import Publisher
from iocost_bot.core.config import Settings
from iocost_bot.executor.bench_tool import BenchTool, ResctlBench, merge_model_directory
from iocost_bot.models.change_set import StagedChangeSet
from iocost_bot.models.event_context import decode_event_context, resolve_body
from iocost_bot.models.run_report import (
    OUTCOME_INACTIVE,
    OUTCOME_NO_LINKS,
    OUTCOME_PUBLISHED,
    RunReport,
)
from iocost_bot.parser.link_extractor import extract_links
from iocost_bot.services.directory_organizer import DirectoryOrganizer
from iocost_bot.services.downloader import Downloader
from iocost_bot.services.results_writer import ResultsWriter

logger = logging.getLogger(__name__)


class IngestPipeline:
    """
    Wires the pipeline components together for a single event.

    Every collaborator is injected so tests can swap in fakes; from_settings()
    builds the production wiring.
    """

    def __init__(
        self,
        repo_root: Path,
        allowed_prefixes,
        downloader: Downloader,
        bench: BenchTool,
        publisher: Publisher,
        report_path: Optional[Path] = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.allowed_prefixes = tuple(allowed_prefixes)
        self.downloader = downloader
        self.bench = bench
        self.publisher = publisher
        self.report_path = report_path

    @classmethod
    def from_settings(cls, settings: Settings) -> "IngestPipeline":
        return cls(
            repo_root=settings.repo_root,
            allowed_prefixes=settings.allowed_prefixes,
            downloader=Downloader(settings.download_dir, timeout=settings.http_timeout),
            bench=ResctlBench(settings.bench_binary, cwd=settings.repo_root),
            publisher=Publisher(
                repo_root=settings.repo_root,
                token=settings.token,
                remote=settings.remote,
                username=settings.bot_username,
                author_name=settings.bot_name,
                author_email=settings.bot_email,
            ),
            report_path=settings.report_path,
        )

    def run(self, raw_payload: str) -> RunReport:
        """
        Process one event payload to completion.

        Returns
        -------
        RunReport
            Terminal outcome: published, inactive_issue or no_links.

        Raises
        ------
        IngestError
            Any stage failure. Nothing is published once one is raised.
        """
        context = decode_event_context(raw_payload)
        issue_number = context.issue.number

        if context.is_inactive:
            logger.info("Issue is either locked or not in the open state, doing nothing...")
            return self._finish(RunReport(outcome=OUTCOME_INACTIVE, issue_number=issue_number))

        body = resolve_body(context)
        extraction = extract_links(body, self.allowed_prefixes)
        report = RunReport(
            outcome=OUTCOME_NO_LINKS,
            issue_number=issue_number,
            accepted_urls=extraction.accepted,
            rejected_urls=extraction.rejected,
        )

        if not extraction.accepted:
            logger.info("No trusted result URLs in issue #%d, nothing to import", issue_number)
            return self._finish(report)

        change_set = StagedChangeSet()
        organizer = DirectoryOrganizer(self.repo_root, change_set)

        for url in extraction.accepted:
            result = self.downloader.fetch(url)
            model = self.bench.identify(result.path)
            logger.info("filename: %s model: %s", result.filename, model)
            organizer.place(result, model)

        # Merge only after every placement so each merge sees all new files
        for model_dir in change_set.model_dirs:
            merged = merge_model_directory(self.bench, self.repo_root / model_dir)
            change_set.add_path(organizer.relative(merged))

        published = self.publisher.publish(change_set, issue_number)

        report.outcome = OUTCOME_PUBLISHED
        report.model_dirs = list(change_set.model_dirs)
        report.staged_paths = list(change_set.paths)
        if published is not None:
            report.branch = published.branch
            report.commit_sha = published.commit_sha

        logger.info(
            "Imported %d result(s) into %s",
            len(extraction.accepted), ", ".join(change_set.model_dirs),
        )
        return self._finish(report)

    def _finish(self, report: RunReport) -> RunReport:
        if self.report_path is not None:
            ResultsWriter.write_report(report, self.report_path)
        return report

    def close(self) -> None:
        self.downloader.close()
