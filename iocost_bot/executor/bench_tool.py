"""
Bench Tool
==========
Narrow interface to resctl-bench, the external benchmark analysis binary.

Two operations are consumed:
    identify(path)                → normalized model name   (`--result <path> info`)
    merge(merged_path, results)   → merged artifact path    (`--result <merged> merge <file>...`)

BOUNDARY RULES:
    - Never parses the result files themselves.
    - Anything on stderr is fatal, whatever the exit code: warnings from the
      tool must not be silently swallowed.
    - A non-zero exit with a clean stderr is fatal too.

ResctlBench runs the real binary; iocost_bot.testing.FakeBenchTool is the
in-memory stand-in used by tests.
"""
import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from iocost_bot.core.constants import MERGED_FILENAME, RESULT_GLOB
from iocost_bot.core.errors import ExternalToolError, InvalidModelName, ParseError

logger = logging.getLogger(__name__)


class BenchTool(Protocol):
    def identify(self, result_path: Path) -> str:
        ...

    def merge(self, merged_path: Path, result_paths: Sequence[Path]) -> Path:
        ...


# ---------------------------------------------------------------------------
# Info report parsing
# ---------------------------------------------------------------------------
def parse_model_description(report: str) -> str:
    """
    Extract the model description from the first line of an info report.

    The first line looks like "<label>: <description>".

    Raises
    ------
    ParseError
        If there is no first line or it has no ": " separator.
    """
    lines = report.splitlines()
    if not lines:
        raise ParseError("resctl-bench info produced no output")

    _label, sep, description = lines[0].partition(": ")
    if not sep:
        raise ParseError(f"Unexpected info report header: {lines[0]!r}")
    return description


def normalize_model_name(description: str) -> str:
    """
    Collapse whitespace runs to underscores.

    Raises
    ------
    InvalidModelName
        If the result is empty, '.', '..' or contains a path separator.
    """
    name = "_".join(description.split())
    if not name or name in (".", "..") or re.search(r"[/\\]", name):
        raise InvalidModelName(f"Model name {name!r} cannot be used as a directory name")
    return name


def list_result_files(model_dir: Path) -> List[Path]:
    """Every result-*.json.gz in model_dir, sorted for a stable argument list."""
    return sorted(p for p in Path(model_dir).glob(RESULT_GLOB) if p.is_file())


# ---------------------------------------------------------------------------
# Process-backed implementation
# ---------------------------------------------------------------------------
class ResctlBench:
    """Runs the resctl-bench binary as a subprocess."""

    def __init__(self, binary: Path, cwd: Optional[Path] = None) -> None:
        self.binary = Path(binary)
        self.cwd = cwd

    def _run(self, args: List[str]) -> str:
        cmd = [str(self.binary)] + args
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, cwd=self.cwd, capture_output=True)
        except OSError as e:
            raise ExternalToolError(f"could not run {self.binary}: {e}") from e

        stderr = proc.stderr.decode("utf-8", errors="replace")
        if stderr:
            raise ExternalToolError(stderr)
        if proc.returncode != 0:
            raise ExternalToolError(f"{self.binary.name} exited with status {proc.returncode}")

        try:
            return proc.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"resctl-bench output is not valid UTF-8: {e}") from e

    def identify(self, result_path: Path) -> str:
        report = self._run(["--result", str(result_path), "info"])
        model = normalize_model_name(parse_model_description(report))
        logger.info("Identified %s as model %s", Path(result_path).name, model)
        return model

    def merge(self, merged_path: Path, result_paths: Sequence[Path]) -> Path:
        args = ["--result", str(merged_path), "merge"] + [str(p) for p in result_paths]
        output = self._run(args)
        if output.strip():
            logger.info("resctl-bench merge output:\n%s", output.rstrip())
        return Path(merged_path)


# ---------------------------------------------------------------------------
# Merge step
# ---------------------------------------------------------------------------
def merge_model_directory(bench: BenchTool, model_dir: Path) -> Path:
    """
    Fold every result file in model_dir into merged-results.json.gz.

    Called once per touched directory, after all placements of the run, so
    the merge always sees the full set of newly added files.
    """
    model_dir = Path(model_dir)
    results = list_result_files(model_dir)
    merged_path = model_dir / MERGED_FILENAME

    logger.info("Merging %d result(s) in %s", len(results), model_dir.name)
    return bench.merge(merged_path, results)
