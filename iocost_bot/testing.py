"""Test doubles for iocost_bot - use in pipeline / integration tests.

Usage::

    from iocost_bot.testing import FakeBenchTool

    bench = FakeBenchTool(default_model="Samsung_SSD_970")
    bench = FakeBenchTool(models={"result-abc.json.gz": "WDC_WD10"})
    bench = FakeBenchTool(identify_error="warning: unknown field")
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from iocost_bot.core.errors import ExternalToolError


class FakeBenchTool:
    """In-memory stand-in for ResctlBench.

    Parameters
    ----------
    models:
        Maps result file names to the model name ``identify`` returns.
    default_model:
        Returned for files not listed in ``models``.
    identify_error / merge_error:
        When set, the matching operation raises ``ExternalToolError`` with
        this text as if the tool had written it to stderr.
    """

    def __init__(
        self,
        *,
        models: Optional[Dict[str, str]] = None,
        default_model: str = "Fake_Model",
        identify_error: Optional[str] = None,
        merge_error: Optional[str] = None,
    ) -> None:
        self.models = dict(models or {})
        self.default_model = default_model
        self.identify_error = identify_error
        self.merge_error = merge_error
        self.identify_calls: List[Path] = []
        self.merge_calls: List[Tuple[Path, List[Path]]] = []

    def identify(self, result_path: Path) -> str:
        self.identify_calls.append(Path(result_path))
        if self.identify_error is not None:
            raise ExternalToolError(self.identify_error)
        return self.models.get(Path(result_path).name, self.default_model)

    def merge(self, merged_path: Path, result_paths: Sequence[Path]) -> Path:
        self.merge_calls.append((Path(merged_path), [Path(p) for p in result_paths]))
        if self.merge_error is not None:
            raise ExternalToolError(self.merge_error)
        # Stand-in artifact: the names of the merged inputs
        merged = Path(merged_path)
        merged.write_text("\n".join(Path(p).name for p in result_paths) + "\n")
        return merged
