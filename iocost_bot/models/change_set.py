"""
Staged Change Set
=================
Ordered, duplicate-free record of everything a run will commit.

Fields:
    paths       - repo-relative POSIX paths (result files and merged files)
    model_dirs  - repo-relative model directories in order of first touch

Built incrementally by the DirectoryOrganizer and the merge step, consumed
exactly once by the Publisher.
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class StagedChangeSet:
    paths: List[str] = field(default_factory=list)
    model_dirs: List[str] = field(default_factory=list)

    def add_path(self, path: str) -> None:
        if path not in self.paths:
            self.paths.append(path)

    def touch_model_dir(self, model_dir: str) -> None:
        if model_dir not in self.model_dirs:
            self.model_dirs.append(model_dir)

    @property
    def is_empty(self) -> bool:
        return not self.paths

    def __len__(self) -> int:
        return len(self.paths)
