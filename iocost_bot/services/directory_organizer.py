"""
Directory Organizer
===================
Moves downloaded results into database/<model>/ and records what changed.

Rules:
    - Model directories are created lazily; an existing one is fine.
    - Files are renamed, never copied; a same-named sibling (identical
      content, by construction) is replaced.
    - Other files in the directory are never touched.
    - Every placed file is registered in the StagedChangeSet, and its model
      directory is marked as touched for the merge step.
"""
import logging
import os
from pathlib import Path

from iocost_bot.core.constants import DATABASE_DIR
from iocost_bot.core.errors import MoveError
from iocost_bot.models.change_set import StagedChangeSet
from iocost_bot.models.downloaded_result import DownloadedResult

logger = logging.getLogger(__name__)


class DirectoryOrganizer:

    def __init__(self, repo_root: Path, change_set: StagedChangeSet) -> None:
        self.repo_root = Path(repo_root)
        self.change_set = change_set

    def model_dir(self, model: str) -> Path:
        return self.repo_root / DATABASE_DIR / model

    def relative(self, path: Path) -> str:
        """Repo-relative POSIX form used for staging."""
        return path.relative_to(self.repo_root).as_posix()

    def place(self, result: DownloadedResult, model: str) -> Path:
        """
        Move result into database/<model>/.

        Returns
        -------
        Path
            Absolute destination path.

        Raises
        ------
        MoveError
            If the directory cannot be created or the rename fails.
        """
        directory = self.model_dir(model)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MoveError(f"Could not create model directory {directory}: {e}") from e

        destination = directory / result.filename
        try:
            os.replace(result.path, destination)
        except OSError as e:
            raise MoveError(f"Could not move {result.path} to {destination}: {e}") from e

        self.change_set.add_path(self.relative(destination))
        self.change_set.touch_model_dir(self.relative(directory))

        logger.info("Placed %s under %s", result.filename, self.relative(directory))
        return destination
