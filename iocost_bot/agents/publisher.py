"""
Publisher
=========
Turns a StagedChangeSet into a commit on the bot branch and pushes it.

State machine (strictly sequential, no retries):
    STAGE  → git add -- <paths>
    COMMIT → git write-tree + git commit-tree -p HEAD (bot identity)
    BRANCH → git update-ref refs/heads/iocost-bot/<issue>  (force)
    PUSH   → git push <remote> <ref>:<ref> with basic credentials

The working tree's HEAD is never moved; the commit only exists on the bot
branch. Any rejection from the remote is fatal.

The local ref is overwritten but the push is never forced. Each run parents
its commit on HEAD, so once the bot branch exists on the remote a later run
for the same issue (say, a new comment with more results) is rejected as a
non-fast-forward and the run fails. The branch is reused by name only; a
maintainer has to delete or merge it before the issue can be imported again.
"""
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from iocost_bot.core.config import (
    DEFAULT_BOT_EMAIL,
    DEFAULT_BOT_NAME,
    DEFAULT_BOT_USERNAME,
    DEFAULT_REMOTE,
)
from iocost_bot.core.constants import BRANCH_PREFIX
from iocost_bot.core.errors import GitError
from iocost_bot.models.change_set import StagedChangeSet

logger = logging.getLogger(__name__)

_REDACTED = "***"


@dataclass
class PublishResult:
    branch: str
    commit_sha: str
    tree_sha: str
    parent_sha: str


def branch_name_for(issue_id) -> str:
    """Deterministic bot branch: every run for an issue targets the same name.

    Callers pass the issue number (the #N shown on GitHub), not the REST id.
    """
    return f"{BRANCH_PREFIX}{issue_id}"


def build_commit_message(change_set: StagedChangeSet, issue_id) -> str:
    models = ", ".join(change_set.model_dirs)
    return f"Import benchmark results for {models}\n\nSubmitted in issue #{issue_id}.\n"


class Publisher:
    """
    Commits and pushes staged results on behalf of the bot.
    """

    def __init__(
        self,
        repo_root: Path,
        token: str,
        remote: str = DEFAULT_REMOTE,
        username: str = DEFAULT_BOT_USERNAME,
        author_name: str = DEFAULT_BOT_NAME,
        author_email: str = DEFAULT_BOT_EMAIL,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.token = token
        self.remote = remote
        self.username = username
        self.author_name = author_name
        self.author_email = author_email

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _redact(self, text: str) -> str:
        if self.token:
            text = text.replace(self.token, _REDACTED)
            text = text.replace(quote(self.token, safe=""), _REDACTED)
        return text

    def _git(self, operation: str, args: List[str], env: Optional[Dict[str, str]] = None) -> str:
        """Run a git command, mapping any failure to GitError(operation)."""
        try:
            res = subprocess.run(
                ["git"] + args,
                cwd=self.repo_root,
                check=True,
                capture_output=True,
                text=True,
                env=env,
            )
        except subprocess.CalledProcessError as e:
            cause = self._redact(e.stderr or e.stdout or f"exit status {e.returncode}")
            logger.error("git %s failed: %s", operation, cause.strip())
            raise GitError(operation, cause) from None
        except OSError as e:
            raise GitError(operation, str(e)) from e
        return res.stdout.strip()

    def _identity_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update({
            "GIT_AUTHOR_NAME": self.author_name,
            "GIT_AUTHOR_EMAIL": self.author_email,
            "GIT_COMMITTER_NAME": self.author_name,
            "GIT_COMMITTER_EMAIL": self.author_email,
        })
        return env

    def authenticated_url(self, remote_url: str) -> str:
        """
        Embed username:token into an http(s) remote URL.

        Other transports (ssh, local paths) are returned unchanged and rely
        on their own authentication.
        """
        parts = urlsplit(remote_url)
        if parts.scheme not in ("http", "https") or not self.token:
            return remote_url
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        credentials = f"{quote(self.username, safe='')}:{quote(self.token, safe='')}"
        return urlunsplit((parts.scheme, f"{credentials}@{host}", parts.path, parts.query, parts.fragment))

    # -------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------
    def stage(self, change_set: StagedChangeSet) -> None:
        self._git("add", ["add", "--"] + list(change_set.paths))
        logger.info("Staged %d path(s)", len(change_set))

    def commit(self, message: str) -> PublishResult:
        tree_sha = self._git("write-tree", ["write-tree"])
        parent_sha = self._git("rev-parse", ["rev-parse", "--verify", "HEAD^{commit}"])
        commit_sha = self._git(
            "commit-tree",
            ["commit-tree", tree_sha, "-p", parent_sha, "-m", message],
            env=self._identity_env(),
        )
        logger.info("Created commit %s (tree %s, parent %s)", commit_sha[:12], tree_sha[:12], parent_sha[:12])
        return PublishResult(branch="", commit_sha=commit_sha, tree_sha=tree_sha, parent_sha=parent_sha)

    def update_branch(self, branch: str, commit_sha: str) -> None:
        self._git("branch", ["update-ref", f"refs/heads/{branch}", commit_sha])
        logger.info("Branch %s now points at %s", branch, commit_sha[:12])

    def push(self, branch: str) -> None:
        remote_url = self._git("remote", ["remote", "get-url", self.remote])
        target = self.authenticated_url(remote_url)
        ref = f"refs/heads/{branch}"
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        self._git("push", ["push", target, f"{ref}:{ref}"], env=env)
        logger.info("Pushed %s to %s", branch, self.remote)

    def publish(self, change_set: StagedChangeSet, issue_id) -> Optional[PublishResult]:
        """
        Run STAGE → COMMIT → BRANCH → PUSH.

        Returns None without touching git when the change set is empty.

        Raises
        ------
        GitError
            On the first failing step; later steps do not run.
        """
        if change_set.is_empty:
            logger.warning("Nothing staged, refusing to create an empty commit")
            return None

        branch = branch_name_for(issue_id)

        self.stage(change_set)
        result = self.commit(build_commit_message(change_set, issue_id))
        self.update_branch(branch, result.commit_sha)
        self.push(branch)

        result.branch = branch
        return result
