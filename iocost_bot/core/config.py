"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    GITHUB_CONTEXT        - Serialized event payload (required)
    GITHUB_TOKEN          - Token used as the password when pushing (required)
    IOCOST_REPO_ROOT      - Checkout holding the database/ tree (default: cwd)
    GITHUB_WORKSPACE      - Root used to locate resctl-bench (default: repo root)
    RESCTL_BENCH          - Explicit path to the resctl-bench binary
    ALLOWED_URL_PREFIXES  - Comma or whitespace separated trusted URL prefixes
    DOWNLOAD_DIR          - Where downloads land before placement (default: repo root)
    GIT_REMOTE            - Remote the bot branch is pushed to (default: origin)
    BOT_USERNAME          - Basic-auth username for the push (default: x-access-token)
    BOT_NAME / BOT_EMAIL  - Commit author and committer identity
    HTTP_TIMEOUT          - Per-request download timeout in seconds (default: 60)
    LOG_LEVEL             - Logging level name (default: INFO)
    LOG_DIR               - Enables file logging into this directory
    RUN_REPORT_PATH       - Enables the JSON run report at this path

Settings are read once per run by load_settings() and passed explicitly to
every component; nothing downstream reads the environment on its own.
Relative paths in RESCTL_BENCH, DOWNLOAD_DIR, LOG_DIR and RUN_REPORT_PATH are
resolved against the repo root, so the process working directory never matters.
"""
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from iocost_bot.core.constants import BENCH_RELATIVE_PATH, DEFAULT_ALLOWED_PREFIXES
from iocost_bot.core.errors import ConfigurationError

load_dotenv()

DEFAULT_REMOTE = "origin"
DEFAULT_BOT_USERNAME = "x-access-token"
DEFAULT_BOT_NAME = "iocost-bot"
DEFAULT_BOT_EMAIL = "iocost-bot@users.noreply.github.com"

# Per-request download timeout in seconds
DEFAULT_HTTP_TIMEOUT = 60.0


@dataclass(frozen=True)
class Settings:
    payload: str
    token: str
    repo_root: Path
    workspace: Path
    bench_binary: Path
    download_dir: Path
    allowed_prefixes: Tuple[str, ...] = DEFAULT_ALLOWED_PREFIXES
    remote: str = DEFAULT_REMOTE
    bot_username: str = DEFAULT_BOT_USERNAME
    bot_name: str = DEFAULT_BOT_NAME
    bot_email: str = DEFAULT_BOT_EMAIL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    report_path: Optional[Path] = None


def parse_prefixes(raw: str) -> Tuple[str, ...]:
    """Split a comma or whitespace separated prefix list, dropping blanks."""
    return tuple(p for p in re.split(r"[\s,]+", raw) if p)


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if not value:
        raise ConfigurationError(f"Environment variable {name} is not set")
    return value


def _optional_path(environ: Mapping[str, str], name: str, base: Optional[Path] = None) -> Optional[Path]:
    """Read a path variable; relative values are taken against base, not the cwd."""
    value = environ.get(name)
    if not value:
        return None
    path = Path(value).expanduser()
    if base is not None and not path.is_absolute():
        path = base / path
    return path


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Parameters
    ----------
    environ : Mapping[str, str] | None
        Source of variables. Defaults to os.environ.

    Raises
    ------
    ConfigurationError
        If GITHUB_CONTEXT or GITHUB_TOKEN is missing, or HTTP_TIMEOUT is not a
        positive number, LOG_LEVEL is unknown, or ALLOWED_URL_PREFIXES is set but empty.
    """
    if environ is None:
        environ = os.environ

    payload = _required(environ, "GITHUB_CONTEXT")
    token = _required(environ, "GITHUB_TOKEN")

    repo_root = (_optional_path(environ, "IOCOST_REPO_ROOT") or Path.cwd()).resolve()
    workspace = (_optional_path(environ, "GITHUB_WORKSPACE") or repo_root).resolve()
    bench_binary = _optional_path(environ, "RESCTL_BENCH", repo_root) or workspace / BENCH_RELATIVE_PATH
    download_dir = _optional_path(environ, "DOWNLOAD_DIR", repo_root) or repo_root

    allowed_prefixes = DEFAULT_ALLOWED_PREFIXES
    if "ALLOWED_URL_PREFIXES" in environ:
        allowed_prefixes = parse_prefixes(environ["ALLOWED_URL_PREFIXES"])
        if not allowed_prefixes:
            raise ConfigurationError("ALLOWED_URL_PREFIXES is set but lists no prefixes")

    raw_timeout = environ.get("HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
    try:
        http_timeout = float(raw_timeout)
    except ValueError:
        raise ConfigurationError(f"HTTP_TIMEOUT must be a number, got {raw_timeout!r}")
    if http_timeout <= 0:
        raise ConfigurationError(f"HTTP_TIMEOUT must be positive, got {raw_timeout!r}")

    log_level = environ.get("LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"LOG_LEVEL {log_level!r} is not a logging level")

    return Settings(
        payload=payload,
        token=token,
        repo_root=repo_root,
        workspace=workspace,
        bench_binary=bench_binary,
        download_dir=download_dir,
        allowed_prefixes=allowed_prefixes,
        remote=environ.get("GIT_REMOTE", DEFAULT_REMOTE),
        bot_username=environ.get("BOT_USERNAME", DEFAULT_BOT_USERNAME),
        bot_name=environ.get("BOT_NAME", DEFAULT_BOT_NAME),
        bot_email=environ.get("BOT_EMAIL", DEFAULT_BOT_EMAIL),
        http_timeout=http_timeout,
        log_level=log_level,
        log_dir=_optional_path(environ, "LOG_DIR", repo_root),
        report_path=_optional_path(environ, "RUN_REPORT_PATH", repo_root),
    )
