from pathlib import Path

import httpx
import pytest

from iocost_bot.agents.orchestrator import IngestPipeline
from iocost_bot.core.config import load_settings, parse_prefixes
from iocost_bot.core.constants import DEFAULT_ALLOWED_PREFIXES
from iocost_bot.core.errors import ConfigurationError
from iocost_bot.services.downloader import Downloader


def base_env(tmp_path, **extra):
    env = {
        "GITHUB_CONTEXT": "{}",
        "GITHUB_TOKEN": "tok",
        "IOCOST_REPO_ROOT": str(tmp_path),
    }
    env.update(extra)
    return env


def test_defaults(tmp_path):
    settings = load_settings(base_env(tmp_path))

    assert settings.repo_root == tmp_path.resolve()
    assert settings.workspace == tmp_path.resolve()
    assert settings.bench_binary == tmp_path.resolve() / "resctl-demo/target/release/resctl-bench"
    assert settings.download_dir == tmp_path.resolve()
    assert settings.allowed_prefixes == DEFAULT_ALLOWED_PREFIXES
    assert settings.remote == "origin"
    assert settings.bot_username == "x-access-token"
    assert settings.report_path is None


def test_workspace_locates_bench_binary(tmp_path):
    ws = tmp_path / "ws"
    settings = load_settings(base_env(tmp_path, GITHUB_WORKSPACE=str(ws)))
    assert settings.bench_binary == ws.resolve() / "resctl-demo/target/release/resctl-bench"


def test_explicit_bench_binary_wins(tmp_path):
    settings = load_settings(base_env(tmp_path, RESCTL_BENCH="/usr/bin/resctl-bench"))
    assert settings.bench_binary == Path("/usr/bin/resctl-bench")


@pytest.mark.parametrize("missing", ["GITHUB_CONTEXT", "GITHUB_TOKEN"])
def test_required_variables(tmp_path, missing):
    env = base_env(tmp_path)
    del env[missing]
    with pytest.raises(ConfigurationError, match=missing):
        load_settings(env)


def test_prefix_override(tmp_path):
    settings = load_settings(base_env(tmp_path, ALLOWED_URL_PREFIXES="https://a.example/, https://b.example/"))
    assert settings.allowed_prefixes == ("https://a.example/", "https://b.example/")


def test_empty_prefix_override_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(base_env(tmp_path, ALLOWED_URL_PREFIXES=" , "))


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_bad_timeout_rejected(tmp_path, value):
    with pytest.raises(ConfigurationError):
        load_settings(base_env(tmp_path, HTTP_TIMEOUT=value))


def test_bad_log_level_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(base_env(tmp_path, LOG_LEVEL="chatty"))


def test_parse_prefixes_splits_on_commas_and_whitespace():
    assert parse_prefixes("a,b\n c  d,,") == ("a", "b", "c", "d")


def test_relative_paths_resolve_against_repo_root(tmp_path, monkeypatch):
    repo = tmp_path / "repo"
    runner = tmp_path / "runner"
    repo.mkdir()
    runner.mkdir()
    monkeypatch.chdir(runner)

    settings = load_settings(base_env(
        repo,
        DOWNLOAD_DIR="dl",
        RESCTL_BENCH="bin/resctl-bench",
        LOG_DIR="logs",
        RUN_REPORT_PATH="out/report.json",
    ))

    root = repo.resolve()
    assert settings.download_dir == root / "dl"
    assert settings.bench_binary == root / "bin/resctl-bench"
    assert settings.log_dir == root / "logs"
    assert settings.report_path == root / "out/report.json"


def test_relative_download_dir_is_visible_to_bench_cwd(tmp_path, monkeypatch):
    """Downloads land where resctl-bench, running in the repo root, looks for them."""
    repo = tmp_path / "repo"
    runner = tmp_path / "runner"
    repo.mkdir()
    runner.mkdir()
    monkeypatch.chdir(runner)

    settings = load_settings(base_env(repo, DOWNLOAD_DIR="dl"))
    pipeline = IngestPipeline.from_settings(settings)
    pipeline.close()
    assert pipeline.bench.cwd == repo.resolve()

    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"result"))
    downloader = Downloader(settings.download_dir, client=httpx.Client(transport=transport))
    result = downloader.fetch("https://h.example/r")

    assert result.path.parent == repo.resolve() / "dl"
    assert (pipeline.bench.cwd / result.path).is_file()
    assert not (runner / "dl").exists()
