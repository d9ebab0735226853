"""Shared fixtures for release_git tests: throwaway git repositories."""

import shutil
import subprocess
from pathlib import Path

import pytest


requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable is not available"
)


def run_git(directory: Path, *args: str) -> str:
    """Run git in ``directory`` and fail the test when it fails."""
    result = subprocess.run(
        ["git", "-C", str(directory), *args],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, (
        f"Failed to run git {' '.join(args)} with result:\n{result.stdout}{result.stderr}"
    )
    return result.stdout


def init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", "--quiet")
    run_git(path, "symbolic-ref", "HEAD", "refs/heads/master")
    return path


def commit_file(repo: Path, name: str, content: str = "content\n", message: str = None) -> str:
    """Write, stage and commit a file, returning the new commit hash."""
    (repo / name).write_text(content)
    run_git(repo, "add", name)
    run_git(repo, "commit", "--quiet", "-m", message or f"Add {name}")
    return run_git(repo, "rev-parse", "HEAD").strip()


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path_factory, monkeypatch):
    """Keep user and system git configuration out of the tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Release Tester")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "release@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Release Tester")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "release@example.com")
    for name in ("RELEASE_GIT_REMOTE", "RELEASE_GIT_MAX_ATTEMPTS", "RELEASE_GIT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository with a single commit on master."""
    path = init_repo(tmp_path / "repo")
    commit_file(path, "first-file")
    return path


@pytest.fixture
def origin(tmp_path: Path) -> Path:
    """An upstream repository with one commit on master."""
    path = init_repo(tmp_path / "origin")
    commit_file(path, "foo", message="bar")
    return path


@pytest.fixture
def clone(tmp_path: Path, origin: Path) -> Path:
    """A clone of ``origin`` tracking origin/master."""
    path = tmp_path / "clone"
    run_git(tmp_path, "clone", "--quiet", str(origin), str(path))
    return path
