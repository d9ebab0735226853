"""
Git helpers for release pipelines.

Runs the git command line to read repository status, diffs and commit
hashes, and to detect versions encoded in git refs:

- minor versions as branches: ``1.12`` or ``v1.12``
- patch versions as tags: ``1.12.3`` or ``v1.12.3``

Usage as module:
    from release_git import ReleaseGit
    git = ReleaseGit()
    git.get_last_patch_version_of("1.12", "/path/to/repo")

Usage as command:
    python -m release_git last-patch-of --repo-dir /path/to/repo 1.12
"""

from .exceptions import (
    GitException,
    GitErrorContext,
    GitCommandError,
    GitStatusError,
    GitDiffError,
    DetachedHeadDiffError,
    GitCloneError,
    UnknownMinorVersion,
    GitUpdateError,
    RemoteBranchesError,
    BranchSourceRequired,
    NoPatchVersionsMatch,
    NoMinorVersionsMatch,
    ConfigurationError,
)
from .models import BranchSource, CommandOutput, OutputFormat
from .config import GitSettings, load_settings
from .utils import sort_versions_desc, version_sort_key
from .git import ReleaseGit

__version__ = "1.0.0"

__all__ = [
    "ReleaseGit",
    "GitSettings",
    "load_settings",
    "BranchSource",
    "CommandOutput",
    "OutputFormat",
    "sort_versions_desc",
    "version_sort_key",
    "GitException",
    "GitErrorContext",
    "GitCommandError",
    "GitStatusError",
    "GitDiffError",
    "DetachedHeadDiffError",
    "GitCloneError",
    "UnknownMinorVersion",
    "GitUpdateError",
    "RemoteBranchesError",
    "BranchSourceRequired",
    "NoPatchVersionsMatch",
    "NoMinorVersionsMatch",
    "ConfigurationError",
]
