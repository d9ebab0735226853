#!/usr/bin/env python3
"""
Helper functions shared by the release_git facade and its command line.
Covers version matching and ordering, the child process environment and
recognition of transient git failures.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from loguru import logger


PATCH_VERSION_RE = re.compile(r"^v?\d+\.\d+\.\d+$")
MINOR_VERSION_RE = re.compile(r"^v?\d+\.\d+$")

# Output fragments of failures that go away when the command is repeated,
# typically a concurrent fetch holding a ref lock.
RESTORABLE_ERROR_PATTERNS = (
    re.compile(r"unable to update local ref"),
    re.compile(r"Ref \S+ is at \S+ but expected \S+"),
    re.compile(r"cannot lock ref"),
    re.compile(r"Unable to create '[^']+\.lock'"),
    re.compile(r"It doesn't make sense to pull all tags"),
)

_DIGITS_RE = re.compile(r"(\d+)")


def _char_weight(char: str) -> int:
    # "~" sorts before the end of a run, letters before any other character
    if char == "~":
        return -1
    if char.isalpha():
        return ord(char)
    return ord(char) + 256


def version_sort_key(version: str) -> Tuple:
    """
    Build a sort key ordering strings like ``sort --version-sort``.

    The string is split into alternating non-digit and digit runs. Digit runs
    compare as numbers, non-digit runs character by character.

    Example:
        >>> sorted(["1.10", "v1.2", "1.9"], key=version_sort_key)
        ['1.9', '1.10', 'v1.2']
    """
    key = []
    for index, part in enumerate(_DIGITS_RE.split(version)):
        if index % 2:
            key.append(int(part))
        else:
            key.append(tuple(_char_weight(char) for char in part) + (0,))
    return tuple(key)


def sort_versions_desc(versions: Iterable[str]) -> List[str]:
    """Return unique versions, highest first."""
    # equal keys ("1.0.01", "1.0.1") fall back to plain string order
    return sorted(
        set(versions),
        key=lambda version: (version_sort_key(version), version),
        reverse=True,
    )


def is_patch_version(name: str) -> bool:
    return PATCH_VERSION_RE.match(name) is not None


def is_minor_version(name: str) -> bool:
    return MINOR_VERSION_RE.match(name) is not None


def strip_version_prefix(version: str) -> str:
    return version[1:] if version.startswith("v") else version


def branch_name_from_listing(line: str, strip_remote: bool = False) -> str:
    """
    Extract a bare branch name from a ``git branch`` listing line.

    Drops the current-branch (``*``) or other-worktree (``+``) marker. With
    ``strip_remote``, for ``git branch --remotes`` output, everything up to
    the first slash goes too (``  origin/1.0`` gives ``1.0``). Local names
    such as ``hotfix/1.0`` are kept whole otherwise.
    """
    name = line.strip()
    if name[:2] in ("* ", "+ "):
        name = name[2:]
    if strip_remote and "/" in name:
        name = name.split("/", 1)[1]
    return name.strip()


def is_restorable_error(output: str) -> bool:
    """Check whether failed command output describes a transient ref/lock problem."""
    return any(pattern.search(output) for pattern in RESTORABLE_ERROR_PATTERNS)


def build_environment(
    home_fallbacks: Sequence[str],
    environ: Optional[Mapping[str, str]] = None,
) -> dict:
    """
    Copy the environment for a child process, making sure HOME is set.

    git fails to expand ``~/.gitconfig`` without HOME, which happens under
    some web server users. The first existing fallback directory is used.
    """
    env = dict(os.environ if environ is None else environ)
    if env.get("HOME"):
        return env

    for candidate in home_fallbacks:
        if Path(candidate).exists():
            logger.debug(f"HOME is not set, using {candidate}")
            env["HOME"] = candidate
            return env

    logger.warning("HOME is not set and no fallback home directory exists")
    return env


__all__ = [
    "PATCH_VERSION_RE",
    "MINOR_VERSION_RE",
    "RESTORABLE_ERROR_PATTERNS",
    "version_sort_key",
    "sort_versions_desc",
    "is_patch_version",
    "is_minor_version",
    "strip_version_prefix",
    "branch_name_from_listing",
    "is_restorable_error",
    "build_environment",
]
