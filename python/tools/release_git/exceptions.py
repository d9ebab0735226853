#!/usr/bin/env python3
"""
Exception types for release_git.
Every failure carries structured context so a release pipeline can log it.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional, List, Dict
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class GitErrorContext:
    """Context information for debugging Git errors."""

    timestamp: float = field(default_factory=time.time)
    working_directory: Optional[Path] = None
    repository_path: Optional[Path] = None
    command: List[str] = field(default_factory=list)
    additional_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp,
            "working_directory": (
                str(self.working_directory) if self.working_directory else None
            ),
            "repository_path": (
                str(self.repository_path) if self.repository_path else None
            ),
            "command": self.command,
            "additional_data": self.additional_data,
        }


class GitException(Exception):
    """
    Base exception for all release_git errors.

    Carries an error code, a GitErrorContext and the error that caused it, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        context: Optional[GitErrorContext] = None,
        original_error: Optional[Exception] = None,
        **extra_context: Any,
    ):
        super().__init__(message)
        self.error_code = error_code or self.__class__.__name__.upper()
        self.context = context or GitErrorContext()
        self.original_error = original_error
        self.extra_context = extra_context

        if extra_context:
            self.context.additional_data.update(extra_context)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to structured dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "error_code": self.error_code,
            "context": self.context.to_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
            "extra_context": self.extra_context,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={str(self)!r}, error_code={self.error_code!r})"


class GitCommandError(GitException):
    """Raised when a command exits with a non-zero return code."""

    def __init__(
        self,
        command: List[str],
        return_code: int,
        output: Optional[List[str]] = None,
        **kwargs: Any,
    ):
        self.command = list(command)
        self.return_code = return_code
        self.output = list(output) if output is not None else []

        command_str = " ".join(command)
        message = (
            f"Error while executing '{command_str}', "
            f"expected return '0', got '{return_code}'"
        )
        if output is not None:
            message += " with output: '" + "\n".join(self.output) + "'"

        super().__init__(
            message,
            error_code="GIT_COMMAND_FAILED",
            context=GitErrorContext(working_directory=Path.cwd(), command=self.command),
            return_code=return_code,
            **kwargs,
        )

    @property
    def output_text(self) -> str:
        return "\n".join(self.output)


class GitStatusError(GitException):
    """Raised when git status can not be read."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code="GIT_STATUS_ERROR", **kwargs)


class GitDiffError(GitException):
    """Raised when a diff against the remote can not be produced."""

    def __init__(
        self, message: str, repository_path: Optional[Path] = None, **kwargs: Any
    ):
        self.repository_path = repository_path
        kwargs.setdefault("error_code", "GIT_DIFF_ERROR")
        super().__init__(
            message,
            repository_path=str(repository_path) if repository_path else None,
            **kwargs,
        )


class DetachedHeadDiffError(GitDiffError):
    """Raised when a diff is requested for a detached HEAD."""

    def __init__(
        self, message: str, repository_path: Optional[Path] = None, **kwargs: Any
    ):
        super().__init__(
            message,
            repository_path=repository_path,
            error_code="GIT_DETACHED_HEAD",
            **kwargs,
        )


class GitCloneError(GitException):
    """Raised when an existing branch can not be cloned."""

    def __init__(
        self,
        message: str,
        branch_name: Optional[str] = None,
        repository_url: Optional[str] = None,
        **kwargs: Any,
    ):
        self.branch_name = branch_name
        self.repository_url = repository_url

        super().__init__(
            message,
            error_code="GIT_CLONE_ERROR",
            branch_name=branch_name,
            repository_url=repository_url,
            **kwargs,
        )


class UnknownMinorVersion(GitException):
    """Raised when a requested minor version has no branch on the remote."""

    def __init__(self, message: str, minor_version: Optional[str] = None, **kwargs: Any):
        self.minor_version = minor_version

        super().__init__(
            message,
            error_code="GIT_UNKNOWN_MINOR_VERSION",
            minor_version=minor_version,
            **kwargs,
        )


class GitUpdateError(GitException):
    """Raised when a local branch can not be brought up to date."""

    def __init__(
        self,
        message: str,
        branch_name: Optional[str] = None,
        repository_path: Optional[Path] = None,
        **kwargs: Any,
    ):
        self.branch_name = branch_name
        self.repository_path = repository_path

        super().__init__(
            message,
            error_code="GIT_UPDATE_ERROR",
            branch_name=branch_name,
            repository_path=str(repository_path) if repository_path else None,
            **kwargs,
        )


class RemoteBranchesError(GitException):
    """Raised when remote branches can not be listed."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code="GIT_REMOTE_BRANCHES_ERROR", **kwargs)


class BranchSourceRequired(GitException, ValueError):
    """Raised when both local and remote branches are excluded from a lookup."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code="GIT_BRANCH_SOURCE_REQUIRED", **kwargs)


class NoPatchVersionsMatch(GitException):
    """Raised when no tag looks like a patch version."""

    def __init__(self, message: str, minor_version: Optional[str] = None, **kwargs: Any):
        self.minor_version = minor_version

        super().__init__(
            message,
            error_code="GIT_NO_PATCH_VERSIONS",
            minor_version=minor_version,
            **kwargs,
        )


class NoMinorVersionsMatch(GitException):
    """Raised when no branch looks like a minor version."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code="GIT_NO_MINOR_VERSIONS", **kwargs)


class ConfigurationError(GitException):
    """Raised when settings can not be loaded or are invalid."""

    def __init__(
        self, message: str, config_file: Optional[Path] = None, **kwargs: Any
    ):
        self.config_file = config_file

        super().__init__(
            message,
            error_code="GIT_CONFIGURATION_ERROR",
            config_file=str(config_file) if config_file else None,
            **kwargs,
        )


__all__ = [
    "GitErrorContext",
    "GitException",
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
