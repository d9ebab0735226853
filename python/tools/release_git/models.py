"""Data models for release_git."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


@dataclass
class CommandOutput:
    """Result of a single command run."""

    command: List[str]
    return_code: int = 0
    lines: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.return_code == 0

    @property
    def last_line(self) -> str:
        return self.lines[-1] if self.lines else ""

    def __bool__(self) -> bool:
        """Return whether the command succeeded."""
        return self.success


class BranchSource:
    """Flags selecting where versioned branches are looked up."""

    INCLUDE_LOCAL_BRANCHES = True
    EXCLUDE_LOCAL_BRANCHES = False
    INCLUDE_REMOTE_BRANCHES = True
    EXCLUDE_REMOTE_BRANCHES = False


class OutputFormat(Enum):
    """Output format options for the command line."""

    TEXT = "text"
    JSON = "json"
