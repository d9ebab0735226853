"""
Core git facade.

This module provides the ReleaseGit class which runs the git executable and
turns its output into the status, diff, commit and version information a
release pipeline needs.
"""

import os
import subprocess
import time
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

from .config import GitSettings
from .exceptions import (
    BranchSourceRequired,
    DetachedHeadDiffError,
    GitCloneError,
    GitCommandError,
    GitDiffError,
    GitStatusError,
    GitUpdateError,
    NoMinorVersionsMatch,
    NoPatchVersionsMatch,
    RemoteBranchesError,
    UnknownMinorVersion,
)
from .models import BranchSource, CommandOutput
from .utils import (
    branch_name_from_listing,
    build_environment,
    is_minor_version,
    is_patch_version,
    is_restorable_error,
    sort_versions_desc,
    strip_version_prefix,
)

PathLike = Union[str, Path]


class ReleaseGit:
    """
    Facade over the git command line for release tooling.

    Every operation runs git synchronously, raises a typed exception when git
    exits with a non-zero code and returns the output lines.
    """

    INCLUDE_LOCAL_BRANCHES = BranchSource.INCLUDE_LOCAL_BRANCHES
    EXCLUDE_LOCAL_BRANCHES = BranchSource.EXCLUDE_LOCAL_BRANCHES
    INCLUDE_REMOTE_BRANCHES = BranchSource.INCLUDE_REMOTE_BRANCHES
    EXCLUDE_REMOTE_BRANCHES = BranchSource.EXCLUDE_REMOTE_BRANCHES

    def __init__(
        self,
        sleep_on_lock_error: Optional[float] = None,
        settings: Optional[GitSettings] = None,
    ):
        """
        Initialize the facade.

        Args:
            sleep_on_lock_error: Seconds to wait before the first retry of an
                update failing on a ref lock. Overrides the settings value;
                0 disables sleeping.
            settings: Full settings, defaults to GitSettings().
        """
        settings = settings or GitSettings()
        self.settings = settings.merged_with(sleep_on_lock_error=sleep_on_lock_error)

        logger.debug(f"Initialized ReleaseGit with settings: {self.settings}")

    @property
    def sleep_on_lock_error(self) -> float:
        return self.settings.sleep_on_lock_error

    def _git(self, directory: Optional[PathLike], *args: str) -> List[str]:
        command = [self.settings.git_executable]
        if directory is not None:
            command.extend(["-C", os.fspath(directory)])
        command.extend(args)
        return command

    def run_command(
        self,
        command: Sequence[str],
        merge_stderr: bool = True,
        fix_missing_home: bool = True,
        cwd: Optional[PathLike] = None,
    ) -> CommandOutput:
        """
        Run a command and return its output.

        Args:
            command: The command and its arguments.
            merge_stderr: If True, stderr is folded into the returned lines.
            fix_missing_home: If True, HOME is provided to the child process
                when the current environment lacks it.
            cwd: Directory to run the command in.

        Returns:
            CommandOutput: The command, its return code and output lines.

        Raises:
            GitCommandError: If the command exits with a non-zero code or
                can not be started.
        """
        command = list(command)
        cmd_str = " ".join(command)
        logger.debug(f"Running command: {cmd_str} in {cwd or 'current directory'}")

        env = build_environment(self.settings.home_fallbacks) if fix_missing_home else None
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                cwd=cwd,
                env=env,
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.error(f"Can not start {command[0]}: {e}")
            return_code = 127 if isinstance(e, FileNotFoundError) else 126
            raise GitCommandError(
                command, return_code, [str(e)], original_error=e
            ) from e

        lines = completed.stdout.splitlines() if completed.stdout else []
        if completed.returncode != 0:
            if not merge_stderr and completed.stderr:
                lines.extend(completed.stderr.splitlines())
            logger.debug(f"Command failed with code {completed.returncode}: {cmd_str}")
            raise GitCommandError(command, completed.returncode, lines)

        logger.debug(f"Command returned {len(lines)} line(s)")
        return CommandOutput(command=command, return_code=completed.returncode, lines=lines)

    def run_lines(self, command: Sequence[str], **kwargs) -> List[str]:
        return self.run_command(command, **kwargs).lines

    def run_last_line(self, command: Sequence[str], **kwargs) -> str:
        lines = self.run_lines(command, **kwargs)
        return lines[-1] if lines else ""

    # Repository information
    def get_git_status(self, directory: PathLike) -> List[str]:
        """
        Get the human readable status of a repository.

        Any sub-directory of a working tree gives the status of the whole tree.

        Raises:
            GitStatusError: If git status fails.
        """
        try:
            return self.run_lines(self._git(directory, "status"))
        except GitCommandError as e:
            logger.error(f"Can not get git status of {directory}")
            raise GitStatusError(
                f"Can not get git status:\n{e}", original_error=e
            ) from e

    def get_diff_against_origin(self, directory: PathLike) -> List[str]:
        """
        Get the diff of the working tree against the same branch on the remote.

        Raises:
            DetachedHeadDiffError: If HEAD is detached, so there is no remote
                branch to compare with.
            GitDiffError: If the current branch or the diff can not be read.
        """
        remote = self.settings.remote
        try:
            branch = self.get_current_branch_name(directory)
        except GitCommandError as e:
            raise GitDiffError(
                f"Can not get diff of {directory}, current branch is unknown:\n{e}",
                repository_path=Path(directory),
                original_error=e,
            ) from e

        if branch == "HEAD":
            raise DetachedHeadDiffError(
                f"Can not diff {directory} against {remote}, HEAD is detached",
                repository_path=Path(directory),
            )

        try:
            return self.run_lines(self._git(directory, "diff", f"{remote}/{branch}"))
        except GitCommandError as e:
            raise GitDiffError(
                f"Can not get diff of {directory} against {remote}/{branch}:\n{e}",
                repository_path=Path(directory),
                original_error=e,
            ) from e

    def get_last_commit_hash(self, directory: PathLike) -> str:
        """Return the full hash of the last commit."""
        return self.run_last_line(
            self._git(
                directory, "log", "--max-count=1", "--format=%H", "--no-abbrev-commit"
            )
        )

    def get_current_branch_name(self, directory: PathLike) -> str:
        """Return the current branch name, ``HEAD`` when detached."""
        return self.run_last_line(
            self._git(directory, "rev-parse", "--abbrev-ref", "HEAD")
        )

    # Cloning and updating
    def clone_branch(
        self, branch: str, repository_url: str, destination_dir: PathLike
    ) -> List[str]:
        """
        Clone a single branch of a repository.

        Raises:
            GitCloneError: If the branch exists on the remote but cloning failed.
            UnknownMinorVersion: If the remote has no such branch.
        """
        logger.info(f"Cloning branch '{branch}' of {repository_url} to {destination_dir}")
        command = [
            self.settings.git_executable,
            "clone",
            "--branch",
            branch,
            repository_url,
            os.fspath(destination_dir),
        ]
        try:
            return self.run_lines(command)
        except GitCommandError as e:
            try:
                branch_exists = self.remote_has_branch(repository_url, branch)
            except RemoteBranchesError:
                branch_exists = True
            if branch_exists:
                raise GitCloneError(
                    f"Can not git clone required version '{branch}':\n{e}",
                    branch_name=branch,
                    repository_url=repository_url,
                    original_error=e,
                ) from e
            raise UnknownMinorVersion(
                f"Required minor version {branch} as a git branch does not exist:\n{e}",
                minor_version=branch,
                original_error=e,
            ) from e

    def update_branch(self, branch: str, destination_dir: PathLike) -> List[str]:
        """
        Bring a branch of an existing clone up to date, then return to the
        previously checked out branch.

        Raises:
            GitUpdateError: On the first failing step.
        """
        logger.info(f"Updating branch '{branch}' in {destination_dir}")
        steps = (
            ("checkout", branch),
            ("pull", "--ff-only"),
            ("fetch", "--tags"),
            ("checkout", "-"),
        )
        lines: List[str] = []
        for step in steps:
            try:
                lines.extend(self.run_lines(self._git(destination_dir, *step)))
            except GitCommandError as e:
                raise GitUpdateError(
                    f"Can not update branch '{branch}' in {destination_dir}:\n{e}",
                    branch_name=branch,
                    repository_path=Path(destination_dir),
                    original_error=e,
                ) from e
        return lines

    def update(self, directory: PathLike, max_attempts: Optional[int] = None) -> List[str]:
        """
        Fast-forward the current branch and fetch tags, retrying on ref locks.

        Args:
            directory: Working tree to update.
            max_attempts: Attempts before giving up, defaults to settings.

        Returns:
            List[str]: ``attempt number N`` followed by the git output.

        Raises:
            GitCommandError: On a non-restorable failure or when all attempts failed.
        """
        if max_attempts is None:
            max_attempts = self.settings.max_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        delay = self.settings.sleep_on_lock_error
        attempt = 1
        while True:
            try:
                lines = self.run_lines(self._git(directory, "pull", "--ff-only"))
                lines += self.run_lines(self._git(directory, "fetch", "--tags"))
            except GitCommandError as e:
                if attempt >= max_attempts or not is_restorable_error(e.output_text):
                    logger.error(
                        f"Update of {directory} failed on attempt {attempt}/{max_attempts}"
                    )
                    raise
                logger.warning(
                    f"Update of {directory} failed (attempt {attempt}/{max_attempts}), "
                    f"retrying in {delay:.1f}s: {e}"
                )
                if delay > 0:
                    time.sleep(delay)
                delay *= self.settings.backoff_factor
                attempt += 1
                continue

            if attempt > 1:
                logger.info(f"Updated {directory} on attempt {attempt}")
            return [f"attempt number {attempt}", *lines]

    # Branches
    def remote_branch_exists(
        self, branch_name: str, directory: Optional[PathLike] = None
    ) -> bool:
        """
        Check whether a remote-tracking branch of that name is known locally.

        Raises:
            RemoteBranchesError: If remote branches can not be listed.
        """
        try:
            rows = self.run_lines(self._git(directory, "branch", "--remotes"))
        except GitCommandError as e:
            raise RemoteBranchesError(str(e), original_error=e) from e

        return any(
            branch_name_from_listing(row, strip_remote=True) == branch_name
            for row in rows
        )

    def remote_has_branch(self, repository_url: str, branch_name: str) -> bool:
        """
        Ask a remote repository directly whether it has a branch.

        Raises:
            RemoteBranchesError: If the remote can not be queried.
        """
        command = [
            self.settings.git_executable,
            "ls-remote",
            "--heads",
            repository_url,
            branch_name,
        ]
        try:
            rows = self.run_lines(command)
        except GitCommandError as e:
            raise RemoteBranchesError(str(e), original_error=e) from e

        wanted = f"refs/heads/{branch_name}"
        return any(row.split("\t")[-1].strip() == wanted for row in rows)

    # Versions
    def get_all_patch_versions(self, directory: PathLike) -> List[str]:
        """
        List tags shaped like patch versions (``1.12.321`` or ``v1.12.321``),
        highest first.
        """
        rows = self.run_lines(self._git(directory, "tag"))
        return sort_versions_desc(
            row.strip() for row in rows if is_patch_version(row.strip())
        )

    def get_all_minor_versions(
        self,
        directory: PathLike,
        include_local_branches: bool = INCLUDE_LOCAL_BRANCHES,
        include_remote_branches: bool = INCLUDE_REMOTE_BRANCHES,
    ) -> List[str]:
        """
        List branches shaped like minor versions (``1.12`` or ``v1.12``),
        highest first.

        Raises:
            BranchSourceRequired: If both local and remote branches are excluded.
        """
        if not include_local_branches and not include_remote_branches:
            raise BranchSourceRequired(
                "Local or remote branches (or both) have to be included"
            )

        names: List[str] = []
        if include_local_branches:
            rows = self.run_lines(self._git(directory, "branch"))
            names += [branch_name_from_listing(row) for row in rows]
        if include_remote_branches:
            rows = self.run_lines(self._git(directory, "branch", "-r"))
            names += [
                branch_name_from_listing(row, strip_remote=True) for row in rows
            ]

        return sort_versions_desc(
            name for name in names if name != "HEAD" and is_minor_version(name)
        )

    def get_last_stable_minor_version(self, directory: PathLike) -> str:
        versions = self.get_all_minor_versions(directory)
        if not versions:
            raise NoMinorVersionsMatch(
                f"No branch in {directory} looks like a minor version"
            )
        return versions[0]

    def get_last_patch_version_of(self, minor_version: str, directory: PathLike) -> str:
        """
        Return the highest patch version tag belonging to a minor version.

        Raises:
            NoPatchVersionsMatch: If no tag belongs to that minor version.
        """
        prefix = strip_version_prefix(minor_version) + "."
        for version in self.get_all_patch_versions(directory):
            if strip_version_prefix(version).startswith(prefix):
                return version

        raise NoPatchVersionsMatch(
            f"No patch version of minor version '{minor_version}' found in {directory}",
            minor_version=minor_version,
        )

    def get_last_patch_version(self, directory: PathLike) -> str:
        versions = self.get_all_patch_versions(directory)
        if not versions:
            raise NoPatchVersionsMatch(
                f"No tag in {directory} looks like a patch version"
            )
        return versions[0]
