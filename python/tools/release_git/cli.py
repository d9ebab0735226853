"""
Command-line interface for release_git.

Each sub-command maps onto one ReleaseGit operation and returns a value the
entry point prints.
"""

import argparse
from typing import Any

from .config import LOG_LEVELS
from .git import ReleaseGit
from .models import OutputFormat


def cli_status(git: ReleaseGit, args) -> Any:
    """Show git status from the command line."""
    return git.get_git_status(args.repo_dir)


def cli_diff(git: ReleaseGit, args) -> Any:
    """Show the diff against the remote branch from the command line."""
    return git.get_diff_against_origin(args.repo_dir)


def cli_last_commit(git: ReleaseGit, args) -> Any:
    return git.get_last_commit_hash(args.repo_dir)


def cli_current_branch(git: ReleaseGit, args) -> Any:
    return git.get_current_branch_name(args.repo_dir)


def cli_clone_branch(git: ReleaseGit, args) -> Any:
    """Clone a branch from the command line."""
    return git.clone_branch(args.branch, args.repository_url, args.destination_dir)


def cli_update_branch(git: ReleaseGit, args) -> Any:
    """Update a branch of a clone from the command line."""
    return git.update_branch(args.branch, args.repo_dir)


def cli_update(git: ReleaseGit, args) -> Any:
    """Pull and fetch tags from the command line."""
    return git.update(args.repo_dir, args.max_attempts)


def cli_remote_branch_exists(git: ReleaseGit, args) -> Any:
    return git.remote_branch_exists(args.branch, args.repo_dir)


def cli_patch_versions(git: ReleaseGit, args) -> Any:
    return git.get_all_patch_versions(args.repo_dir)


def cli_minor_versions(git: ReleaseGit, args) -> Any:
    return git.get_all_minor_versions(
        args.repo_dir,
        include_local_branches=not args.no_local,
        include_remote_branches=not args.no_remote,
    )


def cli_last_minor(git: ReleaseGit, args) -> Any:
    return git.get_last_stable_minor_version(args.repo_dir)


def cli_last_patch_of(git: ReleaseGit, args) -> Any:
    return git.get_last_patch_version_of(args.minor_version, args.repo_dir)


def cli_last_patch(git: ReleaseGit, args) -> Any:
    return git.get_last_patch_version(args.repo_dir)


def setup_parser() -> argparse.ArgumentParser:
    """
    Set up the argument parser for the command line interface.

    Returns:
        argparse.ArgumentParser: Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="release_git",
        description="Git status, diffs and version detection for release pipelines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Highest minor version branch:
  release_git last-minor --repo-dir ./my_repo

  # Highest patch tag of the 1.2 line:
  release_git last-patch-of --repo-dir ./my_repo 1.2

  # Pull with retries on ref locks:
  release_git update --repo-dir ./my_repo --max-attempts 5
        """,
    )
    parser.add_argument("--config", "-c", help="Settings file (JSON, YAML or TOML)")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Log level (default: from settings)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=[output_format.value for output_format in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format (default: text)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Operation to run")

    def add_repo_dir(subparser):
        subparser.add_argument(
            "--repo-dir", "-d", default=".", help="Directory of the repository"
        )

    parser_status = subparsers.add_parser("status", help="Show git status")
    add_repo_dir(parser_status)
    parser_status.set_defaults(func=cli_status)

    parser_diff = subparsers.add_parser(
        "diff", help="Diff against the same branch on the remote"
    )
    add_repo_dir(parser_diff)
    parser_diff.set_defaults(func=cli_diff)

    parser_last_commit = subparsers.add_parser(
        "last-commit", help="Full hash of the last commit"
    )
    add_repo_dir(parser_last_commit)
    parser_last_commit.set_defaults(func=cli_last_commit)

    parser_current_branch = subparsers.add_parser(
        "current-branch", help="Name of the current branch"
    )
    add_repo_dir(parser_current_branch)
    parser_current_branch.set_defaults(func=cli_current_branch)

    parser_clone = subparsers.add_parser("clone-branch", help="Clone a single branch")
    parser_clone.add_argument("branch", help="Branch to clone")
    parser_clone.add_argument("repository_url", help="URL of the repository")
    parser_clone.add_argument("destination_dir", help="Directory to clone into")
    parser_clone.set_defaults(func=cli_clone_branch)

    parser_update_branch = subparsers.add_parser(
        "update-branch", help="Update a branch of an existing clone"
    )
    add_repo_dir(parser_update_branch)
    parser_update_branch.add_argument("branch", help="Branch to update")
    parser_update_branch.set_defaults(func=cli_update_branch)

    parser_update = subparsers.add_parser(
        "update", help="Pull and fetch tags, retrying on ref locks"
    )
    add_repo_dir(parser_update)
    parser_update.add_argument(
        "--max-attempts", type=int, help="Attempts before giving up (default: settings)"
    )
    parser_update.set_defaults(func=cli_update)

    parser_remote_branch = subparsers.add_parser(
        "remote-branch-exists", help="Check for a remote-tracking branch"
    )
    add_repo_dir(parser_remote_branch)
    parser_remote_branch.add_argument("branch", help="Branch name without remote")
    parser_remote_branch.set_defaults(func=cli_remote_branch_exists)

    parser_patch_versions = subparsers.add_parser(
        "patch-versions", help="Tags shaped like patch versions, highest first"
    )
    add_repo_dir(parser_patch_versions)
    parser_patch_versions.set_defaults(func=cli_patch_versions)

    parser_minor_versions = subparsers.add_parser(
        "minor-versions", help="Branches shaped like minor versions, highest first"
    )
    add_repo_dir(parser_minor_versions)
    parser_minor_versions.add_argument(
        "--no-local", action="store_true", help="Skip local branches"
    )
    parser_minor_versions.add_argument(
        "--no-remote", action="store_true", help="Skip remote branches"
    )
    parser_minor_versions.set_defaults(func=cli_minor_versions)

    parser_last_minor = subparsers.add_parser(
        "last-minor", help="Highest minor version branch"
    )
    add_repo_dir(parser_last_minor)
    parser_last_minor.set_defaults(func=cli_last_minor)

    parser_last_patch_of = subparsers.add_parser(
        "last-patch-of", help="Highest patch version of a minor version"
    )
    add_repo_dir(parser_last_patch_of)
    parser_last_patch_of.add_argument("minor_version", help="Minor version, e.g. 1.2")
    parser_last_patch_of.set_defaults(func=cli_last_patch_of)

    parser_last_patch = subparsers.add_parser(
        "last-patch", help="Highest patch version tag"
    )
    add_repo_dir(parser_last_patch)
    parser_last_patch.set_defaults(func=cli_last_patch)

    return parser
