"""
Main entry point for command-line execution of release_git.
"""

import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger

from .cli import setup_parser
from .config import load_settings
from .exceptions import GitCommandError, GitException
from .git import ReleaseGit
from .models import OutputFormat


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Configure loguru logger."""
    # Remove the default handler
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    log_dir = log_dir or Path.home() / ".release_git" / "logs"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"File logging disabled, can not create {log_dir}: {e}")
        return

    logger.add(
        log_dir / "release_git.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="10 MB",
        retention="1 week",
    )


def print_result(result: Any, output_format: OutputFormat) -> None:
    if output_format is OutputFormat.JSON:
        print(json.dumps(result))
    elif isinstance(result, bool):
        print("true" if result else "false")
    elif isinstance(result, list):
        for line in result:
            print(line)
    else:
        print(result)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function for command-line execution.

    Parses the arguments, runs the selected operation and prints its result.

    Returns:
        int: Process exit code.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        settings = load_settings(args.config)
    except GitException as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(args.log_level or settings.log_level)
    logger.debug(f"Command-line arguments: {args}")

    git = ReleaseGit(settings=settings)
    try:
        logger.info(f"Executing command: {args.command}")
        result = args.func(git, args)
    except GitCommandError as e:
        logger.error(f"Git command error: {e}")
        print(f"Git command error: {e}", file=sys.stderr)
        return 1
    except GitException as e:
        logger.error(f"{e.error_code}: {e}")
        print(f"Git error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid argument: {e}", file=sys.stderr)
        return 2

    print_result(result, OutputFormat(args.output_format))
    if result is False:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
