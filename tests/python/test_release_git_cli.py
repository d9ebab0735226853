#!/usr/bin/env python3
"""
Tests for the release_git command line.
"""

import json

import pytest

from release_git import GitCommandError, NoMinorVersionsMatch, ReleaseGit
from release_git.__main__ import main
from release_git.cli import setup_parser


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    return mocker.patch("release_git.__main__.configure_logging")


class TestParser:
    def test_defaults(self):
        args = setup_parser().parse_args(["last-minor"])
        assert args.repo_dir == "."
        assert args.output_format == "text"
        assert args.config is None

    def test_minor_versions_flags(self):
        args = setup_parser().parse_args(["minor-versions", "-d", "/srv/web", "--no-remote"])
        assert args.repo_dir == "/srv/web"
        assert args.no_remote
        assert not args.no_local

    def test_unknown_format_is_rejected(self):
        with pytest.raises(SystemExit):
            setup_parser().parse_args(["--format", "xml", "status"])


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_list_result_as_text(self, mocker, capsys):
        mocker.patch.object(
            ReleaseGit, "get_all_patch_versions", return_value=["1.0.2", "1.0.1"]
        )

        assert main(["patch-versions", "-d", "/srv/web"]) == 0

        assert capsys.readouterr().out == "1.0.2\n1.0.1\n"
        ReleaseGit.get_all_patch_versions.assert_called_once_with("/srv/web")

    def test_list_result_as_json(self, mocker, capsys):
        mocker.patch.object(ReleaseGit, "get_all_minor_versions", return_value=["1.1", "1.0"])

        assert main(["--format", "json", "minor-versions", "--no-local"]) == 0

        assert json.loads(capsys.readouterr().out) == ["1.1", "1.0"]
        ReleaseGit.get_all_minor_versions.assert_called_once_with(
            ".", include_local_branches=False, include_remote_branches=True
        )

    def test_string_result(self, mocker, capsys):
        mocker.patch.object(ReleaseGit, "get_last_patch_version_of", return_value="1.2.7")

        assert main(["last-patch-of", "1.2"]) == 0

        assert capsys.readouterr().out == "1.2.7\n"

    def test_false_result_exits_with_failure(self, mocker, capsys):
        mocker.patch.object(ReleaseGit, "remote_branch_exists", return_value=False)

        assert main(["remote-branch-exists", "1.9"]) == 1
        assert capsys.readouterr().out == "false\n"

    def test_git_errors_exit_with_failure(self, mocker, capsys):
        mocker.patch.object(
            ReleaseGit,
            "get_last_stable_minor_version",
            side_effect=NoMinorVersionsMatch("No minor versions found"),
        )

        assert main(["last-minor"]) == 1
        assert "Git error" in capsys.readouterr().err

    def test_command_errors_exit_with_failure(self, mocker, capsys):
        mocker.patch.object(
            ReleaseGit,
            "get_git_status",
            side_effect=GitCommandError(["git", "status"], 128, ["fatal: not a git repository"]),
        )

        assert main(["status"]) == 1
        assert "not a git repository" in capsys.readouterr().err

    def test_invalid_max_attempts(self, mocker, capsys):
        mocker.patch.object(ReleaseGit, "run_lines")

        assert main(["update", "--max-attempts", "0"]) == 2
        assert "Invalid argument" in capsys.readouterr().err
        ReleaseGit.run_lines.assert_not_called()

    def test_settings_from_config_file(self, mocker, tmp_path, quiet_logging):
        config = tmp_path / "release_git.toml"
        config.write_text('[release_git]\nremote = "upstream"\nlog_level = "DEBUG"\n')
        status = mocker.patch.object(ReleaseGit, "get_git_status", return_value=[])

        assert main(["--config", str(config), "status"]) == 0

        quiet_logging.assert_called_once_with("DEBUG")
        assert status.call_count == 1

    def test_unknown_log_level_in_config_file(self, tmp_path, capsys, quiet_logging):
        config = tmp_path / "release_git.toml"
        config.write_text('[release_git]\nlog_level = "verbose"\n')

        assert main(["--config", str(config), "last-minor"]) == 1

        assert "Configuration error" in capsys.readouterr().err
        quiet_logging.assert_not_called()

    def test_broken_config_file(self, tmp_path, capsys):
        config = tmp_path / "release_git.json"
        config.write_text("{")

        assert main(["--config", str(config), "status"]) == 1
        assert "Configuration error" in capsys.readouterr().err
