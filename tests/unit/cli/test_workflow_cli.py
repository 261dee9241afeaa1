"""Tests for the workflow-engine CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from unittest.mock import patch

import pytest

import workflow_engine.cli as cli
from workflow_engine.cli.arguments import cli_args_to_config_overrides
from workflow_engine.cli.commands import DebugCommand
from workflow_engine.cli.exit_codes import (
    EXIT_ENVIRONMENT_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_PIPELINE_FAILURE,
    EXIT_SUCCESS,
)
from workflow_engine.config.models import WorkflowEngineConfig
from workflow_engine.pipeline.errors import PipelineError


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


class TestBuildParser:
    """Tests for the CLI argument parser."""

    def test_includes_global_flags(self) -> None:
        parser = cli.build_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        for flag in ["--version", "--debug", "--verbose", "--quiet", "--config",
                     "--dry-run", "--timeout", "--max-workers"]:
            assert any(a.option_strings and flag in a.option_strings for a in parser._actions)

    @pytest.mark.parametrize("command", ["debug", "image-scan", "smoke-test"])
    def test_subcommands(self, command: str) -> None:
        args = cli.build_parser().parse_args([command])
        assert args.command == command

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_rejects_invalid_timeout(self, value: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["--timeout", value, "debug"])
        assert exc_info.value.code == 2

    def test_rejects_unknown_engine(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["smoke-test", "--engine", "lxc"])


class TestConfigOverrides:
    """Tests for cli_args_to_config_overrides."""

    def test_no_flags_no_overrides(self) -> None:
        args = cli.build_parser().parse_args(["debug"])
        assert cli_args_to_config_overrides(args) == {}

    def test_pipeline_flags(self) -> None:
        args = cli.build_parser().parse_args(
            [
                "--dry-run", "--timeout", "5", "--max-workers", "2",
                "image-scan", "--artifact-dir", "out", "--sbom-filename", "s.json",
            ]
        )
        assert cli_args_to_config_overrides(args) == {
            "dry_run": True,
            "timeout": 5.0,
            "pipeline": {"max_workers": 2},
            "artifacts": {"directory": "out", "sbom_filename": "s.json"},
        }

    def test_smoke_flags(self) -> None:
        args = cli.build_parser().parse_args(
            ["smoke-test", "--engine", "podman", "--image", "we:dev"]
        )
        assert cli_args_to_config_overrides(args) == {
            "smoke": {"engine": "podman", "image": "we:dev"}
        }


class TestMain:
    """Tests for the main entry point."""

    def test_help_exits_successfully(self, capsys) -> None:
        assert cli.main(["--help"]) == EXIT_SUCCESS
        assert "usage:" in capsys.readouterr().out.lower()

    def test_version(self, capsys) -> None:
        assert cli.main(["--version"]) == EXIT_SUCCESS
        assert capsys.readouterr().out.strip()

    def test_no_command_prints_help(self, capsys) -> None:
        assert cli.main([]) == EXIT_SUCCESS
        assert "debug" in capsys.readouterr().out

    def test_dry_run_debug_succeeds_without_tools(self, workdir: Path) -> None:
        exit_code = cli.main(["--dry-run", "debug", "--artifact-dir", "artifacts"])
        assert exit_code == EXIT_SUCCESS
        assert (workdir / "artifacts").is_dir()

    def test_dry_run_from_config_file(self, workdir: Path) -> None:
        (workdir / ".workflow-engine.yml").write_text(
            "dry_run: true\nartifacts:\n  directory: from-config\n"
        )
        assert cli.main(["image-scan"]) == EXIT_SUCCESS
        assert (workdir / "from-config").is_dir()

    def test_dry_run_smoke_test_prints_report(self, workdir: Path, capsys) -> None:
        assert cli.main(["--dry-run", "smoke-test"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "debug output:\n\nsystem information:\n\n"

    def test_missing_config_file(self, workdir: Path) -> None:
        exit_code = cli.main(["--config", str(workdir / "missing.yml"), "debug"])
        assert exit_code == EXIT_INVALID_USAGE

    def test_invalid_engine_in_config(self, workdir: Path) -> None:
        (workdir / ".workflow-engine.yml").write_text("smoke:\n  engine: lxc\n")
        assert cli.main(["--dry-run", "smoke-test"]) == EXIT_INVALID_USAGE

    def test_pipeline_failure(self, workdir: Path) -> None:
        with patch("workflow_engine.cli.commands.debug.DebugPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.side_effect = PipelineError(
                [RuntimeError("grype version: exit code 1")]
            )
            assert cli.main(["debug"]) == EXIT_PIPELINE_FAILURE

    def test_local_fault(self, workdir: Path) -> None:
        with patch("workflow_engine.cli.commands.debug.DebugPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.side_effect = PermissionError("read-only")
            assert cli.main(["debug"]) == EXIT_ENVIRONMENT_ERROR

    def test_timeout_fires_shared_token(self, workdir: Path) -> None:
        with patch("workflow_engine.cli.commands.debug.DebugPipeline") as mock_pipeline:

            def wait_for_deadline() -> None:
                token = mock_pipeline.call_args.kwargs["cancel_token"]
                assert token.wait(5)

            mock_pipeline.return_value.run.side_effect = wait_for_deadline
            assert cli.main(["--timeout", "0.1", "debug"]) == EXIT_SUCCESS

        token = mock_pipeline.call_args.kwargs["cancel_token"]
        assert token.cancelled

    def test_config_reaches_pipeline(self, workdir: Path) -> None:
        with patch("workflow_engine.cli.commands.debug.DebugPipeline") as mock_pipeline:
            cli.main(["--dry-run", "--max-workers", "3", "debug", "--artifact-dir", "x"])

        kwargs = mock_pipeline.call_args.kwargs
        assert kwargs["dry_run"] is True
        assert kwargs["max_workers"] == 3
        assert kwargs["artifacts"].directory == "x"


class TestDebugCommand:
    """Tests for running a command without the runner."""

    def test_default_config(self, workdir: Path) -> None:
        with patch("workflow_engine.cli.commands.debug.DebugPipeline") as mock_pipeline:
            exit_code = DebugCommand().execute(argparse.Namespace(), None)

        assert exit_code == EXIT_SUCCESS
        assert mock_pipeline.call_args.kwargs["artifacts"] == WorkflowEngineConfig().artifacts
