"""Regression tests for the optional Rich dependency.

Bootstrap commands must keep working when Rich is missing, and the
bundle flow falls back to plain stderr lines instead of a spinner.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from conftest import CURRENT_CONFIG, RecordingBuilder, RecordingBundler, write_config

from app_bundler.cli import exit_codes
from app_bundler.cli.app import main
from app_bundler.cli.console import console, strip_markup
from app_bundler.cli.progress import StageProgress
from app_bundler.core.pipeline import PipelineState
from app_bundler.exceptions import BuildFailedError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.table", None)
    monkeypatch.setitem(sys.modules, "rich.status", None)


def test_help_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_doctor_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    code = main(["doctor"])
    assert code in (exit_codes.SUCCESS, exit_codes.GENERAL_ERROR)


def test_errors_render_plainly_without_rich(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)

    console.error(BuildFailedError("swift build failed", hint="see the log above"))

    err = capsys.readouterr().err
    assert "Error: swift build failed" in err
    assert "Hint: see the log above" in err
    assert "[bold red]" not in err


def test_bundle_reports_stages_without_rich(
    package_dir: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_config(package_dir, CURRENT_CONFIG)
    monkeypatch.setattr(
        "app_bundler.infra.swiftpm_builder.SwiftPackageManagerBuilder",
        RecordingBuilder,
    )
    monkeypatch.setattr(
        "app_bundler.infra.darwin_bundler.DarwinAppBundler",
        RecordingBundler,
    )
    _hide_rich(monkeypatch)

    assert main(["bundle", "-d", str(package_dir), "--universal"]) == exit_codes.SUCCESS

    err = capsys.readouterr().err
    assert "Building 'HelloWorld'" in err
    assert "Bundling 'HelloWorld'" in err


def test_stage_progress_ignores_transitions_after_stop(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    progress = StageProgress("HelloWorld")
    with progress:
        progress(PipelineState.BUILDING, "build")
    progress(PipelineState.BUNDLING, "bundle")

    assert progress.transitions == [PipelineState.BUILDING]


def test_strip_markup() -> None:
    assert strip_markup("[bold red]Error:[/bold red] boom [1]") == "Error: boom [1]"
