"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from app_bundler import __version__
from app_bundler.cli import exit_codes
from app_bundler.cli.app import main
from app_bundler.exceptions import (
    AppConfigurationError,
    ArgumentValidationError,
    AppBundlerError,
    BuildFailedError,
    BundleFailedError,
    CodeSigningError,
    FailedToCreateConfigurationBackupError,
    FailedToDeserializeConfigurationError,
    FailedToDeserializeOldConfigurationError,
    FailedToDeserializeV2ConfigurationError,
    FailedToEvaluateExpressionsError,
    FailedToReadConfigurationFileError,
    FailedToReadContentsOfOldConfigurationFileError,
    FailedToSerializeConfigurationError,
    FailedToSerializeMigratedConfigurationError,
    FailedToWriteToConfigurationFileError,
    FailedToWriteToMigratedConfigurationFileError,
    IdentityListingError,
    InvalidPlatformError,
    MultipleAppsAndNoneSpecifiedError,
    NoSuchAppError,
    PackageConfigurationError,
    PipelineStageError,
    ToolNotFoundError,
    UnknownVariableError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ArgumentValidationError,
            InvalidPlatformError,
            AppConfigurationError,
            PackageConfigurationError,
            BuildFailedError,
            BundleFailedError,
            PipelineStageError,
            IdentityListingError,
            ToolNotFoundError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[AppBundlerError]
    ) -> None:
        assert issubclass(exc_class, AppBundlerError)

    @pytest.mark.parametrize(
        "exc_class",
        [
            NoSuchAppError,
            MultipleAppsAndNoneSpecifiedError,
            FailedToEvaluateExpressionsError,
            FailedToReadConfigurationFileError,
            FailedToDeserializeConfigurationError,
            FailedToSerializeConfigurationError,
            FailedToWriteToConfigurationFileError,
            FailedToReadContentsOfOldConfigurationFileError,
            FailedToDeserializeOldConfigurationError,
            FailedToSerializeMigratedConfigurationError,
            FailedToWriteToMigratedConfigurationFileError,
            FailedToCreateConfigurationBackupError,
            FailedToDeserializeV2ConfigurationError,
        ],
    )
    def test_configuration_errors_share_a_base(
        self, exc_class: type[AppBundlerError]
    ) -> None:
        assert issubclass(exc_class, PackageConfigurationError)

    def test_codesigning_is_a_bundle_failure(self) -> None:
        assert issubclass(CodeSigningError, BundleFailedError)

    def test_hint_is_stored(self) -> None:
        err = AppBundlerError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert AppBundlerError("boom").hint is None


class TestConfigurationErrorMessages:
    def test_no_such_app(self) -> None:
        err = NoSuchAppError("Missing")
        assert str(err) == "There is no app called 'Missing'."
        assert err.name == "Missing"

    def test_multiple_apps(self) -> None:
        assert "multiple apps" in str(MultipleAppsAndNoneSpecifiedError())
        assert "'app-name'" in str(MultipleAppsAndNoneSpecifiedError())

    def test_evaluate_expressions_names_app_and_cause(self) -> None:
        err = FailedToEvaluateExpressionsError("HelloWorld", UnknownVariableError("NOPE"))
        assert "'HelloWorld'" in str(err)
        assert "Unknown variable 'NOPE'" in str(err)

    def test_read_failure_mentions_path(self) -> None:
        err = FailedToReadConfigurationFileError(Path("Bundler.toml"), OSError("gone"))
        assert "'Bundler.toml'" in str(err)
        assert "Are you sure that it exists?" in str(err)

    def test_serialize_and_backup_messages(self) -> None:
        assert str(FailedToSerializeConfigurationError(TypeError())) == (
            "Failed to serialize configuration"
        )
        assert str(FailedToSerializeMigratedConfigurationError(TypeError())) == (
            "Failed to serialize migrated configuration"
        )
        assert str(FailedToCreateConfigurationBackupError(OSError())) == (
            "Failed to backup configuration file"
        )

    def test_migrated_write_failure_points_at_backup(self) -> None:
        err = FailedToWriteToMigratedConfigurationFileError(Path("Bundler.toml"), OSError())
        assert "Bundler.toml" in str(err)
        assert err.hint is not None and ".orig" in err.hint


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self) -> None:
        """No arguments should print help and exit 0."""
        assert main([]) == exit_codes.SUCCESS

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("app_bundler.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_returns_success(self, _mock_doc: object) -> None:
        assert main(["doctor"]) == exit_codes.SUCCESS

    def test_bundle_routes_to_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from app_bundler.cli import app as app_module

        seen: list[object] = []
        monkeypatch.setattr(
            app_module,
            "_handle_bundle",
            lambda namespace: seen.append(namespace) or exit_codes.SUCCESS,
        )
        assert main(["bundle", "--universal"]) == exit_codes.SUCCESS
        assert len(seen) == 1

    def test_unknown_platform_is_a_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["bundle", "--platform", "tvOS"])
        assert exc_info.value.code == 2

    def test_unknown_architecture_is_a_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["bundle", "--arch", "ppc"])
        assert exc_info.value.code == 2
