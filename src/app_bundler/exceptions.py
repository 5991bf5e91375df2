"""Custom exception hierarchy for app-bundler.

All exceptions that cross layer boundaries must inherit from
:class:`AppBundlerError`.  Raw ``OSError``, subprocess and decoder
exceptions must NEVER propagate beyond the infrastructure layer — they
are caught there and re-raised as a typed subclass defined here, with
the original chained as ``__cause__``.

Hierarchy
---------
AppBundlerError
├── ArgumentValidationError
├── InvalidPlatformError
├── UnsupportedHostArchitectureError
├── AppConfigurationError
│   ├── UnknownVariableError
│   └── VariableEvaluationError
├── PackageConfigurationError
│   ├── NoSuchAppError
│   ├── MultipleAppsAndNoneSpecifiedError
│   ├── FailedToEvaluateExpressionsError
│   ├── FailedToReadConfigurationFileError
│   ├── FailedToDeserializeConfigurationError
│   ├── FailedToSerializeConfigurationError
│   ├── FailedToWriteToConfigurationFileError
│   ├── FailedToReadContentsOfOldConfigurationFileError
│   ├── FailedToDeserializeOldConfigurationError
│   ├── FailedToSerializeMigratedConfigurationError
│   ├── FailedToWriteToMigratedConfigurationFileError
│   ├── FailedToCreateConfigurationBackupError
│   └── FailedToDeserializeV2ConfigurationError
├── BuildFailedError
├── BundleFailedError
│   └── CodeSigningError
├── PipelineStageError
├── IdentityListingError
├── ToolNotFoundError
└── MissingDependencyError
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app_bundler.core.decoding import DecodeFailure


LIST_IDENTITIES_HINT = (
    "List the available codesigning identities with:\n"
    "    app-bundler list-identities"
)


class AppBundlerError(Exception):
    """Base exception for all app-bundler errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


def display_path(path: Path | str) -> str:
    """Render *path* relative to the working directory when possible."""
    try:
        return os.path.relpath(path)
    except ValueError:
        # Different drive on Windows.
        return str(path)


# --- Argument validation ---------------------------------------------------

class ArgumentValidationError(AppBundlerError):
    """Raised when the requested flag combination is not legal."""


class InvalidPlatformError(AppBundlerError):
    """Raised when ``--platform`` names an unknown platform."""


class UnsupportedHostArchitectureError(AppBundlerError):
    """Raised when the host machine maps to no known build architecture."""


# --- App configuration expressions -----------------------------------------

class AppConfigurationError(AppBundlerError):
    """Raised when an app's configuration values cannot be evaluated."""


class UnknownVariableError(AppConfigurationError):
    """Raised when a ``$(NAME)`` expression names an unknown variable."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown variable '{name}'")
        self.name = name


class VariableEvaluationError(AppConfigurationError):
    """Raised when a known variable fails to produce a value."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Failed to evaluate variable '{name}': {reason}")
        self.name = name


# --- Package configuration -------------------------------------------------

class PackageConfigurationError(AppBundlerError):
    """Base class for failures loading, resolving or migrating configuration."""


class NoSuchAppError(PackageConfigurationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"There is no app called '{name}'.")
        self.name = name


class MultipleAppsAndNoneSpecifiedError(PackageConfigurationError):
    def __init__(self) -> None:
        super().__init__(
            "This package contains multiple apps. "
            "You must provide the 'app-name' argument",
            hint="Pass --app-name <name> to choose one of the configured apps.",
        )


class FailedToEvaluateExpressionsError(PackageConfigurationError):
    def __init__(self, app: str, cause: AppConfigurationError) -> None:
        super().__init__(
            f"Failed to evaluate the '{app}' app's configuration: {cause}",
        )
        self.app = app
        self.cause = cause


class FailedToReadConfigurationFileError(PackageConfigurationError):
    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(
            f"Failed to read the configuration file at '{display_path(path)}'. "
            "Are you sure that it exists?",
        )
        self.path = path
        self.cause = cause


class FailedToDeserializeConfigurationError(PackageConfigurationError):
    def __init__(self, failure: DecodeFailure) -> None:
        super().__init__(
            f"Failed to deserialize configuration: {failure.describe()}",
        )
        self.failure = failure


class FailedToSerializeConfigurationError(PackageConfigurationError):
    def __init__(self, cause: Exception) -> None:
        super().__init__("Failed to serialize configuration")
        self.cause = cause


class FailedToWriteToConfigurationFileError(PackageConfigurationError):
    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(
            f"Failed to write to configuration file at '{display_path(path)}'",
        )
        self.path = path
        self.cause = cause


class FailedToReadContentsOfOldConfigurationFileError(PackageConfigurationError):
    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(
            "Failed to read contents of old configuration file at "
            f"'{display_path(path)}'",
        )
        self.path = path
        self.cause = cause


class FailedToDeserializeOldConfigurationError(PackageConfigurationError):
    def __init__(self, failure: DecodeFailure) -> None:
        super().__init__(
            f"Failed to deserialize old configuration: {failure.describe()}",
        )
        self.failure = failure


class FailedToSerializeMigratedConfigurationError(PackageConfigurationError):
    def __init__(self, cause: Exception) -> None:
        super().__init__("Failed to serialize migrated configuration")
        self.cause = cause


class FailedToWriteToMigratedConfigurationFileError(PackageConfigurationError):
    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(
            "Failed to write migrated configuration to file at "
            f"'{display_path(path)}'",
            hint="A backup of the original file was kept next to it (.orig).",
        )
        self.path = path
        self.cause = cause


class FailedToCreateConfigurationBackupError(PackageConfigurationError):
    def __init__(self, cause: Exception) -> None:
        super().__init__("Failed to backup configuration file")
        self.cause = cause


class FailedToDeserializeV2ConfigurationError(PackageConfigurationError):
    def __init__(self, failure: DecodeFailure) -> None:
        super().__init__(
            "Failed to deserialize configuration for migration: "
            f"{failure.describe()}",
        )
        self.failure = failure


# --- Pipeline stages -------------------------------------------------------

class BuildFailedError(AppBundlerError):
    """Raised when the build backend fails to produce the product."""


class BundleFailedError(AppBundlerError):
    """Raised when assembling the app bundle fails."""


class CodeSigningError(BundleFailedError):
    """Raised when signing the assembled bundle fails."""


class PipelineStageError(AppBundlerError):
    """Raised when a stage fails with an exception that is not ours.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"The {stage} stage failed unexpectedly: {cause}")
        self.stage = stage


# --- Environment / tooling -------------------------------------------------

class IdentityListingError(AppBundlerError):
    """Raised when codesigning identities cannot be enumerated."""


class ToolNotFoundError(AppBundlerError):
    """Raised when a required command-line tool is not on PATH."""


class MissingDependencyError(AppBundlerError):
    """Raised when an optional Python dependency is not installed."""
