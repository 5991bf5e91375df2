"""Stage input/output models for app-bundler.

All models are **frozen** dataclasses — immutable value objects handed
from the bundle service to the build backend and the bundler.  They
carry zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from app_bundler.core.configuration import AppConfiguration
from app_bundler.core.pipeline import PipelineReport
from app_bundler.core.platform import BuildArchitecture, Platform
from app_bundler.core.validation import BuildConfiguration


# ---------------------------------------------------------------------------
# Build stage input
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BuildRequest:
    """Everything the build backend needs to compile one product."""

    product: str
    package_directory: Path
    configuration: BuildConfiguration
    architectures: tuple[BuildArchitecture, ...]
    platform: Platform

    @property
    def universal(self) -> bool:
        return len(self.architectures) > 1


# ---------------------------------------------------------------------------
# Bundle stage input
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BundleContext:
    """Everything the bundler needs to assemble one app bundle."""

    app_name: str
    app: AppConfiguration
    package_directory: Path
    products_directory: Path
    output_directory: Path
    platform: Platform
    is_xcode_build: bool = False
    universal: bool = False
    stand_alone: bool = False
    codesigning_identity: str | None = None
    provisioning_profile: Path | None = None

    @property
    def bundle_path(self) -> Path:
        return self.output_directory / f"{self.app_name}.app"

    @property
    def targeting_simulator(self) -> bool:
        return self.platform.is_simulator


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BundleOutcome:
    """Result of a successful ``bundle`` run."""

    bundle_path: Path
    elapsed: float
    """Wall-clock seconds spent in the pipeline."""

    report: PipelineReport
