"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from app_bundler.core.configuration import PackageConfiguration
from app_bundler.core.models import BuildRequest, BundleContext


class ConfigurationLoader(Protocol):
    """Contract for reading a package's configuration file."""

    def load(
        self,
        directory: Path,
        custom_file: Path | None = None,
    ) -> PackageConfiguration:
        """Load (migrating first if needed) the package configuration.

        Raises
        ------
        PackageConfigurationError
            Any subclass, depending on which step failed.
        """
        ...  # pragma: no cover


class ProductBuilder(Protocol):
    """Contract for build backends that compile the package's products."""

    def products_directory(self, request: BuildRequest) -> Path:
        """Return the directory the backend writes built products to."""
        ...  # pragma: no cover

    async def build(self, request: BuildRequest) -> None:
        """Compile ``request.product``.

        Raises
        ------
        BuildFailedError
            When the backend exits unsuccessfully.
        """
        ...  # pragma: no cover


class AppBundler(Protocol):
    """Contract for platform-specific bundle assemblers."""

    async def bundle(self, context: BundleContext) -> None:
        """Assemble (and optionally sign) ``context.bundle_path``.

        Raises
        ------
        BundleFailedError
            When any assembly or signing step fails.
        """
        ...  # pragma: no cover
