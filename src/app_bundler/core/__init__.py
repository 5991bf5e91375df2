"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or process I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from app_bundler.core.bundle_service import BundleService
from app_bundler.core.configuration import (
    AppConfiguration,
    PackageConfiguration,
    ResolvedApp,
    resolve_app,
)
from app_bundler.core.models import BuildRequest, BundleContext, BundleOutcome
from app_bundler.core.platform import BuildArchitecture, Platform, PlatformKind
from app_bundler.core.protocols import AppBundler, ConfigurationLoader, ProductBuilder
from app_bundler.core.session import CommandSession
from app_bundler.core.validation import BundleArguments, validate_arguments

__all__: list[str] = [
    "AppBundler",
    "AppConfiguration",
    "BuildArchitecture",
    "BuildRequest",
    "BundleArguments",
    "BundleContext",
    "BundleOutcome",
    "BundleService",
    "CommandSession",
    "ConfigurationLoader",
    "PackageConfiguration",
    "Platform",
    "PlatformKind",
    "ProductBuilder",
    "ResolvedApp",
    "resolve_app",
    "validate_arguments",
]
