"""Core bundle service — orchestrates the build → bundle pipeline.

This service delegates compilation to a
:class:`~app_bundler.core.protocols.ProductBuilder` and bundle assembly
to an :class:`~app_bundler.core.protocols.AppBundler`, both injected at
construction time.  It is responsible for:

* Resolving the app through the command session.
* Validating the argument combination before any work starts.
* Choosing the platform version and architectures.
* Composing the stages and running them under a stopwatch.
* Ensuring only :class:`~app_bundler.exceptions.AppBundlerError`
  subclasses escape.

Guarantees
----------
* No filesystem access, no ``print()``.
* A failed build stage means the bundle stage never runs, and the
  build stage's own error is the one raised.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from app_bundler.core.architectures import is_universal_build, resolve_architectures
from app_bundler.core.configuration import AppConfiguration
from app_bundler.core.models import BuildRequest, BundleContext, BundleOutcome
from app_bundler.core.pipeline import (
    PipelineReport,
    PipelineState,
    Stage,
    Stopwatch,
    TransitionCallback,
    run_stages,
)
from app_bundler.core.platform import (
    DEFAULT_PLATFORM_VERSIONS,
    BuildArchitecture,
    Platform,
    PlatformKind,
)
from app_bundler.core.protocols import AppBundler, ProductBuilder
from app_bundler.core.session import CommandSession
from app_bundler.core.validation import BundleArguments, validate_arguments
from app_bundler.exceptions import AppBundlerError, PipelineStageError

BUILD_STAGE: str = "build"
BUNDLE_STAGE: str = "bundle"


def default_output_directory(package_directory: Path) -> Path:
    return package_directory / ".build" / "bundler"


def platform_for_app(
    kind: PlatformKind,
    app: AppConfiguration,
    override: str | None = None,
) -> Platform:
    """Pick the deployment version: override, then app minimum, then default."""
    if override:
        return Platform(kind, override)
    if kind is PlatformKind.MACOS:
        configured = app.minimum_macos_version
    elif kind in (PlatformKind.IOS, PlatformKind.IOS_SIMULATOR):
        configured = app.minimum_ios_version
    else:
        raise AssertionError(f"unhandled platform kind: {kind!r}")
    return Platform(kind, configured or DEFAULT_PLATFORM_VERSIONS[kind])


class BundleService:
    """Drives one ``bundle`` invocation.

    Parameters
    ----------
    session:
        The command's session; supplies the resolved app.
    builder:
        Any object satisfying the :class:`ProductBuilder` protocol.
    bundler:
        Any object satisfying the :class:`AppBundler` protocol.
    host_architecture:
        Returns the host architecture; injectable for tests.
    """

    def __init__(
        self,
        session: CommandSession,
        builder: ProductBuilder,
        bundler: AppBundler,
        *,
        host_architecture: Callable[[], BuildArchitecture] = BuildArchitecture.current,
    ) -> None:
        self._session = session
        self._builder = builder
        self._bundler = bundler
        self._host_architecture = host_architecture

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        args: BundleArguments,
        *,
        skip_build: bool = False,
        built_with_xcode: bool = False,
        on_transition: TransitionCallback | None = None,
    ) -> BundleOutcome:
        """Build (unless skipped) and bundle the session's app.

        Raises
        ------
        PackageConfigurationError
            When the app cannot be resolved.
        ArgumentValidationError
            When the flag combination is illegal; nothing has run yet.
        BuildFailedError, BundleFailedError
            Propagated unchanged from the failing stage.
        PipelineStageError
            When a stage fails with an exception that is not ours.
        """
        resolved = self._session.resolved_app()
        platform = platform_for_app(args.platform, resolved.configuration, args.platform_version)

        validate_arguments(
            args,
            platform,
            skip_build=skip_build,
            built_with_xcode=built_with_xcode,
        )

        architectures = resolve_architectures(
            platform,
            args.architectures,
            args.universal,
            host=self._host_architecture,
        )
        request = BuildRequest(
            product=resolved.configuration.product,
            package_directory=args.package_directory,
            configuration=args.build_configuration,
            architectures=tuple(architectures),
            platform=platform,
        )
        context = BundleContext(
            app_name=resolved.name,
            app=resolved.configuration,
            package_directory=args.package_directory,
            products_directory=(
                args.products_directory or self._builder.products_directory(request)
            ),
            output_directory=(
                args.output_directory or default_output_directory(args.package_directory)
            ),
            platform=platform,
            is_xcode_build=built_with_xcode,
            universal=is_universal_build(args.architectures, args.universal),
            stand_alone=args.stand_alone,
            codesigning_identity=args.identity,
            provisioning_profile=args.provisioning_profile,
        )

        stages = self.compose_stages(request, context, skip_build=skip_build)
        with Stopwatch() as watch:
            report = await run_stages(stages, on_transition=on_transition)

        if not report.succeeded:
            self._raise_failure(report)
        return BundleOutcome(
            bundle_path=context.bundle_path,
            elapsed=watch.elapsed,
            report=report,
        )

    # ------------------------------------------------------------------
    # Stage composition
    # ------------------------------------------------------------------

    def compose_stages(
        self,
        request: BuildRequest,
        context: BundleContext,
        *,
        skip_build: bool,
    ) -> list[Stage]:
        """Return ``[bundle]`` when skipping the build, else ``[build, bundle]``."""

        async def build() -> None:
            await self._builder.build(request)

        async def bundle() -> None:
            await self._bundler.bundle(context)

        stages = [Stage(BUNDLE_STAGE, bundle, PipelineState.BUNDLING)]
        if not skip_build:
            stages.insert(0, Stage(BUILD_STAGE, build, PipelineState.BUILDING))
        return stages

    @staticmethod
    def _raise_failure(report: PipelineReport) -> None:
        error = report.error
        if isinstance(error, AppBundlerError):
            raise error
        stage = report.failed_stage or "unknown"
        cause = error if error is not None else RuntimeError("no error recorded")
        raise PipelineStageError(stage, cause) from cause
