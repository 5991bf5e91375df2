"""SwiftPM-backed implementation of :class:`~app_bundler.core.protocols.ProductBuilder`.

This module is the **only** place that invokes ``swift build``.  Every
process failure is caught here and re-raised as
:class:`~app_bundler.exceptions.BuildFailedError`.
"""

from __future__ import annotations

from pathlib import Path

from app_bundler.core.models import BuildRequest
from app_bundler.core.platform import PlatformKind
from app_bundler.exceptions import BuildFailedError, ToolNotFoundError
from app_bundler.infra.process import run_process


def target_triple(request: BuildRequest, *, with_version: bool = True) -> str:
    """LLVM target triple for a single-architecture build."""
    arch = request.architectures[0].value
    platform = request.platform
    version = platform.version if with_version else ""
    if platform.kind is PlatformKind.MACOS:
        return f"{arch}-apple-macosx{version}"
    if platform.kind is PlatformKind.IOS:
        return f"{arch}-apple-ios{version}"
    if platform.kind is PlatformKind.IOS_SIMULATOR:
        return f"{arch}-apple-ios{version}-simulator"
    raise AssertionError(f"unhandled platform kind: {platform.kind!r}")


class SwiftPackageManagerBuilder:
    """Concrete :class:`ProductBuilder` that shells out to ``swift build``.

    Parameters
    ----------
    swift:
        Name or path of the ``swift`` executable.
    xcrun:
        Name or path of ``xcrun``, used to locate iOS SDKs.
    """

    def __init__(self, *, swift: str = "swift", xcrun: str = "xcrun") -> None:
        self._swift = swift
        self._xcrun = xcrun

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def products_directory(self, request: BuildRequest) -> Path:
        """Where SwiftPM leaves the built products for *request*."""
        build_dir = request.package_directory / ".build"
        if request.universal:
            return build_dir / "apple" / "Products" / request.configuration.value.capitalize()
        return build_dir / target_triple(request, with_version=False) / request.configuration.value

    async def build(self, request: BuildRequest) -> None:
        """Compile ``request.product``.

        Raises
        ------
        ToolNotFoundError
            When ``swift`` (or ``xcrun`` for iOS) cannot be executed.
        BuildFailedError
            When ``swift build`` exits with a non-zero status.
        """
        argv = await self.build_command(request)
        try:
            result = await run_process(argv, cwd=request.package_directory)
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"Could not run '{self._swift}'.",
                hint="Install Xcode or a Swift toolchain from https://swift.org/download",
            ) from exc
        except OSError as exc:
            raise BuildFailedError(f"Failed to start the build: {exc}") from exc

        if not result.ok:
            raise BuildFailedError(
                f"Failed to build '{request.product}' "
                f"(swift build exited with status {result.returncode}).",
                hint=result.failure_summary() or None,
            )

    # ------------------------------------------------------------------
    # Command construction
    # ------------------------------------------------------------------

    async def build_command(self, request: BuildRequest) -> list[str]:
        argv = [
            self._swift,
            "build",
            "-c",
            request.configuration.value,
            "--product",
            request.product,
        ]
        if request.platform.kind is PlatformKind.MACOS:
            for arch in request.architectures:
                argv += ["--arch", arch.value]
            return argv

        sdk_path = await self._sdk_path(request.platform.sdk_name)
        argv += [
            "-Xswiftc", "-sdk", "-Xswiftc", sdk_path,
            "-Xswiftc", "-target", "-Xswiftc", target_triple(request),
            "-Xcc", "-isysroot", "-Xcc", sdk_path,
        ]
        return argv

    async def _sdk_path(self, sdk: str) -> str:
        try:
            result = await run_process([self._xcrun, "--sdk", sdk, "--show-sdk-path"])
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"Could not run '{self._xcrun}' to locate the {sdk} SDK.",
                hint="Install the Xcode command line tools: xcode-select --install",
            ) from exc
        if not result.ok or not result.stdout.strip():
            raise BuildFailedError(
                f"Failed to locate the {sdk} SDK.",
                hint=result.failure_summary() or None,
            )
        return result.stdout.strip()
