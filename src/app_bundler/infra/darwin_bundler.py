"""Assemble ``.app`` bundles for macOS and iOS.

Implements :class:`~app_bundler.core.protocols.AppBundler`.  All
filesystem work runs in a worker thread so the pipeline stays
responsive to cancellation; ``codesign`` runs as an async subprocess.
Every ``OSError`` is re-raised as
:class:`~app_bundler.exceptions.BundleFailedError`.

Layout
------
macOS::

    App.app/Contents/Info.plist
    App.app/Contents/PkgInfo
    App.app/Contents/MacOS/<product>
    App.app/Contents/Resources/...
    App.app/Contents/Libraries/*.dylib      (stand-alone only)

iOS and the simulator use the flat layout::

    App.app/Info.plist
    App.app/<product>
    App.app/embedded.mobileprovision       (device only)
"""

from __future__ import annotations

import asyncio
import plistlib
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from app_bundler.core.models import BundleContext
from app_bundler.core.platform import PlatformKind
from app_bundler.exceptions import BundleFailedError, CodeSigningError, ToolNotFoundError
from app_bundler.infra.process import run_process

PKG_INFO_CONTENT = b"APPL????"


@dataclass(frozen=True, slots=True)
class BundleLayout:
    """Paths inside one app bundle."""

    root: Path
    info_plist: Path
    executable_directory: Path
    resources: Path
    libraries: Path
    pkg_info: Path | None

    @classmethod
    def for_context(cls, context: BundleContext) -> BundleLayout:
        root = context.bundle_path
        if context.platform.kind is PlatformKind.MACOS:
            contents = root / "Contents"
            return cls(
                root=root,
                info_plist=contents / "Info.plist",
                executable_directory=contents / "MacOS",
                resources=contents / "Resources",
                libraries=contents / "Libraries",
                pkg_info=contents / "PkgInfo",
            )
        return cls(
            root=root,
            info_plist=root / "Info.plist",
            executable_directory=root,
            resources=root,
            libraries=root / "Frameworks",
            pkg_info=None,
        )


def create_info_plist(context: BundleContext) -> dict[str, Any]:
    """Build the Info.plist dictionary; ``app.plist`` entries win."""
    app = context.app
    platform = context.platform
    plist: dict[str, Any] = {
        "CFBundleDevelopmentRegion": "en",
        "CFBundleExecutable": app.product,
        "CFBundleIdentifier": app.identifier,
        "CFBundleInfoDictionaryVersion": "6.0",
        "CFBundleName": context.app_name,
        "CFBundlePackageType": "APPL",
        "CFBundleShortVersionString": app.version,
        "CFBundleVersion": app.version,
    }
    if app.category is not None:
        plist["LSApplicationCategoryType"] = app.category
    if app.icon is not None:
        plist["CFBundleIconFile"] = Path(app.icon).name

    if platform.is_ios:
        plist["MinimumOSVersion"] = platform.version
        plist["CFBundleSupportedPlatforms"] = [
            "iPhoneSimulator" if context.targeting_simulator else "iPhoneOS",
        ]
        plist["UIDeviceFamily"] = [1, 2]
        plist["UILaunchScreen"] = {}
    else:
        plist["LSMinimumSystemVersion"] = platform.version

    plist.update(app.plist)
    return plist


class DarwinAppBundler:
    """Concrete :class:`AppBundler` for macOS, iOS and the iOS simulator.

    Parameters
    ----------
    codesign:
        Name or path of the ``codesign`` executable.
    """

    def __init__(self, *, codesign: str = "codesign") -> None:
        self._codesign = codesign

    async def bundle(self, context: BundleContext) -> None:
        """Assemble ``context.bundle_path`` and sign it when asked.

        Raises
        ------
        BundleFailedError
            When a file cannot be found, copied or written.
        CodeSigningError
            When ``codesign`` fails.
        """
        layout = BundleLayout.for_context(context)
        try:
            await asyncio.to_thread(self._assemble, context, layout)
        except OSError as exc:
            raise BundleFailedError(
                f"Failed to create app bundle at '{layout.root}': {exc}",
            ) from exc

        if context.codesigning_identity is not None:
            await self._sign(layout.root, context.codesigning_identity)

    # ------------------------------------------------------------------
    # Assembly (runs in a worker thread)
    # ------------------------------------------------------------------

    def _assemble(self, context: BundleContext, layout: BundleLayout) -> None:
        executable = context.products_directory / context.app.product
        if not executable.is_file():
            raise BundleFailedError(
                f"Could not find the built executable at '{executable}'.",
                hint="Build the product first or pass the correct --products-directory.",
            )

        if layout.root.exists():
            shutil.rmtree(layout.root)
        for directory in (layout.executable_directory, layout.resources):
            directory.mkdir(parents=True, exist_ok=True)

        shutil.copy2(executable, layout.executable_directory / executable.name)
        self._copy_resource_bundles(context.products_directory, layout.resources)

        if context.app.icon is not None:
            icon = context.package_directory / context.app.icon
            if not icon.is_file():
                raise BundleFailedError(f"Could not find the app icon at '{icon}'.")
            shutil.copy2(icon, layout.resources / icon.name)

        if context.stand_alone:
            self._copy_dynamic_libraries(context.products_directory, layout.libraries)

        if context.provisioning_profile is not None:
            shutil.copy2(context.provisioning_profile, layout.root / "embedded.mobileprovision")

        with layout.info_plist.open("wb") as handle:
            plistlib.dump(create_info_plist(context), handle)
        if layout.pkg_info is not None:
            layout.pkg_info.write_bytes(PKG_INFO_CONTENT)

    @staticmethod
    def _copy_resource_bundles(products_directory: Path, destination: Path) -> None:
        for bundle in sorted(products_directory.glob("*.bundle")):
            if bundle.is_dir():
                shutil.copytree(bundle, destination / bundle.name, dirs_exist_ok=True)

    @staticmethod
    def _copy_dynamic_libraries(products_directory: Path, destination: Path) -> None:
        libraries = sorted(products_directory.glob("*.dylib"))
        if not libraries:
            return
        destination.mkdir(parents=True, exist_ok=True)
        for library in libraries:
            shutil.copy2(library, destination / library.name)

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    async def _sign(self, bundle: Path, identity: str) -> None:
        argv = [self._codesign, "--force", "--deep", "--sign", identity, bundle]
        try:
            result = await run_process(argv)
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"Could not run '{self._codesign}'.",
                hint="Install the Xcode command line tools: xcode-select --install",
            ) from exc
        if not result.ok:
            raise CodeSigningError(
                f"Failed to codesign '{bundle.name}' with identity '{identity}'.",
                hint=result.failure_summary() or None,
            )
