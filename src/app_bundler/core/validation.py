"""Legality rules for ``bundle`` command arguments.

Rules are checked in a fixed order and the first violation raises
:class:`~app_bundler.exceptions.ArgumentValidationError`; no build or
bundle work may start until :func:`validate_arguments` returns.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from app_bundler.core.platform import BuildArchitecture, Platform, PlatformKind
from app_bundler.exceptions import LIST_IDENTITIES_HINT, ArgumentValidationError


class BuildConfiguration(enum.Enum):
    DEBUG = "debug"
    RELEASE = "release"


@dataclass(frozen=True, slots=True)
class BundleArguments:
    """Options shared by every command that produces an app bundle."""

    platform: PlatformKind = PlatformKind.MACOS
    app_name: str | None = None
    package_directory: Path = Path(".")
    configuration_file_override: Path | None = None
    output_directory: Path | None = None
    products_directory: Path | None = None
    build_configuration: BuildConfiguration = BuildConfiguration.DEBUG
    architectures: tuple[BuildArchitecture, ...] = ()
    universal: bool = False
    should_codesign: bool = False
    identity: str | None = None
    provisioning_profile: Path | None = None
    stand_alone: bool = False
    platform_version: str | None = None
    variables: dict[str, str] = field(default_factory=dict)


def validate_arguments(
    args: BundleArguments,
    platform: Platform,
    *,
    skip_build: bool,
    built_with_xcode: bool,
) -> None:
    """Reject illegal flag combinations for *platform*.

    Raises
    ------
    ArgumentValidationError
        On the first violated rule, with a message naming the offending
        flags.
    """
    is_ios_device = platform.kind is PlatformKind.IOS

    if not skip_build and (args.products_directory is not None or built_with_xcode):
        raise ArgumentValidationError(
            "'--products-directory' and '--built-with-xcode' are only "
            "compatible with '--skip-build'",
        )

    if is_ios_device and (built_with_xcode or args.universal or args.architectures):
        raise ArgumentValidationError(
            "'--built-with-xcode', '--universal' and '--arch' are not "
            "compatible with '--platform iOS'",
        )

    if args.should_codesign and args.identity is None:
        raise ArgumentValidationError(
            "Please provide a codesigning identity with `--identity`",
            hint=LIST_IDENTITIES_HINT,
        )

    if args.identity is not None and not args.should_codesign:
        raise ArgumentValidationError(
            "`--identity` can only be used with `--codesign`",
        )

    if is_ios_device and (
        not args.should_codesign
        or args.identity is None
        or args.provisioning_profile is None
    ):
        raise ArgumentValidationError(
            "Must specify `--identity`, `--codesign` and "
            "`--provisioning-profile` when building iOS app",
            hint=LIST_IDENTITIES_HINT if args.identity is None else None,
        )

    if platform.kind is not PlatformKind.MACOS and args.stand_alone:
        raise ArgumentValidationError(
            "'--experimental-stand-alone' only works on macOS",
        )

    if not is_ios_device and args.provisioning_profile is not None:
        raise ArgumentValidationError(
            "`--provisioning-profile` is only available when building iOS apps",
        )
