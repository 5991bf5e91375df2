"""CLI application entry point and command routing for app-bundler.

This module is the **sole error boundary** for the entire application.
It catches :class:`~app_bundler.exceptions.AppBundlerError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core
  services and infrastructure adapters.
* ``print()`` is forbidden outside the CLI layer; the Rich console is
  used exclusively.
* This module is the only place that translates between the domain
  world and the OS process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from app_bundler.cli import exit_codes
from app_bundler.cli.console import console
from app_bundler.core.platform import BuildArchitecture, PlatformKind, parse_platform_kind
from app_bundler.core.validation import BuildConfiguration, BundleArguments
from app_bundler.exceptions import AppBundlerError, InvalidPlatformError, display_path
from app_bundler.version import __version__


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------

def _platform_type(text: str) -> PlatformKind:
    try:
        return parse_platform_kind(text)
    except InvalidPlatformError as exc:
        raise argparse.ArgumentTypeError(f"{exc} {exc.hint or ''}".strip()) from exc


def _architecture_type(text: str) -> BuildArchitecture:
    try:
        return BuildArchitecture.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _variable_type(text: str) -> tuple[str, str]:
    name, separator, value = text.partition("=")
    if not separator or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
    return name.strip(), value


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_package_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-d",
        "--package-directory",
        type=Path,
        default=Path("."),
        help="The directory containing the package to bundle (default: .).",
    )
    parser.add_argument(
        "--configuration-file-override",
        type=Path,
        default=None,
        help="A configuration file to use instead of <package>/Bundler.toml.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``app-bundler bundle``           — build and bundle an app
    * ``app-bundler migrate``          — upgrade an old configuration file
    * ``app-bundler list-identities``  — show codesigning identities
    * ``app-bundler doctor``           — environment diagnostics
    """
    parser = argparse.ArgumentParser(
        prog="app-bundler",
        description="Package compiled products into macOS and iOS app bundles.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    bundle = commands.add_parser("bundle", help="Create an app bundle from a package.")
    _add_package_arguments(bundle)
    bundle.add_argument("-a", "--app-name", default=None, help="The app to bundle.")
    bundle.add_argument(
        "--platform",
        type=_platform_type,
        default=PlatformKind.MACOS,
        metavar="{macOS,iOS,iOS Simulator}",
        help="The platform to build for (default: macOS).",
    )
    bundle.add_argument(
        "--platform-version",
        default=None,
        help="Deployment target; defaults to the app's configured minimum.",
    )
    bundle.add_argument(
        "-c",
        "--configuration",
        dest="build_configuration",
        type=BuildConfiguration,
        choices=list(BuildConfiguration),
        default=BuildConfiguration.DEBUG,
        metavar="{debug,release}",
        help="The build configuration (default: debug).",
    )
    bundle.add_argument(
        "--arch",
        dest="architectures",
        type=_architecture_type,
        action="append",
        default=[],
        help="An architecture to build for (repeatable, macOS only).",
    )
    bundle.add_argument(
        "-u",
        "--universal",
        action="store_true",
        help="Build a universal (arm64 + x86_64) app. macOS only.",
    )
    bundle.add_argument("-o", "--output-directory", type=Path, default=None)
    bundle.add_argument(
        "--products-directory",
        type=Path,
        default=None,
        help="Where the built products are. Only valid with --skip-build.",
    )
    bundle.add_argument("--skip-build", action="store_true", help="Skip the build step.")
    bundle.add_argument(
        "--built-with-xcode",
        action="store_true",
        help=(
            "Treat the products in the products directory as if they were "
            "built by Xcode. Only valid with --skip-build."
        ),
    )
    bundle.add_argument("--codesign", action="store_true", help="Codesign the app bundle.")
    bundle.add_argument("--identity", default=None, help="The codesigning identity to use.")
    bundle.add_argument(
        "--provisioning-profile",
        type=Path,
        default=None,
        help="The provisioning profile to embed (iOS only).",
    )
    bundle.add_argument(
        "--experimental-stand-alone",
        dest="stand_alone",
        action="store_true",
        help="Copy dynamic libraries into the bundle. macOS only.",
    )
    bundle.add_argument(
        "--var",
        dest="variables",
        type=_variable_type,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a $(NAME) variable used in the app configuration.",
    )

    migrate = commands.add_parser(
        "migrate",
        help="Upgrade Bundle.json or an unversioned Bundler.toml.",
    )
    _add_package_arguments(migrate)

    commands.add_parser("list-identities", help="List available codesigning identities.")
    commands.add_parser("doctor", help="Check the environment.")
    return parser


def bundle_arguments(namespace: argparse.Namespace) -> BundleArguments:
    """Translate parsed ``bundle`` flags into :class:`BundleArguments`."""
    return BundleArguments(
        platform=namespace.platform,
        app_name=namespace.app_name,
        package_directory=namespace.package_directory,
        configuration_file_override=namespace.configuration_file_override,
        output_directory=namespace.output_directory,
        products_directory=namespace.products_directory,
        build_configuration=namespace.build_configuration,
        architectures=tuple(namespace.architectures),
        universal=namespace.universal,
        should_codesign=namespace.codesign,
        identity=namespace.identity,
        provisioning_profile=namespace.provisioning_profile,
        stand_alone=namespace.stand_alone,
        platform_version=namespace.platform_version,
        variables=dict(namespace.variables),
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _announce_migration(source: Path, destination: Path) -> None:
    console.info(
        f"Migrating '{display_path(source)}' to the current configuration format "
        f"('{display_path(destination)}')",
    )


def _handle_bundle(namespace: argparse.Namespace) -> int:
    """Dispatch the ``bundle`` command.

    Flow:
    1. Resolve the app through a fresh command session.
    2. Validate flags, pick architectures (inside the service).
    3. Run build → bundle with a stage spinner.
    4. Report elapsed time and bundle location.
    """
    from app_bundler.cli.progress import StageProgress
    from app_bundler.core.bundle_service import BundleService
    from app_bundler.core.expressions import VariableContext
    from app_bundler.core.pipeline import format_elapsed
    from app_bundler.core.session import CommandSession
    from app_bundler.infra.configuration_store import ConfigurationStore
    from app_bundler.infra.darwin_bundler import DarwinAppBundler
    from app_bundler.infra.swiftpm_builder import SwiftPackageManagerBuilder
    from app_bundler.infra.variables import default_providers

    args = bundle_arguments(namespace)
    session = CommandSession(
        ConfigurationStore(on_migrate=_announce_migration),
        package_directory=args.package_directory,
        configuration_file=args.configuration_file_override,
        app_name=args.app_name,
        variables=VariableContext(
            default_providers(args.package_directory),
            args.variables,
        ),
    )
    resolved = session.resolved_app()
    service = BundleService(session, SwiftPackageManagerBuilder(), DarwinAppBundler())

    with StageProgress(resolved.name) as progress:
        outcome = asyncio.run(
            service.run(
                args,
                skip_build=namespace.skip_build,
                built_with_xcode=namespace.built_with_xcode,
                on_transition=progress,
            ),
        )

    console.print(
        f"[bold green]Done[/bold green] in {format_elapsed(outcome.elapsed)}. "
        f"App bundle located at '{display_path(outcome.bundle_path)}'",
    )
    return exit_codes.SUCCESS


def _handle_migrate(namespace: argparse.Namespace) -> int:
    """Dispatch the ``migrate`` command."""
    from app_bundler.infra.configuration_store import ConfigurationStore

    store = ConfigurationStore(on_migrate=_announce_migration)
    migrated = store.migrate_if_needed(
        namespace.package_directory,
        namespace.configuration_file_override,
    )
    if migrated is None:
        console.print("[green]Configuration is already up to date.[/green]")
    else:
        console.print(
            f"[bold green]Migrated[/bold green] configuration written to "
            f"'{display_path(migrated)}'",
        )
    return exit_codes.SUCCESS


def _handle_list_identities() -> int:
    """Dispatch the ``list-identities`` command."""
    from app_bundler.infra.identities import list_identities

    identities = list_identities()
    if not identities:
        console.warning("No valid codesigning identities found.")
        return exit_codes.SUCCESS
    for identity in identities:
        console.print(f"[bold]{identity.id}[/bold]: {identity.name}")
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from app_bundler.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the app-bundler CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    namespace = parser.parse_args(argv)

    if namespace.command is None:
        parser.print_help()
        return exit_codes.SUCCESS
    if namespace.command == "bundle":
        return _handle_bundle(namespace)
    if namespace.command == "migrate":
        return _handle_migrate(namespace)
    if namespace.command == "list-identities":
        return _handle_list_identities()
    if namespace.command == "doctor":
        return _handle_doctor()
    parser.error(f"unknown command '{namespace.command}'")
    return exit_codes.GENERAL_ERROR


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except AppBundlerError as exc:
        console.error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
