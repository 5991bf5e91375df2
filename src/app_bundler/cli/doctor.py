"""``app-bundler doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the machine can build, bundle and sign apps.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  It only collects and displays
diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from app_bundler.cli import exit_codes
from app_bundler.cli.console import console
from app_bundler.core.platform import BuildArchitecture
from app_bundler.exceptions import UnsupportedHostArchitectureError
from app_bundler.infra.tool_detector import ToolStatus, detect_tool
from app_bundler.version import __version__

Check = tuple[str, str, str]

# Tool name → what breaks without it.
_TOOLS: tuple[tuple[str, str], ...] = (
    ("swift", "building (use --skip-build)"),
    ("codesign", "--codesign"),
    ("security", "list-identities"),
    ("git", "$(COMMIT_HASH)"),
)


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 11)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.11 required)[/red]"
    return "Python", version, status


def _tool_check(name: str, needed_for: str) -> Check:
    """Return (label, value, status) for one external tool."""
    status_obj: ToolStatus = detect_tool(name)
    if status_obj.found:
        return name, str(status_obj.path or "found"), "[green]OK[/green]"
    return name, f"not found (needed for {needed_for})", "[yellow]WARN[/yellow]"


def _host_check() -> Check:
    """Return (label, value, status) for the OS / host architecture row."""
    system_raw = platform.system()
    system_display = {"Darwin": "macOS"}.get(system_raw, system_raw)
    try:
        arch = BuildArchitecture.current().value
        status = "[green]OK[/green]" if system_raw == "Darwin" else "[yellow]WARN[/yellow]"
    except UnsupportedHostArchitectureError:
        arch = platform.machine() or "unknown"
        status = "[red]FAIL (unsupported architecture)[/red]"
    return "Host", f"{system_display} {platform.release()} ({arch})", status


def _version_check() -> Check:
    return "app-bundler", __version__, "[green]OK[/green]"


def collect_checks() -> list[Check]:
    return [
        _version_check(),
        _python_version_check(),
        *(_tool_check(name, needed_for) for name, needed_for in _TOOLS),
        _host_check(),
    ]


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\napp-bundler doctor", file=sys.stderr)
    print("=" * 72, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<50} {'Status':<8}", file=sys.stderr)
    print("-" * 72, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<50} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  Missing tools only
        warn.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
    else:
        table = Table(
            title="app-bundler doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)
        console.print()
        console.print(table)
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
