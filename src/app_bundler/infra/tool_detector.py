"""Infrastructure: command-line tool detection and install guidance.

Locates the external tools the build and bundle stages shell out to
(``swift``, ``codesign``, ``security``, ``git``) and provides
installation guidance when one is missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

_XCODE_TOOLS_HINT: tuple[str, ...] = ("xcode-select --install",)


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of looking a tool up on PATH.

    Attributes
    ----------
    name : str
        Executable name that was looked up.
    found : bool
        Whether the tool was located on PATH.
    path : Path | None
        Absolute path to the tool, or ``None``.
    install_commands : tuple[str, ...]
        Suggested ways to install the tool on the current platform.
        Empty when the tool is already present.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str) -> ToolStatus:
    """Probe PATH for *name*; never raises."""
    result = shutil.which(name)
    if result is not None:
        return ToolStatus(
            name=name,
            found=True,
            path=Path(result).resolve(),
            install_commands=(),
        )
    return ToolStatus(
        name=name,
        found=False,
        path=None,
        install_commands=install_commands_for(name),
    )


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def install_commands_for(name: str) -> tuple[str, ...]:
    """Return install suggestions for *name* on the current OS."""
    system = platform.system().lower()
    if name in ("codesign", "security", "xcrun"):
        if system == "darwin":
            return _XCODE_TOOLS_HINT
        return (f"{name} is only available on macOS",)
    if name == "swift":
        if system == "darwin":
            return _XCODE_TOOLS_HINT
        return ("Download a toolchain from https://swift.org/download",)
    if name == "git":
        if system == "darwin":
            return _XCODE_TOOLS_HINT + ("brew install git",)
        if system == "linux":
            return ("sudo apt install git", "sudo dnf install git")
    return ()
