"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Bundle produced (or command completed) without error."""

GENERAL_ERROR: int = 1
"""A known AppBundlerError was caught: invalid arguments, configuration
or a failed build/bundle stage.  A user-facing message was displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
