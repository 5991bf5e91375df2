"""Enumerate codesigning identities via ``security find-identity``."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass

from app_bundler.exceptions import IdentityListingError, ToolNotFoundError

_IDENTITY_LINE = re.compile(r'^\s*\d+\)\s+([0-9A-Fa-f]{40})\s+"(?P<name>.+)"\s*$')


@dataclass(frozen=True, slots=True)
class CodesigningIdentity:
    id: str
    """SHA-1 fingerprint of the certificate."""

    name: str
    """Common name, usable as ``--identity``."""


def parse_identities(output: str) -> list[CodesigningIdentity]:
    """Parse ``security find-identity -p codesigning -v`` output.

    Lines that do not describe an identity (the trailing
    ``N valid identities found`` summary, blank lines) are skipped.
    """
    identities: list[CodesigningIdentity] = []
    for line in output.splitlines():
        match = _IDENTITY_LINE.match(line)
        if match is not None:
            identities.append(CodesigningIdentity(match.group(1).upper(), match.group("name")))
    return identities


def list_identities(security: str = "security") -> list[CodesigningIdentity]:
    """Return the valid codesigning identities in the user's keychains.

    Raises
    ------
    ToolNotFoundError
        When ``security`` cannot be executed (e.g. not on macOS).
    IdentityListingError
        When ``security`` exits unsuccessfully.
    """
    try:
        completed = subprocess.run(
            [security, "find-identity", "-p", "codesigning", "-v"],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(
            f"Could not run '{security}'.",
            hint="Listing identities requires macOS with the Xcode command line tools.",
        ) from exc
    if completed.returncode != 0:
        raise IdentityListingError(
            "Failed to list codesigning identities.",
            hint=(completed.stderr or completed.stdout).strip() or None,
        )
    return parse_identities(completed.stdout)
