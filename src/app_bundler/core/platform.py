"""Target platform and build architecture value types.

Both are immutable values: a :class:`Platform` compares and hashes by
``(kind, version)`` and every consumer switches on :class:`PlatformKind`
explicitly.
"""

from __future__ import annotations

import enum
import platform as host_platform
from dataclasses import dataclass

from app_bundler.exceptions import InvalidPlatformError, UnsupportedHostArchitectureError


class PlatformKind(enum.Enum):
    """The closed set of platforms an app can be bundled for.

    Values are the spellings accepted by ``--platform``.
    """

    MACOS = "macOS"
    IOS = "iOS"
    IOS_SIMULATOR = "iOS Simulator"


DEFAULT_PLATFORM_VERSIONS: dict[PlatformKind, str] = {
    PlatformKind.MACOS: "11",
    PlatformKind.IOS: "15.0",
    PlatformKind.IOS_SIMULATOR: "15.0",
}


@dataclass(frozen=True, slots=True)
class Platform:
    """A platform to build for, together with its deployment version."""

    kind: PlatformKind
    version: str

    @classmethod
    def macos(cls, version: str) -> Platform:
        return cls(PlatformKind.MACOS, version)

    @classmethod
    def ios(cls, version: str) -> Platform:
        return cls(PlatformKind.IOS, version)

    @classmethod
    def ios_simulator(cls, version: str) -> Platform:
        return cls(PlatformKind.IOS_SIMULATOR, version)

    @classmethod
    def parse(cls, text: str, version: str | None = None) -> Platform:
        """Build a platform from its CLI spelling (case-insensitive).

        When *version* is ``None`` the platform's default deployment
        version is used.

        Raises
        ------
        InvalidPlatformError
            If *text* names no known platform.
        """
        kind = parse_platform_kind(text)
        return cls(kind, version or DEFAULT_PLATFORM_VERSIONS[kind])

    @property
    def name(self) -> str:
        """Display name, e.g. ``"iOS Simulator"``."""
        return self.kind.value

    @property
    def is_simulator(self) -> bool:
        return self.kind is PlatformKind.IOS_SIMULATOR

    @property
    def is_ios(self) -> bool:
        """``True`` for iOS devices and the iOS simulator."""
        return self.kind in (PlatformKind.IOS, PlatformKind.IOS_SIMULATOR)

    @property
    def sdk_name(self) -> str:
        """Name of the Apple SDK the platform builds against."""
        if self.kind is PlatformKind.MACOS:
            return "macosx"
        if self.kind is PlatformKind.IOS:
            return "iphoneos"
        return "iphonesimulator"

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


def parse_platform_kind(text: str) -> PlatformKind:
    """Map a ``--platform`` value onto a :class:`PlatformKind`."""
    normalized = " ".join(text.split()).lower()
    for kind in PlatformKind:
        if kind.value.lower() == normalized:
            return kind
    choices = ", ".join(f"'{kind.value}'" for kind in PlatformKind)
    raise InvalidPlatformError(
        f"Unknown platform '{text}'.",
        hint=f"Supported platforms: {choices}",
    )


class BuildArchitecture(enum.Enum):
    """An architecture a product can be compiled for."""

    ARM64 = "arm64"
    X86_64 = "x86_64"

    @classmethod
    def current(cls) -> BuildArchitecture:
        """Return the architecture of the host machine.

        Raises
        ------
        UnsupportedHostArchitectureError
            When the host machine is neither arm64 nor x86_64.
        """
        machine = host_platform.machine().lower()
        if machine in ("arm64", "aarch64"):
            return cls.ARM64
        if machine in ("x86_64", "amd64"):
            return cls.X86_64
        raise UnsupportedHostArchitectureError(
            f"Unsupported host architecture '{machine or 'unknown'}'.",
        )

    @classmethod
    def parse(cls, text: str) -> BuildArchitecture:
        """Map an ``--arch`` value onto a :class:`BuildArchitecture`."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            choices = ", ".join(arch.value for arch in cls)
            raise ValueError(
                f"invalid architecture '{text}' (choose from {choices})",
            ) from None

    def __str__(self) -> str:
        return self.value
