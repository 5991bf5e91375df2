"""Pure build-architecture selection.

Every function here is deterministic given its inputs (plus the host
architecture, which is injectable for tests).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from app_bundler.core.platform import BuildArchitecture, Platform, PlatformKind

UNIVERSAL_ARCHITECTURES: tuple[BuildArchitecture, ...] = (
    BuildArchitecture.ARM64,
    BuildArchitecture.X86_64,
)


def is_universal_build(
    requested: Sequence[BuildArchitecture],
    universal: bool,
) -> bool:
    """A build is universal when asked for, or when several arches are given."""
    return universal or len(requested) > 1


def resolve_architectures(
    platform: Platform,
    requested: Sequence[BuildArchitecture],
    universal: bool,
    *,
    host: Callable[[], BuildArchitecture] = BuildArchitecture.current,
) -> list[BuildArchitecture]:
    """Compute the concrete architectures to build for *platform*.

    * macOS — both slices when *universal*, else *requested* verbatim,
      else the host architecture.
    * iOS devices — always ``arm64``.
    * iOS simulator — always the host architecture.
    """
    if platform.kind is PlatformKind.MACOS:
        if universal:
            return list(UNIVERSAL_ARCHITECTURES)
        if requested:
            return list(requested)
        return [host()]
    if platform.kind is PlatformKind.IOS:
        return [BuildArchitecture.ARM64]
    if platform.kind is PlatformKind.IOS_SIMULATOR:
        return [host()]
    raise AssertionError(f"unhandled platform kind: {platform.kind!r}")
