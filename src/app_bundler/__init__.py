"""app-bundler — package compiled products into macOS and iOS app bundles.

Resolves per-app configuration from a package's ``Bundler.toml``,
validates the requested platform/flag combination, and runs the
build → bundle pipeline with a strict layered architecture.
"""

from app_bundler.version import __version__

__all__: list[str] = ["__version__"]
