"""Shared pytest fixtures and configuration for the app-bundler test suite.

Guidelines
----------
* No network access and no real toolchains in any test.
* ``swift``, ``codesign`` and ``security`` are mocked at the infra boundary.
* Core tests must be pure — no side effects.
* Filesystem tests use ``tmp_path`` only.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from app_bundler.core.models import BuildRequest, BundleContext

CURRENT_CONFIG = """\
format_version = 2

[apps.HelloWorld]
product = "HelloWorld"
version = "0.1.0"
identifier = "com.example.HelloWorld"
category = "public.app-category.education"
minimum_macos_version = "12"
"""

TWO_APPS_CONFIG = """\
format_version = 2

[apps.Alpha]
product = "Alpha"
version = "1.0.0"
identifier = "com.example.Alpha"

[apps.Beta]
product = "Beta"
version = "2.0.0"
identifier = "com.example.Beta"
"""

V2_CONFIG = """\
[apps.HelloWorld]
product = "HelloWorld"
version = "0.1.0"
bundle_identifier = "com.example.HelloWorld"
minimum_macos_version = "11"

[apps.HelloWorld.extra_plist_entries]
NSHumanReadableCopyright = "Copyright Example"
"""

V2_CONFIG_WITHOUT_IDENTIFIER = """\
[apps.HelloWorld]
product = "HelloWorld"
version = "0.1.0"
"""

OLD_CONFIG = """\
{
  "target": "HelloWorld",
  "bundleIdentifier": "com.example.HelloWorld",
  "versionString": "0.1.0",
  "buildNumber": 7,
  "category": "public.app-category.education",
  "minOSVersion": "10.15",
  "extraInfoPlistEntries": {"LSUIElement": true}
}
"""


@pytest.fixture()
def package_dir(tmp_path: Path) -> Path:
    """An empty package directory."""
    directory = tmp_path / "HelloWorld"
    directory.mkdir()
    return directory


def write_config(directory: Path, text: str, name: str = "Bundler.toml") -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class RecordingBuilder:
    """Fake :class:`ProductBuilder` that records calls and can fail."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[BuildRequest] = []

    def products_directory(self, request: BuildRequest) -> Path:
        return request.package_directory / ".build" / "fake" / request.configuration.value

    async def build(self, request: BuildRequest) -> None:
        self.requests.append(request)
        if self.error is not None:
            raise self.error


class RecordingBundler:
    """Fake :class:`AppBundler` whose side effect is writing a marker file."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.contexts: list[BundleContext] = []

    async def bundle(self, context: BundleContext) -> None:
        self.contexts.append(context)
        if self.error is not None:
            raise self.error
        context.bundle_path.mkdir(parents=True, exist_ok=True)
        (context.bundle_path / "marker").write_text("bundled", encoding="utf-8")
