"""Configuration schemas, app resolution and pure migration transforms.

Three on-disk generations are modelled:

* :class:`PackageConfiguration` — the current ``Bundler.toml`` layout,
  identified by ``format_version = 2``.
* :class:`V2PackageConfiguration` — ``Bundler.toml`` written before the
  format was versioned (``bundle_identifier`` / ``extra_plist_entries``).
* :class:`OldConfiguration` — the single-app ``Bundle.json`` file.

All models are pydantic v2 models so that a missing key surfaces as a
``ValidationError`` carrying its location; see
:mod:`app_bundler.core.decoding`.  No I/O happens here; reading,
backing up and writing files is the job of
:mod:`app_bundler.infra.configuration_store`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, JsonValue, field_validator

from app_bundler.exceptions import MultipleAppsAndNoneSpecifiedError, NoSuchAppError

CURRENT_FORMAT_VERSION: int = 2

CONFIGURATION_FILE_NAME: str = "Bundler.toml"
OLD_CONFIGURATION_FILE_NAME: str = "Bundle.json"

PlistValue = JsonValue
"""A property-list value: string, number, boolean, array or dictionary."""


def _reject_null(value: PlistValue, path: str) -> None:
    if value is None:
        raise ValueError(f"'{path}' has no value; property lists cannot hold null")
    if isinstance(value, list):
        for index, item in enumerate(value):
            _reject_null(item, f"{path}[{index}]")
    elif isinstance(value, dict):
        for key, item in value.items():
            _reject_null(item, f"{path}.{key}")


def _check_plist_entries(entries: dict[str, PlistValue]) -> dict[str, PlistValue]:
    for key, value in entries.items():
        _reject_null(value, key)
    return entries


PlistEntries = Annotated[dict[str, PlistValue], AfterValidator(_check_plist_entries)]


# ---------------------------------------------------------------------------
# Current format
# ---------------------------------------------------------------------------

class AppConfiguration(BaseModel):
    """Packaging metadata for one app."""

    model_config = ConfigDict(frozen=True)

    product: str = Field(..., min_length=1, description="Executable product to bundle.")
    version: str = Field(..., min_length=1, description="CFBundleShortVersionString.")
    identifier: str = Field(..., min_length=1, description="CFBundleIdentifier.")
    category: str | None = Field(default=None, description="LSApplicationCategoryType.")
    icon: str | None = Field(
        default=None,
        description="Icon file, relative to the package directory.",
    )
    minimum_macos_version: str | None = None
    minimum_ios_version: str | None = None
    plist: PlistEntries = Field(
        default_factory=dict,
        description="Extra Info.plist entries, applied last.",
    )


class PackageConfiguration(BaseModel):
    """Every app configured by a package, keyed by app name."""

    model_config = ConfigDict(frozen=True)

    format_version: int = CURRENT_FORMAT_VERSION
    apps: dict[str, AppConfiguration] = Field(default_factory=dict)

    @field_validator("format_version")
    @classmethod
    def _supported_format(cls, value: int) -> int:
        if value != CURRENT_FORMAT_VERSION:
            raise ValueError(
                f"unsupported format version {value} "
                f"(expected {CURRENT_FORMAT_VERSION})",
            )
        return value

    def to_document(self) -> dict[str, Any]:
        """Return a TOML-ready mapping with ``format_version`` first."""
        apps: dict[str, Any] = {}
        for name, app in self.apps.items():
            entry = app.model_dump(exclude_none=True)
            if not entry.get("plist"):
                entry.pop("plist", None)
            apps[name] = entry
        return {"format_version": self.format_version, "apps": apps}


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ResolvedApp:
    """The app chosen for one command, with its configuration."""

    name: str
    configuration: AppConfiguration


def resolve_app(name: str | None, config: PackageConfiguration) -> ResolvedApp:
    """Pick the app a command operates on.

    Raises
    ------
    NoSuchAppError
        If *name* is given but not configured.
    MultipleAppsAndNoneSpecifiedError
        If *name* is omitted and the package does not configure exactly
        one app.
    """
    if name is not None:
        app = config.apps.get(name)
        if app is None:
            raise NoSuchAppError(name)
        return ResolvedApp(name, app)

    if len(config.apps) == 1:
        (only_name, only_app), = config.apps.items()
        return ResolvedApp(only_name, only_app)
    raise MultipleAppsAndNoneSpecifiedError()


# ---------------------------------------------------------------------------
# v2 format (unversioned Bundler.toml)
# ---------------------------------------------------------------------------

class V2AppConfiguration(BaseModel):
    product: str
    version: str
    bundle_identifier: str
    category: str | None = None
    icon: str | None = None
    minimum_macos_version: str | None = None
    minimum_ios_version: str | None = None
    extra_plist_entries: PlistEntries = Field(default_factory=dict)

    def migrate(self) -> AppConfiguration:
        return AppConfiguration(
            product=self.product,
            version=self.version,
            identifier=self.bundle_identifier,
            category=self.category,
            icon=self.icon,
            minimum_macos_version=self.minimum_macos_version,
            minimum_ios_version=self.minimum_ios_version,
            plist=dict(self.extra_plist_entries),
        )


class V2PackageConfiguration(BaseModel):
    apps: dict[str, V2AppConfiguration]

    def migrate(self) -> PackageConfiguration:
        return PackageConfiguration(
            apps={name: app.migrate() for name, app in self.apps.items()},
        )


# ---------------------------------------------------------------------------
# Old format (Bundle.json)
# ---------------------------------------------------------------------------

class OldConfiguration(BaseModel):
    """The single-app JSON configuration that predates ``Bundler.toml``."""

    model_config = ConfigDict(populate_by_name=True)

    target: str
    bundle_identifier: str = Field(..., alias="bundleIdentifier")
    version_string: str = Field(..., alias="versionString")
    build_number: int = Field(default=1, alias="buildNumber")
    category: str | None = None
    min_os_version: str | None = Field(default=None, alias="minOSVersion")
    extra_info_plist_entries: PlistEntries = Field(
        default_factory=dict,
        alias="extraInfoPlistEntries",
    )

    def migrate(self) -> PackageConfiguration:
        """Convert to the current format; the app is named after the target."""
        plist: dict[str, PlistValue] = {"CFBundleVersion": str(self.build_number)}
        plist.update(self.extra_info_plist_entries)
        app = AppConfiguration(
            product=self.target,
            version=self.version_string,
            identifier=self.bundle_identifier,
            category=self.category,
            minimum_macos_version=self.min_os_version,
            plist=plist,
        )
        return PackageConfiguration(apps={self.target: app})


OLD_IDENTIFIER_FIELDS: tuple[str, ...] = ("bundleIdentifier",)
V2_IDENTIFIER_FIELDS: tuple[str, ...] = ("bundle_identifier",)


def is_current_document(document: dict[str, Any]) -> bool:
    """Whether a decoded TOML document uses the versioned layout."""
    return "format_version" in document
