"""Filesystem-backed configuration store.

This module is the **only** place in the codebase that reads or writes
``Bundler.toml`` / ``Bundle.json``.  Every ``OSError`` and decoder error
is caught here and re-raised as a typed
:class:`~app_bundler.exceptions.PackageConfigurationError` subclass.

Migration safety
----------------
A migration runs as independent steps (read, decode, transform, back
up, serialize, write) and each failure leaves the package no worse off
than before:

* Failures before the backup leave the original file untouched.
* The backup is a copy (``<file>.orig``); the original is never moved.
* The migrated file is written to a temporary sibling and renamed into
  place, so a failed write cannot truncate the original.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import ValidationError

from app_bundler.core.configuration import (
    CONFIGURATION_FILE_NAME,
    OLD_CONFIGURATION_FILE_NAME,
    OLD_IDENTIFIER_FIELDS,
    V2_IDENTIFIER_FIELDS,
    OldConfiguration,
    PackageConfiguration,
    V2PackageConfiguration,
    is_current_document,
)
from app_bundler.core.decoding import classify_decode_error
from app_bundler.exceptions import (
    FailedToCreateConfigurationBackupError,
    FailedToDeserializeConfigurationError,
    FailedToDeserializeOldConfigurationError,
    FailedToDeserializeV2ConfigurationError,
    FailedToReadConfigurationFileError,
    FailedToReadContentsOfOldConfigurationFileError,
    FailedToSerializeConfigurationError,
    FailedToSerializeMigratedConfigurationError,
    FailedToWriteToConfigurationFileError,
    FailedToWriteToMigratedConfigurationFileError,
)

BACKUP_SUFFIX: str = ".orig"

MigrationCallback = Callable[[Path, Path], None]
"""Called with ``(source, destination)`` before a migration starts."""


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


class ConfigurationStore:
    """Concrete :class:`~app_bundler.core.protocols.ConfigurationLoader`.

    Parameters
    ----------
    on_migrate:
        Optional callback notified before an older configuration file
        is migrated, so the CLI can tell the user.
    """

    def __init__(self, *, on_migrate: MigrationCallback | None = None) -> None:
        self._on_migrate = on_migrate

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(
        self,
        directory: Path,
        custom_file: Path | None = None,
    ) -> PackageConfiguration:
        """Load the package configuration, migrating older files first.

        Without *custom_file* the conventional ``Bundler.toml`` under
        *directory* is used; a lone ``Bundle.json`` is migrated to it.
        A *custom_file* ending in ``.json`` is treated the same way: it is
        migrated to a ``Bundler.toml`` beside it unless that file already
        exists.  A ``Bundler.toml`` without ``format_version`` is migrated
        in place.

        Raises
        ------
        FailedToReadConfigurationFileError
            If the file cannot be read.
        FailedToDeserializeConfigurationError
            If the file is not valid TOML or does not match the schema.
        PackageConfigurationError
            Any migration error, when a migration was needed.
        """
        if custom_file is not None:
            path = custom_file
            if custom_file.suffix.lower() == ".json":
                path = custom_file.with_name(CONFIGURATION_FILE_NAME)
                if not path.exists():
                    self.migrate_old(custom_file, path)
        else:
            path = directory / CONFIGURATION_FILE_NAME
            old_path = directory / OLD_CONFIGURATION_FILE_NAME
            if not path.exists() and old_path.exists():
                self.migrate_old(old_path, path)

        document = self._read_document(path)
        if not is_current_document(document):
            self.migrate_v2(path)
            document = self._read_document(path)

        try:
            return PackageConfiguration.model_validate(document)
        except ValidationError as exc:
            raise FailedToDeserializeConfigurationError(
                classify_decode_error(exc, document=document),
            ) from exc

    def _read_document(self, path: Path) -> dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FailedToReadConfigurationFileError(path, exc) from exc
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise FailedToDeserializeConfigurationError(
                classify_decode_error(exc),
            ) from exc

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save(self, config: PackageConfiguration, path: Path) -> None:
        """Write *config* to *path* in the current format.

        Raises
        ------
        FailedToSerializeConfigurationError
            If the configuration cannot be encoded as TOML.
        FailedToWriteToConfigurationFileError
            If the file cannot be written.
        """
        try:
            text = tomli_w.dumps(config.to_document())
        except (TypeError, ValueError) as exc:
            raise FailedToSerializeConfigurationError(exc) from exc
        try:
            _atomic_write(path, text)
        except OSError as exc:
            raise FailedToWriteToConfigurationFileError(path, exc) from exc

    # ------------------------------------------------------------------
    # Migration
    # ------------------------------------------------------------------

    def migrate_if_needed(
        self,
        directory: Path,
        custom_file: Path | None = None,
    ) -> Path | None:
        """Migrate the package's configuration when it is outdated.

        Returns the migrated file, or ``None`` when the configuration
        already uses the current format.
        """
        if custom_file is not None:
            path = custom_file
        else:
            path = directory / CONFIGURATION_FILE_NAME
            old_path = directory / OLD_CONFIGURATION_FILE_NAME
            if not path.exists() and old_path.exists():
                return self.migrate(old_path)
        if path.suffix.lower() == ".json":
            return self.migrate(path)
        if is_current_document(self._read_document(path)):
            return None
        return self.migrate(path)

    def migrate(self, old_file: Path) -> Path:
        """Migrate *old_file* to the current format; return the new file.

        ``Bundle.json`` files migrate to a ``Bundler.toml`` beside them;
        unversioned ``Bundler.toml`` files migrate in place.
        """
        if old_file.suffix.lower() == ".json":
            destination = old_file.with_name(CONFIGURATION_FILE_NAME)
            self.migrate_old(old_file, destination)
            return destination
        self.migrate_v2(old_file)
        return old_file

    def migrate_old(self, old_file: Path, destination: Path) -> None:
        """Migrate a ``Bundle.json`` file into *destination*.

        Raises
        ------
        FailedToReadContentsOfOldConfigurationFileError
        FailedToDeserializeOldConfigurationError
        FailedToCreateConfigurationBackupError
        FailedToSerializeMigratedConfigurationError
        FailedToWriteToMigratedConfigurationFileError
        """
        text = self._read_old_file(old_file)
        document: Any = None
        try:
            document = json.loads(text)
            migrated = OldConfiguration.model_validate(document).migrate()
        except (json.JSONDecodeError, ValidationError) as exc:
            raise FailedToDeserializeOldConfigurationError(
                classify_decode_error(
                    exc,
                    identifier_fields=OLD_IDENTIFIER_FIELDS,
                    document=document,
                ),
            ) from exc
        self._commit_migration(old_file, migrated, destination)

    def migrate_v2(self, path: Path) -> None:
        """Migrate an unversioned ``Bundler.toml`` in place.

        Raises
        ------
        FailedToReadContentsOfOldConfigurationFileError
        FailedToDeserializeV2ConfigurationError
        FailedToCreateConfigurationBackupError
        FailedToSerializeMigratedConfigurationError
        FailedToWriteToMigratedConfigurationFileError
        """
        text = self._read_old_file(path)
        document: Any = None
        try:
            document = tomllib.loads(text)
            migrated = V2PackageConfiguration.model_validate(document).migrate()
        except (tomllib.TOMLDecodeError, ValidationError) as exc:
            raise FailedToDeserializeV2ConfigurationError(
                classify_decode_error(
                    exc,
                    identifier_fields=V2_IDENTIFIER_FIELDS,
                    document=document,
                ),
            ) from exc
        self._commit_migration(path, migrated, path)

    @staticmethod
    def _read_old_file(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FailedToReadContentsOfOldConfigurationFileError(path, exc) from exc

    def _commit_migration(
        self,
        source: Path,
        migrated: PackageConfiguration,
        destination: Path,
    ) -> None:
        """Back up *source*, then write *migrated* to *destination*."""
        if self._on_migrate is not None:
            self._on_migrate(source, destination)

        try:
            shutil.copy2(source, backup_path_for(source))
        except OSError as exc:
            raise FailedToCreateConfigurationBackupError(exc) from exc

        try:
            text = tomli_w.dumps(migrated.to_document())
        except (TypeError, ValueError) as exc:
            raise FailedToSerializeMigratedConfigurationError(exc) from exc

        try:
            _atomic_write(destination, text)
        except OSError as exc:
            raise FailedToWriteToMigratedConfigurationFileError(destination, exc) from exc


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def _atomic_write(path: Path, text: str) -> None:
    """Write *text* to a temporary sibling of *path*, then rename it over."""
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
