"""Infrastructure layer — external system integration.

This layer wraps all interaction with the filesystem, ``swift``,
``codesign``, ``security`` and ``git``.  Every raw ``OSError``,
subprocess or decoder exception must be caught here and re-raised as a
:class:`~app_bundler.exceptions.AppBundlerError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from app_bundler.infra.configuration_store import ConfigurationStore
from app_bundler.infra.darwin_bundler import DarwinAppBundler
from app_bundler.infra.identities import CodesigningIdentity, list_identities
from app_bundler.infra.swiftpm_builder import SwiftPackageManagerBuilder
from app_bundler.infra.tool_detector import ToolStatus, detect_tool

__all__: list[str] = [
    "CodesigningIdentity",
    "ConfigurationStore",
    "DarwinAppBundler",
    "SwiftPackageManagerBuilder",
    "ToolStatus",
    "detect_tool",
    "list_identities",
]
