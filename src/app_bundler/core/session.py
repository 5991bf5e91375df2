"""Per-command session holding the resolved app.

A :class:`CommandSession` is created once per CLI command invocation
and passed explicitly to whatever needs the resolved app.  The
configuration file is read at most once per session; nothing is
cached across sessions.
"""

from __future__ import annotations

from pathlib import Path

from app_bundler.core.configuration import ResolvedApp, resolve_app
from app_bundler.core.expressions import VariableContext, evaluate_app
from app_bundler.core.protocols import ConfigurationLoader
from app_bundler.exceptions import AppConfigurationError, FailedToEvaluateExpressionsError


class CommandSession:
    """Lazily resolves and caches the app a command operates on.

    Parameters
    ----------
    loader:
        Reads the package configuration (see
        :class:`~app_bundler.core.protocols.ConfigurationLoader`).
    package_directory:
        Root of the package being bundled.
    configuration_file:
        Optional configuration file outside the conventional location.
    app_name:
        App to resolve; ``None`` selects the only configured app.
    variables:
        Values for ``$(NAME)`` expressions in the app configuration.
    """

    def __init__(
        self,
        loader: ConfigurationLoader,
        *,
        package_directory: Path,
        configuration_file: Path | None = None,
        app_name: str | None = None,
        variables: VariableContext | None = None,
    ) -> None:
        self._loader = loader
        self.package_directory = package_directory
        self.configuration_file = configuration_file
        self.app_name = app_name
        self._variables = variables or VariableContext()
        self._resolved: ResolvedApp | None = None

    def resolved_app(self) -> ResolvedApp:
        """Return the resolved app, loading the configuration on first use.

        Raises
        ------
        PackageConfigurationError
            When loading, resolving or evaluating the configuration fails.
        """
        if self._resolved is None:
            config = self._loader.load(self.package_directory, self.configuration_file)
            resolved = resolve_app(self.app_name, config)
            try:
                evaluated = evaluate_app(resolved.configuration, self._variables)
            except AppConfigurationError as exc:
                raise FailedToEvaluateExpressionsError(resolved.name, exc) from exc
            self._resolved = ResolvedApp(resolved.name, evaluated)
        return self._resolved
