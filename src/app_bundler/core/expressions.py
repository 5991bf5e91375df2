"""``$(NAME)`` variable expressions inside app configuration values.

Only ``product``, ``version``, ``identifier`` and the strings inside
``plist`` values, at any depth, are evaluated.  Variables come from two
places: explicit overrides (``--var NAME=VALUE``) and lazily computed
built-ins such as ``COMMIT_HASH``.  Each built-in is computed at most
once per :class:`VariableContext`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping

from app_bundler.core.configuration import AppConfiguration, PlistValue
from app_bundler.exceptions import UnknownVariableError

_EXPRESSION = re.compile(r"\$\(([A-Za-z_][A-Za-z0-9_]*)\)")


class VariableContext:
    """Source of variable values for expression evaluation.

    Parameters
    ----------
    providers:
        Built-in variables, computed on first use.  A provider signals
        failure by raising
        :class:`~app_bundler.exceptions.VariableEvaluationError`.
    overrides:
        Fixed values; these win over providers of the same name.
    """

    def __init__(
        self,
        providers: Mapping[str, Callable[[], str]] | None = None,
        overrides: Mapping[str, str] | None = None,
    ) -> None:
        self._providers = dict(providers or {})
        self._values: dict[str, str] = dict(overrides or {})

    def value(self, name: str) -> str:
        if name in self._values:
            return self._values[name]
        provider = self._providers.get(name)
        if provider is None:
            raise UnknownVariableError(name)
        computed = provider()
        self._values[name] = computed
        return computed


def evaluate_string(text: str, context: VariableContext) -> str:
    """Substitute every ``$(NAME)`` in *text*."""
    return _EXPRESSION.sub(lambda match: context.value(match.group(1)), text)


def evaluate_value(value: PlistValue, context: VariableContext) -> PlistValue:
    """Substitute expressions in every string nested inside *value*."""
    if isinstance(value, str):
        return evaluate_string(value, context)
    if isinstance(value, list):
        return [evaluate_value(item, context) for item in value]
    if isinstance(value, dict):
        return {key: evaluate_value(item, context) for key, item in value.items()}
    return value


def evaluate_app(app: AppConfiguration, context: VariableContext) -> AppConfiguration:
    """Return a copy of *app* with all expressions substituted.

    Raises
    ------
    AppConfigurationError
        When a variable is unknown or cannot be computed.
    """
    plist = {key: evaluate_value(value, context) for key, value in app.plist.items()}
    return app.model_copy(
        update={
            "product": evaluate_string(app.product, context),
            "version": evaluate_string(app.version, context),
            "identifier": evaluate_string(app.identifier, context),
            "plist": plist,
        },
    )
