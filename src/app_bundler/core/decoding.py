"""Classify configuration decode failures and render them for humans.

Classification and rendering are deliberately separate:
:func:`classify_decode_error` turns a raw decoder exception into a
structured :class:`DecodeFailure`; :func:`render_decode_failure` is a
pure formatter over that structure.  The exception classes in
:mod:`app_bundler.exceptions` only ever see the structured form.
"""

from __future__ import annotations

import enum
import json
import tomllib
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError


class DecodeFailureKind(enum.Enum):
    MISSING_FIELD = "missing_field"
    MISSING_BUNDLE_IDENTIFIER = "missing_bundle_identifier"
    INVALID_VALUE = "invalid_value"
    SYNTAX = "syntax"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """Structured reason a configuration document failed to decode."""

    kind: DecodeFailureKind
    path: tuple[str, ...] = ()
    """Key path of the offending value, outermost first."""

    detail: str = ""
    """Decoder-provided explanation (syntax and invalid-value failures)."""

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)

    def describe(self) -> str:
        return render_decode_failure(self)


def classify_decode_error(
    error: BaseException,
    *,
    identifier_fields: Sequence[str] = (),
    document: Any = None,
) -> DecodeFailure:
    """Work out what went wrong while decoding a configuration document.

    Parameters
    ----------
    error:
        The exception raised by the TOML/JSON parser or by pydantic.
    identifier_fields:
        Field names whose absence gets the dedicated
        :attr:`DecodeFailureKind.MISSING_BUNDLE_IDENTIFIER` kind instead
        of a generic missing-field report.
    document:
        The decoded input that failed validation.  When given, the
        reported path keeps only the keys that exist in it, dropping
        the union-member and validator tags pydantic adds to ``loc``.
    """
    if isinstance(error, ValidationError):
        issues = error.errors()
        if not issues:
            return DecodeFailure(DecodeFailureKind.UNKNOWN)
        first = issues[0]
        missing = first.get("type") == "missing"
        location = tuple(first.get("loc", ()))
        if document is not None:
            location = _trim_location(location, document, keep_next=missing)
        path = tuple(str(part) for part in location)
        if missing:
            if path and path[-1] in identifier_fields:
                return DecodeFailure(DecodeFailureKind.MISSING_BUNDLE_IDENTIFIER, path)
            return DecodeFailure(DecodeFailureKind.MISSING_FIELD, path)
        return DecodeFailure(
            DecodeFailureKind.INVALID_VALUE,
            path,
            str(first.get("msg", "")),
        )
    if isinstance(error, (tomllib.TOMLDecodeError, json.JSONDecodeError)):
        return DecodeFailure(DecodeFailureKind.SYNTAX, detail=str(error))
    return DecodeFailure(DecodeFailureKind.UNKNOWN, detail=str(error))


def _trim_location(
    location: tuple[Any, ...],
    document: Any,
    *,
    keep_next: bool,
) -> tuple[Any, ...]:
    """Longest prefix of *location* that indexes into *document*.

    With *keep_next* the first unresolved part is kept too: it names
    the key that is missing.
    """
    node = document
    for depth, part in enumerate(location):
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
            node = node[part]
        else:
            return location[: depth + 1] if keep_next else location[:depth]
    return location


def render_decode_failure(failure: DecodeFailure) -> str:
    """Render *failure* as the human-readable tail of an error message."""
    kind = failure.kind
    if kind is DecodeFailureKind.MISSING_FIELD:
        return f"Expected a value at '{failure.dotted_path}'"
    if kind is DecodeFailureKind.MISSING_BUNDLE_IDENTIFIER:
        field = failure.path[-1] if failure.path else "bundle_identifier"
        return f"'{field}' is required for app configuration to be migrated"
    if kind is DecodeFailureKind.INVALID_VALUE:
        return f"Invalid value at '{failure.dotted_path}': {failure.detail}"
    if kind is DecodeFailureKind.SYNTAX:
        return f"Invalid syntax: {failure.detail}"
    if kind is DecodeFailureKind.UNKNOWN:
        return "Unknown cause"
    raise AssertionError(f"unhandled decode failure kind: {kind!r}")
