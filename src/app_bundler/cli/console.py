"""CLI console helpers with optional Rich support.

Every line app-bundler shows the user goes through :data:`console`.
Rich is imported lazily so that bootstrap paths (``--help``,
``--version``) and plain-text fallbacks keep working when Rich is not
installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from app_bundler.exceptions import AppBundlerError, MissingDependencyError

_MARKUP = re.compile(r"\[/?[a-z][a-z ]*\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``MissingDependencyError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise MissingDependencyError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True, highlight=False)


def strip_markup(text: str) -> str:
	"""Drop Rich style tags such as ``[bold red]`` / ``[/bold red]``."""
	return _MARKUP.sub("", text)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except MissingDependencyError:
			print(
				*(strip_markup(obj) if isinstance(obj, str) else obj for obj in objects),
				file=sys.stderr,
			)
			return
		rich_console.print(*objects)

	def info(self, message: str) -> None:
		self.print(f"[bold cyan]info:[/bold cyan] {message}")

	def warning(self, message: str) -> None:
		self.print(f"[yellow]warning:[/yellow] {message}")

	def error(self, error: AppBundlerError) -> None:
		"""Render a known error and its hint, if any."""
		self.print(f"[bold red]Error:[/bold red] {error}")
		if error.hint:
			self.print(f"[yellow]Hint:[/yellow] {error.hint}")


console = _ConsoleProxy()
