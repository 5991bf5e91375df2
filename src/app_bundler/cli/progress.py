"""Rich status display driven by pipeline stage transitions.

Bridges :func:`~app_bundler.core.pipeline.run_stages`'
``on_transition`` callback with a Rich :class:`~rich.status.Status`
spinner.  The core only reports state changes; rendering happens here.

Design
------
* :meth:`StageProgress.__call__` is the transition callback.
* Shutdown-safe: transitions after :meth:`stop` are ignored.
* Falls back to one plain line per stage when Rich is missing.
"""

from __future__ import annotations

from typing import Any

from app_bundler.cli.console import console, get_rich_console
from app_bundler.core.pipeline import PipelineState
from app_bundler.exceptions import MissingDependencyError

_STAGE_MESSAGES: dict[PipelineState, str] = {
    PipelineState.BUILDING: "Building",
    PipelineState.BUNDLING: "Bundling",
}


class StageProgress:
    """Transition callback that shows which stage is running.

    Usage::

        with StageProgress(app_name) as progress:
            await service.run(args, on_transition=progress)
    """

    def __init__(self, app_name: str) -> None:
        self._app_name = app_name
        try:
            self._status: Any = get_rich_console().status("", spinner="dots")
        except MissingDependencyError:
            self._status = None
        self._started: bool = False
        self.transitions: list[PipelineState] = []

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> StageProgress:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._started:
            if self._status is not None:
                self._status.start()
            self._started = True

    def stop(self) -> None:
        """Stop the spinner (idempotent)."""
        if self._started:
            if self._status is not None:
                self._status.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Transition callback
    # ------------------------------------------------------------------

    def __call__(self, state: PipelineState, stage: str | None) -> None:
        if not self._started:
            return
        self.transitions.append(state)

        verb = _STAGE_MESSAGES.get(state)
        if verb is None:
            return
        message = f"{verb} '{self._app_name}'…"
        if self._status is not None:
            self._status.update(f"[bold blue]{message}[/bold blue]")
        else:
            console.info(message)
