"""Sequential, short-circuiting stage runner.

A pipeline is an ordered list of named :class:`Stage` objects.  The
runner awaits them one at a time and stops at the first failure, so a
later stage's side effects never happen after an earlier stage fails.
The outcome is a :class:`PipelineReport` that records which stage
failed and with what error; the runner itself never raises for stage
failures.

Cancellation (``asyncio.CancelledError``) and ``KeyboardInterrupt`` are
not stage failures and propagate unchanged.
"""

from __future__ import annotations

import enum
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from types import TracebackType


class PipelineState(enum.Enum):
    NOT_STARTED = "not started"
    BUILDING = "building"
    BUNDLING = "bundling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Stage:
    """One fallible pipeline step."""

    name: str
    run: Callable[[], Awaitable[None]]
    state: PipelineState
    """State the pipeline is in while this stage runs."""


@dataclass(slots=True)
class PipelineReport:
    state: PipelineState = PipelineState.NOT_STARTED
    completed: list[str] = field(default_factory=list)
    failed_stage: str | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.SUCCEEDED


TransitionCallback = Callable[[PipelineState, str | None], None]


async def run_stages(
    stages: Sequence[Stage],
    *,
    on_transition: TransitionCallback | None = None,
) -> PipelineReport:
    """Run *stages* in order, stopping at the first failure."""
    report = PipelineReport()

    def enter(state: PipelineState, stage: str | None) -> None:
        report.state = state
        if on_transition is not None:
            on_transition(state, stage)

    for stage in stages:
        enter(stage.state, stage.name)
        try:
            await stage.run()
        except Exception as exc:
            report.failed_stage = stage.name
            report.error = exc
            enter(PipelineState.FAILED, stage.name)
            return report
        report.completed.append(stage.name)

    enter(PipelineState.SUCCEEDED, None)
    return report


class Stopwatch:
    """Measure the wall-clock duration of a block, even when it raises.

    Usage::

        with Stopwatch() as watch:
            await work()
        print(watch.elapsed)
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._start: float | None = None
        self.elapsed: float = 0.0

    def __enter__(self) -> Stopwatch:
        self._start = self._clock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._start is not None:
            self.elapsed = self._clock() - self._start


def format_elapsed(seconds: float) -> str:
    """Render a duration the way the CLI reports it (``"3.142s"``)."""
    return f"{seconds:.3f}s"
