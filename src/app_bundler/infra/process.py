"""Async subprocess helper shared by the build and bundle backends.

Cancelling the awaiting task terminates the child process before the
``CancelledError`` propagates, so Ctrl+C never leaves a compiler or
``codesign`` running in the background.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

_TERMINATE_GRACE_SECONDS: float = 5.0


@dataclass(frozen=True, slots=True)
class ProcessResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def failure_summary(self, max_lines: int = 20) -> str:
        """Last lines of stderr (or stdout when stderr is empty)."""
        text = self.stderr.strip() or self.stdout.strip()
        lines = text.splitlines()[-max_lines:]
        return "\n".join(lines)


async def run_process(
    args: Sequence[str | Path],
    *,
    cwd: Path | None = None,
) -> ProcessResult:
    """Run *args* to completion and capture its output.

    Raises
    ------
    FileNotFoundError
        When the executable does not exist.
    """
    argv = tuple(str(arg) for arg in args)
    process = await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), _TERMINATE_GRACE_SECONDS)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
        raise
    return ProcessResult(
        args=argv,
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
