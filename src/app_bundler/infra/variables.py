"""Built-in ``$(NAME)`` variables that need the outside world."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

from app_bundler.exceptions import VariableEvaluationError


def commit_hash(package_directory: Path, git: str = "git") -> str:
    """Return the ``HEAD`` commit of the repository containing the package.

    Raises
    ------
    VariableEvaluationError
        When git is missing or the directory is not a repository.
    """
    try:
        completed = subprocess.run(
            [git, "rev-parse", "HEAD"],
            cwd=package_directory,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise VariableEvaluationError("COMMIT_HASH", f"could not run git ({exc})") from exc
    commit = completed.stdout.strip()
    if completed.returncode != 0 or not commit:
        reason = completed.stderr.strip() or "not a git repository"
        raise VariableEvaluationError("COMMIT_HASH", reason)
    return commit


def default_providers(package_directory: Path) -> dict[str, Callable[[], str]]:
    """Built-in variable providers for a package."""
    return {
        "COMMIT_HASH": lambda: commit_hash(package_directory),
    }
