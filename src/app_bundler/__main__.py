"""Allow ``python -m app_bundler`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m app_bundler`` behaves identically to the ``app-bundler``
console script.
"""

from __future__ import annotations

from app_bundler.cli.app import cli

if __name__ == "__main__":
    cli()
