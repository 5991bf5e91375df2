"""Tests for tool detection (infra/tool_detector.py).

All tests mock :func:`shutil.which` — no system dependency.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from app_bundler.infra.tool_detector import (
    ToolStatus,
    detect_tool,
    install_commands_for,
)


# ---------------------------------------------------------------------------
# detect_tool
# ---------------------------------------------------------------------------

class TestDetectTool:
    @patch("app_bundler.infra.tool_detector.shutil.which")
    def test_found(self, mock_which: MagicMock) -> None:
        mock_which.return_value = "/usr/bin/swift"
        status = detect_tool("swift")

        assert status.found is True
        assert status.name == "swift"
        assert isinstance(status.path, Path)
        assert status.install_commands == ()
        mock_which.assert_called_once_with("swift")

    @patch("app_bundler.infra.tool_detector.shutil.which", return_value=None)
    def test_not_found(self, _mock_which: MagicMock) -> None:
        status = detect_tool("swift")

        assert status.found is False
        assert status.path is None
        assert len(status.install_commands) > 0


# ---------------------------------------------------------------------------
# Platform install commands
# ---------------------------------------------------------------------------

class TestInstallCommands:
    @patch("app_bundler.infra.tool_detector.platform.system", return_value="Darwin")
    def test_darwin_uses_command_line_tools(self, _mock_sys: MagicMock) -> None:
        assert install_commands_for("swift") == ("xcode-select --install",)
        assert "brew install git" in install_commands_for("git")

    @patch("app_bundler.infra.tool_detector.platform.system", return_value="Linux")
    def test_linux_commands(self, _mock_sys: MagicMock) -> None:
        assert any("swift.org" in c for c in install_commands_for("swift"))
        assert any("apt" in c for c in install_commands_for("git"))
        assert install_commands_for("codesign") == ("codesign is only available on macOS",)


# ---------------------------------------------------------------------------
# ToolStatus dataclass
# ---------------------------------------------------------------------------

class TestToolStatus:
    def test_frozen(self) -> None:
        status = ToolStatus(name="git", found=True, path=Path("/usr/bin/git"), install_commands=())
        with pytest.raises(AttributeError):
            status.found = False  # type: ignore[misc]
