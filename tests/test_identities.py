"""Tests for infra/identities.py and infra/variables.py.

``security`` and ``git`` are never run; ``subprocess.run`` is patched
in the module under test.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from app_bundler.exceptions import IdentityListingError, ToolNotFoundError, VariableEvaluationError
from app_bundler.infra.identities import CodesigningIdentity, list_identities, parse_identities
from app_bundler.infra.variables import commit_hash, default_providers

FINGERPRINT = "0123456789abcdef0123456789abcdef01234567"

SECURITY_OUTPUT = f"""\
  1) {FINGERPRINT} "Apple Development: Jane Doe (ABCDE12345)"
  2) FEDCBA9876543210FEDCBA9876543210FEDCBA98 "Developer ID Application: Example Ltd"
     2 valid identities found
"""


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestParseIdentities:
    def test_parses_each_identity(self) -> None:
        identities = parse_identities(SECURITY_OUTPUT)
        assert identities == [
            CodesigningIdentity(FINGERPRINT.upper(), "Apple Development: Jane Doe (ABCDE12345)"),
            CodesigningIdentity(
                "FEDCBA9876543210FEDCBA9876543210FEDCBA98",
                "Developer ID Application: Example Ltd",
            ),
        ]

    def test_no_identities(self) -> None:
        assert parse_identities("     0 valid identities found\n") == []


class TestListIdentities:
    @patch("app_bundler.infra.identities.subprocess.run")
    def test_success(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(stdout=SECURITY_OUTPUT)
        identities = list_identities()
        assert len(identities) == 2
        assert mock_run.call_args.args[0] == ["security", "find-identity", "-p", "codesigning", "-v"]

    @patch("app_bundler.infra.identities.subprocess.run", side_effect=FileNotFoundError("security"))
    def test_security_missing(self, _mock_run: MagicMock) -> None:
        with pytest.raises(ToolNotFoundError):
            list_identities()

    @patch("app_bundler.infra.identities.subprocess.run")
    def test_nonzero_exit(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(1, stderr="keychain locked")
        with pytest.raises(IdentityListingError) as exc_info:
            list_identities()
        assert exc_info.value.hint == "keychain locked"


class TestCommitHash:
    @patch("app_bundler.infra.variables.subprocess.run")
    def test_returns_head(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = _completed(stdout="abc123\n")
        assert commit_hash(tmp_path) == "abc123"
        assert mock_run.call_args.kwargs["cwd"] == tmp_path

    @patch("app_bundler.infra.variables.subprocess.run")
    def test_not_a_repository(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = _completed(128, stderr="fatal: not a git repository")
        with pytest.raises(VariableEvaluationError) as exc_info:
            commit_hash(tmp_path)
        assert exc_info.value.name == "COMMIT_HASH"

    @patch("app_bundler.infra.variables.subprocess.run", side_effect=FileNotFoundError("git"))
    def test_git_missing(self, _mock_run: MagicMock, tmp_path: Path) -> None:
        with pytest.raises(VariableEvaluationError):
            commit_hash(tmp_path)

    @patch("app_bundler.infra.variables.subprocess.run")
    def test_provider_is_lazy(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = _completed(stdout="def456\n")
        providers = default_providers(tmp_path)
        mock_run.assert_not_called()
        assert providers["COMMIT_HASH"]() == "def456"
