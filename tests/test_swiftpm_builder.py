"""Tests for infra/swiftpm_builder.py and infra/process.py.

``swift`` and ``xcrun`` are never executed; ``run_process`` is patched
in the builder module.  The process helper itself is exercised against
the running Python interpreter.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from app_bundler.core.models import BuildRequest
from app_bundler.core.platform import BuildArchitecture, Platform
from app_bundler.core.validation import BuildConfiguration
from app_bundler.exceptions import BuildFailedError, ToolNotFoundError
from app_bundler.infra.process import ProcessResult, run_process
from app_bundler.infra.swiftpm_builder import SwiftPackageManagerBuilder, target_triple

_RUN_PROCESS = "app_bundler.infra.swiftpm_builder.run_process"

ARM64 = BuildArchitecture.ARM64
X86_64 = BuildArchitecture.X86_64


def _make_request(**overrides: object) -> BuildRequest:
    defaults: dict[str, object] = {
        "product": "HelloWorld",
        "package_directory": Path("/pkg"),
        "configuration": BuildConfiguration.DEBUG,
        "architectures": (ARM64,),
        "platform": Platform.macos("11"),
    }
    defaults.update(overrides)
    return BuildRequest(**defaults)  # type: ignore[arg-type]


def _result(returncode: int = 0, stdout: str = "", stderr: str = "") -> ProcessResult:
    return ProcessResult(args=("swift",), returncode=returncode, stdout=stdout, stderr=stderr)


class TestTargetTriple:
    def test_macos(self) -> None:
        assert target_triple(_make_request()) == "arm64-apple-macosx11"

    def test_ios(self) -> None:
        request = _make_request(platform=Platform.ios("16.0"))
        assert target_triple(request) == "arm64-apple-ios16.0"

    def test_simulator_without_version(self) -> None:
        request = _make_request(platform=Platform.ios_simulator("16.0"), architectures=(X86_64,))
        assert target_triple(request, with_version=False) == "x86_64-apple-ios-simulator"


class TestProductsDirectory:
    def test_single_architecture(self) -> None:
        builder = SwiftPackageManagerBuilder()
        assert builder.products_directory(_make_request()) == Path(
            "/pkg/.build/arm64-apple-macosx/debug",
        )

    def test_universal_release(self) -> None:
        request = _make_request(
            architectures=(ARM64, X86_64),
            configuration=BuildConfiguration.RELEASE,
        )
        assert SwiftPackageManagerBuilder().products_directory(request) == Path(
            "/pkg/.build/apple/Products/Release",
        )


class TestBuildCommand:
    def test_macos_passes_each_arch(self) -> None:
        request = _make_request(architectures=(ARM64, X86_64))
        argv = asyncio.run(SwiftPackageManagerBuilder().build_command(request))
        assert argv == [
            "swift", "build", "-c", "debug", "--product", "HelloWorld",
            "--arch", "arm64", "--arch", "x86_64",
        ]

    def test_ios_uses_sdk_from_xcrun(self) -> None:
        request = _make_request(platform=Platform.ios("16.0"))
        sdk = "/Applications/Xcode.app/SDKs/iPhoneOS.sdk"
        with patch(_RUN_PROCESS, new=AsyncMock(return_value=_result(stdout=sdk + "\n"))) as mock_run:
            argv = asyncio.run(SwiftPackageManagerBuilder().build_command(request))
        mock_run.assert_awaited_once_with(["xcrun", "--sdk", "iphoneos", "--show-sdk-path"])
        assert sdk in argv
        assert "arm64-apple-ios16.0" in argv

    def test_missing_sdk(self) -> None:
        request = _make_request(platform=Platform.ios_simulator("16.0"))
        with patch(_RUN_PROCESS, new=AsyncMock(return_value=_result(1, stderr="bad sdk"))):
            with pytest.raises(BuildFailedError, match="iphonesimulator"):
                asyncio.run(SwiftPackageManagerBuilder().build_command(request))


class TestBuild:
    def test_success_runs_in_package_directory(self) -> None:
        with patch(_RUN_PROCESS, new=AsyncMock(return_value=_result())) as mock_run:
            asyncio.run(SwiftPackageManagerBuilder().build(_make_request()))
        assert mock_run.call_args.kwargs["cwd"] == Path("/pkg")

    def test_nonzero_exit(self) -> None:
        failing = AsyncMock(return_value=_result(1, stderr="error: no such module 'Foo'"))
        with patch(_RUN_PROCESS, new=failing):
            with pytest.raises(BuildFailedError) as exc_info:
                asyncio.run(SwiftPackageManagerBuilder().build(_make_request()))
        assert "HelloWorld" in str(exc_info.value)
        assert exc_info.value.hint == "error: no such module 'Foo'"

    def test_swift_missing(self) -> None:
        with patch(_RUN_PROCESS, new=AsyncMock(side_effect=FileNotFoundError("swift"))):
            with pytest.raises(ToolNotFoundError):
                asyncio.run(SwiftPackageManagerBuilder().build(_make_request()))

    def test_other_os_error(self) -> None:
        with patch(_RUN_PROCESS, new=AsyncMock(side_effect=PermissionError("denied"))):
            with pytest.raises(BuildFailedError):
                asyncio.run(SwiftPackageManagerBuilder().build(_make_request()))


class TestRunProcess:
    def test_captures_output(self) -> None:
        result = asyncio.run(run_process([sys.executable, "-c", "print('hello')"]))
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_nonzero_exit(self) -> None:
        code = "import sys; sys.stderr.write('bad\\n'); sys.exit(3)"
        result = asyncio.run(run_process([sys.executable, "-c", code]))
        assert result.returncode == 3
        assert result.failure_summary() == "bad"

    def test_missing_executable(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            asyncio.run(run_process([tmp_path / "does-not-exist"]))

    def test_failure_summary_keeps_last_lines(self) -> None:
        result = ProcessResult(("x",), 1, "", "\n".join(str(n) for n in range(30)))
        assert result.failure_summary(max_lines=2) == "28\n29"
