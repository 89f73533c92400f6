"""
Tests for the subprocess runner and installer client, using real processes and file:// URLs.
"""

import asyncio
import sys

import pytest

from dotnet_setup.core.process import CommandRunner
from dotnet_setup.errors import CommandError, DownloadError
from dotnet_setup.integrations.installer_client import InstallerClient


@pytest.mark.asyncio
async def test_run_captures_output():
    runner = CommandRunner()
    result = await runner.run(sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)")
    assert result.ok
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"


@pytest.mark.asyncio
async def test_run_uses_runner_environment():
    runner = CommandRunner()
    runner.export({"DOTNET_NOLOGO": "1"})
    result = await runner.run(sys.executable, "-c", "import os; print(os.environ['DOTNET_NOLOGO'])")
    assert result.stdout.strip() == "1"


@pytest.mark.asyncio
async def test_missing_executable_reports_127():
    result = await CommandRunner().run("definitely-not-a-real-command-xyz")
    assert result.returncode == 127
    assert not result.ok


@pytest.mark.asyncio
async def test_timeout_terminates_process():
    runner = CommandRunner(timeout=0.2)
    result = await runner.run(sys.executable, "-c", "import time; time.sleep(10)")
    assert result.timed_out
    assert not result.ok


@pytest.mark.asyncio
async def test_run_checked_raises():
    with pytest.raises(CommandError) as excinfo:
        await CommandRunner().run_checked(sys.executable, "-c", "raise SystemExit(3)")
    assert excinfo.value.result.returncode == 3


class _ExitedAfterTimeout:
    """A child that finishes between the timeout firing and terminate()."""

    returncode = None

    async def communicate(self):
        await asyncio.sleep(10)

    def terminate(self):
        raise ProcessLookupError()

    async def wait(self):
        self.returncode = 0
        return self.returncode


@pytest.mark.asyncio
async def test_timeout_tolerates_process_already_gone(monkeypatch):
    async def fake_exec(*args, **kwargs):
        return _ExitedAfterTimeout()

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

    result = await CommandRunner(timeout=0.05).run("dotnet", "--version")

    assert result.timed_out
    assert result.returncode == 0
    assert "Timed out" in result.stderr


def test_export_prepends_path_once():
    runner = CommandRunner(env={"PATH": "/usr/bin:/bin"})
    runner.export({}, ["/opt/dotnet", "/usr/bin"])
    runner.export({}, ["/opt/dotnet"])
    assert runner.env["PATH"] == "/opt/dotnet:/usr/bin:/bin"


def test_exported_directory_shadows_earlier_path_entry(tmp_path):
    system_bin, install_dir = tmp_path / "system", tmp_path / "install"
    for directory in (system_bin, install_dir):
        directory.mkdir()
        tool = directory / "dotnet"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)

    runner = CommandRunner(env={"PATH": str(system_bin)})
    assert runner.which("dotnet") == str(system_bin / "dotnet")

    runner.export({}, [install_dir])
    assert runner.which("dotnet") == str(install_dir / "dotnet")
    assert runner.which("dotnet", path=system_bin) == str(system_bin / "dotnet")


def test_which_uses_runner_path(tmp_path):
    tool = tmp_path / "dotnet"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o755)
    runner = CommandRunner(env={"PATH": "/nonexistent"})
    assert runner.which("dotnet") is None
    runner.export({}, [tmp_path])
    assert runner.which("dotnet") == str(tool)


class TestInstallerClient:

    def test_download_from_file_url(self, tmp_path):
        source = tmp_path / "source.sh"
        source.write_text("#!/usr/bin/env bash\necho hi\n")
        target = tmp_path / "target"
        target.mkdir()

        script = InstallerClient(source.as_uri()).download(target)

        assert script == target / "dotnet-install.sh"
        assert script.read_text() == source.read_text()
        assert script.stat().st_mode & 0o111

    def test_missing_source_raises(self, tmp_path):
        client = InstallerClient((tmp_path / "missing.sh").as_uri())
        with pytest.raises(DownloadError):
            client.download(tmp_path)

    def test_empty_body_raises(self, tmp_path):
        source = tmp_path / "empty.sh"
        source.write_text("")
        with pytest.raises(DownloadError):
            InstallerClient(source.as_uri()).download(tmp_path)

    @pytest.mark.asyncio
    async def test_download_async(self, tmp_path):
        source = tmp_path / "source.sh"
        source.write_text("echo hi\n")
        target = tmp_path / "out"
        target.mkdir()

        script = await InstallerClient(source.as_uri()).download_async(target)

        assert script.exists()
