"""
Tests for installed SDK detection.
"""

import pytest

from dotnet_setup.core.version_check import check_runtime, parse_version

from conftest import SYSTEM_DOTNET_DIR, FakeHost


@pytest.mark.parametrize("output,expected", [
    ("8.0.404\n", "8.0.404"),
    ("9.0.100-preview.7.24407.12\n", "9.0.100-preview.7.24407.12"),
    ("The command could not be loaded\n", None),
    ("", None),
])
def test_parse_version(output, expected):
    assert parse_version(output) == expected


@pytest.mark.asyncio
async def test_missing_cli_is_absent():
    host = FakeHost(dotnet_version=None)
    status = await check_runtime(host, "8.0")
    assert not status.present
    assert not status.matches_target
    assert host.calls == []


@pytest.mark.asyncio
async def test_failing_version_command_is_absent():
    host = FakeHost(dotnet_version="8.0.404")
    host.fail("dotnet", "--version", returncode=145)
    status = await check_runtime(host, "8.0")
    assert not status.present


@pytest.mark.asyncio
async def test_matching_major_minor():
    status = await check_runtime(FakeHost(dotnet_version="8.0.404"), "8.0")
    assert status.present
    assert status.major_minor == "8.0"
    assert status.matches_target


@pytest.mark.asyncio
async def test_mismatched_version():
    status = await check_runtime(FakeHost(dotnet_version="6.0.428"), "8.0")
    assert status.present
    assert not status.matches_target


@pytest.mark.asyncio
async def test_install_dir_checked_before_path(tmp_path):
    host = FakeHost(dotnet_version="6.0.428")
    host.binaries[str(tmp_path)] = "8.0.404"

    status = await check_runtime(host, "8.0", tmp_path)

    assert status.matches_target
    assert status.executable == f"{tmp_path}/dotnet"


@pytest.mark.asyncio
async def test_falls_back_to_path_when_install_dir_empty(tmp_path):
    host = FakeHost(dotnet_version="8.0.100")

    status = await check_runtime(host, "8.0", tmp_path)

    assert status.matches_target
    assert status.executable == f"{SYSTEM_DOTNET_DIR}/dotnet"


@pytest.mark.asyncio
async def test_reports_mismatch_when_no_candidate_matches(tmp_path):
    host = FakeHost(dotnet_version="6.0.428")
    host.binaries[str(tmp_path)] = "7.0.100"

    status = await check_runtime(host, "8.0", tmp_path)

    assert status.present
    assert not status.matches_target
    assert status.version == "7.0.100"
    assert len(host.called("dotnet", "--version")) == 2
