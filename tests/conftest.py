"""
Shared fixtures: a scripted host that stands in for apt, dpkg, bash and dotnet.
"""

import asyncio
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from config.settings import Settings
from dotnet_setup.core.process import CommandRunner
from dotnet_setup.errors import DownloadError
from dotnet_setup.integrations.installer_client import INSTALLER_FILENAME, InstallerClient
from dotnet_setup.models.task import CommandResult


SYSTEM_DOTNET_DIR = "/usr/share/dotnet"


class FakeHost(CommandRunner):
    """
    Answers commands from in-memory machine state instead of spawning processes.

    Installed SDKs live in a directory -> version table and 'dotnet' is
    resolved against the runner's PATH exactly as a real host would, so a
    pre-installed SDK in SYSTEM_DOTNET_DIR can shadow or be shadowed by the
    one dotnet-install.sh writes.
    """

    def __init__(self,
                 dotnet_version: Optional[str] = None,
                 tools=(),
                 arch: str = "amd64",
                 has_apt: bool = True,
                 install_version: str = "8.0.404"):
        super().__init__(env={"PATH": os.pathsep.join([SYSTEM_DOTNET_DIR, "/usr/bin"])})
        self.binaries: Dict[str, str] = {}
        if dotnet_version:
            self.binaries[SYSTEM_DOTNET_DIR] = dotnet_version
        self.install_version = install_version
        self.tools = set(tools)
        self.arch = arch
        self.has_apt = has_apt
        self.failures: Dict[Tuple[str, ...], int] = {}
        self.calls: List[List[str]] = []
        self.executables: List[str] = []

    def fail(self, *prefix: str, returncode: int = 1) -> None:
        self.failures[prefix] = returncode

    def called(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[:len(prefix)]) == prefix]

    def index(self, *prefix: str) -> int:
        for i, call in enumerate(self.calls):
            if tuple(call[:len(prefix)]) == prefix:
                return i
        raise AssertionError(f"{prefix} was never called")

    def which(self, name: str, path=None) -> Optional[str]:
        search = str(path) if path is not None else self.env.get("PATH", "")
        for directory in search.split(os.pathsep):
            if name == "dotnet" and directory in self.binaries:
                return f"{directory}/dotnet"
            if name in ("apt-get", "dpkg") and self.has_apt and directory == "/usr/bin":
                return f"/usr/bin/{name}"
        return None

    def _resolve_dotnet(self, program: str) -> Optional[str]:
        if "/" not in program:
            return self.which(program)
        directory = os.path.dirname(program)
        return program if directory in self.binaries else None

    async def run(self, *args, cwd=None, extra_env=None) -> CommandResult:
        cmd = [str(a) for a in args]
        executable = None
        if os.path.basename(cmd[0]) == "dotnet":
            executable = self._resolve_dotnet(cmd[0])
            cmd[0] = "dotnet"
        self.calls.append(cmd)
        await asyncio.sleep(0)
        if cmd[0] == "dotnet":
            if executable is None:
                return CommandResult(args=cmd, returncode=127, stderr="dotnet: command not found")
            self.executables.append(executable)
        for prefix, code in self.failures.items():
            if tuple(cmd[:len(prefix)]) == prefix:
                return CommandResult(args=cmd, returncode=code, stderr="boom")
        return CommandResult(args=cmd, returncode=0, stdout=self._respond(cmd, executable))

    def _respond(self, cmd: List[str], executable: Optional[str]) -> str:
        if cmd[:2] == ["dpkg", "--print-architecture"]:
            return self.arch + "\n"
        if cmd[0] == "bash":
            install_dir = cmd[cmd.index("--install-dir") + 1]
            self.binaries[install_dir] = self.install_version
            return "dotnet-install: Installation finished successfully.\n"
        if cmd[:2] == ["dotnet", "--version"]:
            return f"{self.binaries[os.path.dirname(executable)]}\n"
        if cmd[:4] == ["dotnet", "tool", "list", "-g"]:
            lines = ["Package Id      Version      Commands", "-" * 40]
            lines += [f"{t:<15} 8.0.0        {t}" for t in sorted(self.tools)]
            return "\n".join(lines) + "\n"
        if cmd[:4] == ["dotnet", "tool", "install", "--global"]:
            self.tools.add(cmd[4])
            return f"Tool '{cmd[4]}' was successfully installed.\n"
        return ""


class FakeInstallerClient(InstallerClient):
    """Writes a stub installer instead of downloading one."""

    def __init__(self, error: Optional[str] = None):
        super().__init__("https://example.invalid/dotnet-install.sh")
        self.error = error
        self.target_dirs: List[Path] = []

    def download(self, target_dir: Path) -> Path:
        self.target_dirs.append(Path(target_dir))
        if self.error:
            raise DownloadError(self.error)
        script = Path(target_dir) / INSTALLER_FILENAME
        script.write_text("#!/usr/bin/env bash\necho installing\n")
        script.chmod(0o755)
        return script


@pytest.fixture
def home(tmp_path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def app_dir(tmp_path) -> Path:
    path = tmp_path / "app"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(home, app_dir):
    def _make(**overrides) -> Settings:
        data = {
            "dotnet": {"install_dir": str(home / ".dotnet"), "tools_dir": str(home / ".dotnet" / "tools")},
            "apt": {"use_sudo": False},
            "project": {"app_dir": str(app_dir)},
            "artifacts": {"enabled": False},
            "shell_profile": str(home / ".bashrc"),
        }
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return Settings(**data)
    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def installer_client() -> FakeInstallerClient:
    return FakeInstallerClient()
