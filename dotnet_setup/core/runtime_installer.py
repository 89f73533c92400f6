"""
Runs dotnet-install.sh for the pinned channel.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from ..errors import RuntimeNotFoundError, RuntimeVersionError, UnsupportedArchitectureError
from ..models.installation import RuntimeStatus, StepResult
from .architecture import map_architecture
from .process import CommandRunner
from .version_check import query_version


class RuntimeInstaller:
    """Installs the .NET SDK from a downloaded installer script."""

    def __init__(self, runner: CommandRunner, channel: str, install_dir: Path, target: Optional[str] = None):
        """
        Initialize the installer.

        Args:
            runner: Command runner
            channel: Channel passed to --channel (e.g. "8.0")
            install_dir: Target of --install-dir
            target: major.minor the installed CLI must report (defaults to channel)
        """
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.channel = channel
        self.install_dir = Path(install_dir)
        self.target = target or channel

    def resolve_architecture(self, host_arch: str) -> str:
        """Map the host architecture, raising for anything the installer cannot target."""
        arch = map_architecture(host_arch)
        if arch is None:
            raise UnsupportedArchitectureError(f"Unsupported architecture: {host_arch}")
        return arch

    async def install(self, script_path: Path, host_arch: str) -> StepResult:
        """Run the installer script."""
        step = "runtime_install"
        try:
            arch = self.resolve_architecture(host_arch)
        except UnsupportedArchitectureError as e:
            return StepResult.fatal(step, str(e))

        self.logger.info(f"Installing .NET {self.channel} into {self.install_dir} ({arch})...")
        start = time.monotonic()
        result = await self.runner.run(
            "bash", str(script_path),
            "--channel", self.channel,
            "--install-dir", str(self.install_dir),
            "--architecture", arch,
            "--verbose",
            cwd=Path(script_path).parent
        )
        duration = time.monotonic() - start

        if not result.ok:
            self.logger.error(f"dotnet-install.sh failed with exit code {result.returncode}")
            return StepResult.fatal(
                step,
                f"dotnet-install.sh failed with exit code {result.returncode}",
                output=result.output,
                duration_seconds=duration
            )

        return StepResult.ok(step, f".NET {self.channel} installed", duration_seconds=duration)

    async def verify(self) -> str:
        """
        Confirm the CLI inside install_dir runs and reports the pinned version.

        The install directory's own binary is queried, never the one PATH resolves.

        Raises:
            RuntimeNotFoundError: if dotnet is missing from install_dir or does not run
            RuntimeVersionError: if its major.minor differs from the target
        """
        executable = self.runner.which("dotnet", path=self.install_dir)
        if not executable:
            raise RuntimeNotFoundError(f".NET command not found in {self.install_dir} after installation")

        version = await query_version(self.runner, executable)
        if not version:
            raise RuntimeNotFoundError(f"{executable} --version failed after installation")

        status = RuntimeStatus(present=True, version=version, target=self.target, executable=executable)
        if not status.matches_target:
            raise RuntimeVersionError(
                f"{executable} reports .NET {version}, expected {self.target}"
            )

        self.logger.info(f".NET {version} installed successfully")
        return version
