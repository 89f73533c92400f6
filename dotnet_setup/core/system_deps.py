"""
Best-effort installation of the OS libraries the .NET runtime links against.
"""

import logging
import os
import time
from typing import List

from ..models.installation import StepResult
from .process import CommandRunner

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

APT_INSTALL_OPTIONS = [
    "-y", "-qq", "--no-install-recommends",
    "-o", "Dpkg::Options::=--force-confdef",
    "-o", "Dpkg::Options::=--force-confold",
]


class SystemDependencyInstaller:
    """Installs apt packages; failures are reported as warnings, never fatal."""

    def __init__(self, runner: CommandRunner, packages: List[str], use_sudo=None):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.packages = list(packages)
        if use_sudo is None:
            use_sudo = hasattr(os, "geteuid") and os.geteuid() != 0
        self.use_sudo = use_sudo

    def _apt(self, *args: str) -> List[str]:
        prefix = ["sudo", "-E"] if self.use_sudo else []
        return prefix + ["apt-get", *args]

    async def install(self) -> StepResult:
        """Update package lists and install the configured packages."""
        step = "system_dependencies"
        start = time.monotonic()
        self.logger.info("Installing system dependencies...")

        if not self.packages:
            return StepResult.ok(step, "No system packages configured")

        if not self.runner.which("apt-get"):
            self.logger.warning("apt-get not found, skipping system dependencies")
            return StepResult.warning(step, "apt-get not available, system dependencies skipped")

        update = await self.runner.run(*self._apt("update", "-qq"), extra_env=APT_ENV)
        if not update.ok:
            self.logger.warning(f"apt-get update failed (exit {update.returncode}), continuing...")

        result = await self.runner.run(
            *self._apt("install", *APT_INSTALL_OPTIONS, *self.packages),
            extra_env=APT_ENV
        )
        duration = time.monotonic() - start

        if not result.ok:
            self.logger.warning("Some packages may have failed to install, continuing...")
            return StepResult.warning(
                step,
                "Some packages may have failed to install, continuing",
                output=result.output,
                duration_seconds=duration
            )

        self.logger.info("System dependencies installation complete")
        return StepResult.ok(step, f"Installed {len(self.packages)} packages", duration_seconds=duration)
