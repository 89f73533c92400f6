"""
Host architecture detection and mapping to dotnet-install.sh names.
"""

import logging
import platform
from typing import Optional

from .process import CommandRunner

# dpkg architecture -> dotnet-install.sh --architecture
ARCHITECTURE_MAP = {
    "amd64": "x64",
    "arm64": "arm64",
    "armhf": "arm",
}

# platform.machine() -> dpkg architecture, for hosts without dpkg
MACHINE_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armhf",
    "armv6l": "armhf",
}


def map_architecture(arch: str) -> Optional[str]:
    """
    Map a dpkg architecture to the installer's naming.

    Returns None, after logging a diagnostic, for anything unrecognised.
    """
    mapped = ARCHITECTURE_MAP.get((arch or "").strip())
    if mapped is None:
        logging.getLogger(__name__).error(f"Unsupported architecture: {arch}")
    return mapped


async def detect_architecture(runner: CommandRunner) -> str:
    """Return the host architecture in dpkg naming."""
    if runner.which("dpkg"):
        result = await runner.run("dpkg", "--print-architecture")
        if result.ok and result.stdout.strip():
            return result.stdout.strip()

    machine = platform.machine().lower()
    return MACHINE_ALIASES.get(machine, machine)
