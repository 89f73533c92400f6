"""
Detection of an already installed .NET SDK.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from ..models.installation import RuntimeStatus
from .process import CommandRunner

VERSION_PATTERN = re.compile(r"^\s*(\d+\.\d+(?:\.\d+)?(?:[-+][\w.\-+]*)?)\s*$", re.MULTILINE)


def parse_version(output: str) -> Optional[str]:
    """Extract the SDK version from 'dotnet --version' output."""
    match = VERSION_PATTERN.search(output or "")
    return match.group(1) if match else None


async def query_version(runner: CommandRunner, executable: str) -> Optional[str]:
    """Run '<executable> --version'; None when it fails or prints no version."""
    logger = logging.getLogger(__name__)

    result = await runner.run(executable, "--version")
    if not result.ok:
        logger.info(f"{executable} --version failed (exit {result.returncode})")
        return None

    version = parse_version(result.stdout)
    if not version:
        logger.warning(f"Could not parse dotnet version from: {result.stdout.strip()!r}")
    return version


async def check_runtime(runner: CommandRunner,
                        target: str,
                        install_dir: Optional[Path] = None) -> RuntimeStatus:
    """
    Query the installed SDK version.

    The CLI inside install_dir is tried before whatever 'dotnet' PATH resolves
    to. A missing CLI, a failing command or unparseable output all mean "absent".
    """
    logger = logging.getLogger(__name__)

    candidates: List[str] = []
    if install_dir is not None:
        local = runner.which("dotnet", path=install_dir)
        if local:
            candidates.append(local)
    on_path = runner.which("dotnet")
    if on_path and on_path not in candidates:
        candidates.append(on_path)

    if not candidates:
        logger.info("dotnet CLI not found")
        return RuntimeStatus(present=False, target=target)

    mismatched: Optional[RuntimeStatus] = None
    for executable in candidates:
        version = await query_version(runner, executable)
        if not version:
            continue
        status = RuntimeStatus(present=True, version=version, target=target, executable=executable)
        if status.matches_target:
            logger.info(f".NET {target} already installed and working ({version} at {executable})")
            return status
        mismatched = mismatched or status

    if mismatched is None:
        logger.info("dotnet CLI did not report a version, treating as not installed")
        return RuntimeStatus(present=False, target=target)

    logger.info(f"Different .NET version found ({mismatched.major_minor}), will install .NET {target}")
    return mismatched
