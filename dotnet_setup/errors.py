"""
Exceptions raised by setup steps.
"""

from typing import Optional

from .models.task import CommandResult


class SetupError(Exception):
    """Base class for setup failures."""


class CommandError(SetupError):
    """An external command exited unsuccessfully."""

    def __init__(self, result: CommandResult, message: Optional[str] = None):
        self.result = result
        if message is None:
            if result.timed_out:
                message = f"Command timed out: {' '.join(result.args)}"
            else:
                message = (f"Command failed with exit code {result.returncode}: "
                           f"{' '.join(result.args)}")
        super().__init__(message)


class DownloadError(SetupError):
    """The installer script could not be fetched."""


class UnsupportedArchitectureError(SetupError):
    """The host architecture has no dotnet-install.sh equivalent."""


class RuntimeNotFoundError(SetupError):
    """The dotnet CLI is not resolvable after installation."""


class RuntimeVersionError(SetupError):
    """The installed dotnet CLI reports a version other than the pinned one."""
