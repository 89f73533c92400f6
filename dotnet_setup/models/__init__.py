"""
Data models for the .NET development environment setup.
"""

from .tool import GlobalTool, ToolStatus
from .installation import RuntimeStatus, Severity, SetupReport, StepResult
from .task import CommandResult, TaskResult, TaskState

__all__ = [
    "GlobalTool",
    "ToolStatus",
    "RuntimeStatus",
    "Severity",
    "SetupReport",
    "StepResult",
    "CommandResult",
    "TaskResult",
    "TaskState"
]
