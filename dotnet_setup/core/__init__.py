"""
Core modules for the .NET development environment setup.
"""

from .orchestrator import SetupOrchestrator
from .process import CommandRunner
from .task_group import TaskGroup
from .artifact_manager import ArtifactManager

__all__ = [
    "SetupOrchestrator",
    "CommandRunner",
    "TaskGroup",
    "ArtifactManager"
]
