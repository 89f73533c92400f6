"""
Command and background task result models.
"""

from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of one external command."""
    args: List[str] = Field(..., description="Command line that was executed")
    returncode: int = Field(..., description="Process exit status")
    stdout: str = Field(default="")
    stderr: str = Field(default="")
    timed_out: bool = Field(default=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def output(self) -> str:
        return f"STDOUT:\n{self.stdout}\n\nSTDERR:\n{self.stderr}"


class TaskState(str, Enum):
    """Lifecycle of a launched task."""
    COMPLETED = "completed"
    FAILED = "failed"


class TaskResult(BaseModel):
    """Joined result of a background task."""
    name: str
    state: TaskState
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state == TaskState.COMPLETED
