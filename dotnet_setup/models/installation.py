"""
Step and run result models.
"""

from enum import Enum
from typing import Optional, Dict, List
from datetime import datetime
from pydantic import BaseModel, Field

from .tool import GlobalTool


class Severity(str, Enum):
    """Outcome of a setup step."""
    SUCCESS = "success"
    WARNING = "warning"
    FATAL = "fatal"


class StepResult(BaseModel):
    """Result of a single setup step."""
    step: str = Field(..., description="Step name")
    severity: Severity = Field(..., description="Step outcome")
    message: Optional[str] = Field(None, description="Human readable outcome")
    output: Optional[str] = Field(None, description="Captured command output")
    duration_seconds: Optional[float] = Field(None, description="Step duration")

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL

    @classmethod
    def ok(cls, step: str, message: Optional[str] = None, **kwargs) -> "StepResult":
        return cls(step=step, severity=Severity.SUCCESS, message=message, **kwargs)

    @classmethod
    def warning(cls, step: str, message: str, **kwargs) -> "StepResult":
        return cls(step=step, severity=Severity.WARNING, message=message, **kwargs)

    @classmethod
    def fatal(cls, step: str, message: str, **kwargs) -> "StepResult":
        return cls(step=step, severity=Severity.FATAL, message=message, **kwargs)

    class Config:
        json_schema_extra = {
            "example": {
                "step": "system_dependencies",
                "severity": "warning",
                "message": "Some packages may have failed to install, continuing",
                "duration_seconds": 12.4
            }
        }


class RuntimeStatus(BaseModel):
    """Installed .NET SDK state as reported by 'dotnet --version'."""
    present: bool = Field(..., description="Whether a working dotnet CLI was found")
    version: Optional[str] = Field(None, description="Full reported version")
    target: str = Field(..., description="Pinned major.minor version")
    executable: Optional[str] = Field(None, description="Path of the CLI that reported the version")

    @property
    def major_minor(self) -> Optional[str]:
        if not self.version:
            return None
        return ".".join(self.version.split(".")[:2])

    @property
    def matches_target(self) -> bool:
        return self.present and self.major_minor == self.target


class SetupReport(BaseModel):
    """Complete result of one setup run."""
    target_version: str = Field(..., description="Pinned .NET version")
    success: bool = Field(default=False, description="True when no step was fatal")
    fast_path: bool = Field(default=False, description="Runtime was already installed")
    installed_version: Optional[str] = None

    steps: List[StepResult] = Field(default_factory=list)
    tools: List[GlobalTool] = Field(default_factory=list)

    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    artifacts: Dict[str, str] = Field(
        default_factory=dict,
        description="Paths to persisted run artifacts"
    )

    def add(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    @property
    def warnings(self) -> List[StepResult]:
        return [s for s in self.steps if s.severity == Severity.WARNING]

    @property
    def fatal(self) -> Optional[StepResult]:
        for step in self.steps:
            if step.is_fatal:
                return step
        return None

    def complete(self) -> None:
        """Mark the run as complete."""
        self.success = self.fatal is None
        self.completed_at = datetime.utcnow()
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
