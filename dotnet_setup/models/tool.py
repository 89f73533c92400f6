"""
Global tool models.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ToolStatus(str, Enum):
    """Status of a .NET global tool."""
    PENDING = "pending"
    ALREADY_INSTALLED = "already_installed"
    INSTALLED = "installed"
    FAILED = "failed"


class GlobalTool(BaseModel):
    """A .NET global tool tracked by the installer."""
    name: str = Field(..., description="NuGet package id of the tool")
    status: ToolStatus = Field(default=ToolStatus.PENDING, description="Current status")
    error_message: Optional[str] = Field(None, description="Error message if failed")

    def update_status(self, status: ToolStatus, error: Optional[str] = None) -> None:
        """Update tool status."""
        self.status = status
        if error:
            self.error_message = error

    class Config:
        json_schema_extra = {
            "example": {
                "name": "dotnet-ef",
                "status": "already_installed"
            }
        }
