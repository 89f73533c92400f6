"""
Configuration settings for the .NET development environment setup.
"""

from typing import Optional, Dict, List
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings


DEFAULT_APT_PACKAGES = [
    "wget",
    "ca-certificates",
    "apt-transport-https",
    "software-properties-common",
    "libc6",
    "libgcc1",
    "libgssapi-krb5-2",
    "libicu-dev",
    "libssl-dev",
    "libstdc++6",
    "zlib1g",
    "curl",
    "git",
]

DEFAULT_GLOBAL_TOOLS = [
    "dotnet-ef",
    "dotnet-aspnet-codegenerator",
    "dotnet-dev-certs",
]


class DotnetConfig(BaseModel):
    """.NET SDK configuration."""
    version: str = Field(default="8.0", description="Pinned major.minor SDK version")
    channel: str = Field(default="8.0", description="Channel passed to dotnet-install.sh")
    install_dir: Path = Field(
        default_factory=lambda: Path.home() / ".dotnet",
        description="Directory the SDK is installed into"
    )
    tools_dir: Path = Field(
        default_factory=lambda: Path.home() / ".dotnet" / "tools",
        description="Directory global tools are installed into"
    )
    installer_url: str = Field(
        default="https://dot.net/v1/dotnet-install.sh",
        description="URL of the official install script"
    )
    opt_out: Dict[str, str] = Field(
        default_factory=lambda: {
            "DOTNET_CLI_TELEMETRY_OPTOUT": "1",
            "DOTNET_SKIP_FIRST_TIME_EXPERIENCE": "1",
            "DOTNET_NOLOGO": "1",
        },
        description="Telemetry and first-run opt-out variables"
    )

    class Config:
        frozen = True

    @validator('version', 'channel')
    def validate_major_minor(cls, v):
        parts = v.split(".")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Expected a major.minor version, got: {v}")
        return v


class AptConfig(BaseModel):
    """OS package installation configuration."""
    packages: List[str] = Field(default_factory=lambda: list(DEFAULT_APT_PACKAGES))
    use_sudo: Optional[bool] = Field(
        None, description="Prefix apt-get with 'sudo -E'; None means only when not root"
    )

    class Config:
        frozen = True


class ProjectConfig(BaseModel):
    """Local project restore configuration."""
    app_dir: Path = Field(default=Path("/app"), description="Application source directory")
    solution_name: Optional[str] = Field(
        None, description="Solution file preferred over any other *.sln"
    )
    project_extensions: List[str] = Field(
        default_factory=lambda: [".csproj", ".fsproj", ".vbproj"]
    )
    search_depth: int = Field(default=2, description="Directory levels searched for project files")
    ef_marker: str = Field(
        default="Microsoft.EntityFrameworkCore",
        description="Package reference that triggers the EF tools check"
    )
    ef_tool: str = Field(default="dotnet-ef")

    class Config:
        frozen = True


class ArtifactConfig(BaseModel):
    """Run report storage configuration."""
    enabled: bool = Field(default=True, description="Persist a JSON summary of each run")
    base_path: Path = Field(
        default_factory=lambda: Path.home() / ".dotnet-setup",
        description="Base path for run reports"
    )

    class Config:
        frozen = True


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )
    file_path: Optional[Path] = Field(default=None)
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")

    class Config:
        frozen = True


class Settings(BaseSettings):
    """Main application settings."""
    dotnet: DotnetConfig = Field(default_factory=DotnetConfig)
    apt: AptConfig = Field(default_factory=AptConfig)
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    global_tools: List[str] = Field(default_factory=lambda: list(DEFAULT_GLOBAL_TOOLS))
    shell_profile: Path = Field(
        default_factory=lambda: Path.home() / ".bashrc",
        description="Shell startup file receiving export lines"
    )
    command_timeout: Optional[float] = Field(
        None, description="Per-command timeout in seconds; None waits indefinitely"
    )

    class Config:
        env_prefix = "DOTNET_SETUP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"
        frozen = True

    @validator('global_tools')
    def validate_tools_unique(cls, v):
        seen = []
        for tool in v:
            if tool not in seen:
                seen.append(tool)
        return seen
