"""
NuGet restore of the local application's solution or project.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from ..models.installation import StepResult
from .global_tools import GlobalToolInstaller
from .process import CommandRunner
from .task_group import TaskGroup

RESTORE_TASK = "project_restore"


class ProjectRestorer:
    """Finds the solution or project under the application directory and restores it."""

    def __init__(self,
                 runner: CommandRunner,
                 app_dir: Path,
                 solution_name: Optional[str] = None,
                 project_extensions: Optional[List[str]] = None,
                 search_depth: int = 2,
                 ef_marker: str = "Microsoft.EntityFrameworkCore"):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.app_dir = Path(app_dir)
        self.solution_name = solution_name
        self.project_extensions = project_extensions or [".csproj", ".fsproj", ".vbproj"]
        self.search_depth = search_depth
        self.ef_marker = ef_marker

    def find_solution(self) -> Optional[Path]:
        """Configured solution first, then the first *.sln in the application directory."""
        if self.solution_name:
            preferred = self.app_dir / self.solution_name
            if preferred.is_file():
                return preferred
        solutions = sorted(p for p in self.app_dir.glob("*.sln") if p.is_file())
        return solutions[0] if solutions else None

    def find_projects(self) -> List[Path]:
        """Project files at most search_depth directory levels deep, shallowest first."""
        found = []
        for depth in range(1, self.search_depth + 1):
            prefix = "*/" * (depth - 1)
            for ext in self.project_extensions:
                found.extend(p for p in self.app_dir.glob(f"{prefix}*{ext}") if p.is_file())
        return sorted(set(found), key=lambda p: (len(p.relative_to(self.app_dir).parts), str(p)))

    def find_restore_target(self) -> Optional[Path]:
        solution = self.find_solution()
        if solution:
            self.logger.info(f"Found solution file: {solution.name}")
            return solution
        projects = self.find_projects()
        if projects:
            self.logger.info(f"Found project file: {projects[0].relative_to(self.app_dir)}")
            return projects[0]
        return None

    async def restore(self) -> StepResult:
        step = "project_restore"
        target = self.find_restore_target()
        if target is None:
            self.logger.info("No .NET project or solution files found")
            return StepResult.ok(step, "No .NET project or solution files found")

        self.logger.info(f"Restoring packages for {target.name}...")
        start = time.monotonic()
        result = await self.runner.run("dotnet", "restore", str(target), "--verbosity", "quiet", cwd=self.app_dir)
        duration = time.monotonic() - start

        if not result.ok:
            self.logger.warning(f"Restore of {target.name} failed (exit {result.returncode})")
            return StepResult.warning(
                step, f"Restore of {target.name} failed",
                output=result.output, duration_seconds=duration
            )

        self.logger.info(f"Packages restored for {target.name}")
        return StepResult.ok(step, f"Restored {target.name}", duration_seconds=duration)

    def start(self, group: TaskGroup) -> Optional[str]:
        """
        Launch the restore in the given task group.

        Returns:
            The task handle, or None when the application directory does not exist
        """
        if not self.app_dir.is_dir():
            self.logger.info(f"No app directory found at {self.app_dir}")
            return None
        self.logger.info("Setting up project dependencies...")
        return group.launch(RESTORE_TASK, self.restore())

    def uses_entity_framework(self) -> bool:
        if not self.app_dir.is_dir():
            return False
        for project in self.app_dir.rglob("*.csproj"):
            try:
                if self.ef_marker in project.read_text(errors="ignore"):
                    return True
            except OSError as e:
                self.logger.debug(f"Could not read {project}: {e}")
        return False

    async def ensure_ef_tools(self, tools: GlobalToolInstaller, tool_name: str = "dotnet-ef") -> Optional[StepResult]:
        """Install the EF tool when a project references Entity Framework Core."""
        if not self.uses_entity_framework():
            return None
        self.logger.info("Entity Framework detected, verifying EF tools...")
        return await tools.ensure_tool(tool_name)
