"""
.NET global tool installation.
"""

import logging
from typing import List, Set

from ..errors import CommandError
from ..models.installation import StepResult
from ..models.task import TaskState
from ..models.tool import GlobalTool, ToolStatus
from .process import CommandRunner
from .task_group import TaskGroup


def parse_tool_list(output: str) -> Set[str]:
    """Return the lower-cased package ids listed by 'dotnet tool list -g'."""
    installed = set()
    for line in (output or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("-") or stripped.lower().startswith("package id"):
            continue
        installed.add(stripped.split()[0].lower())
    return installed


class GlobalToolInstaller:
    """Ensures a fixed set of global tools is installed, installing missing ones concurrently."""

    def __init__(self, runner: CommandRunner, tools: List[str]):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.tool_names = list(tools)

    async def installed_tools(self) -> Set[str]:
        result = await self.runner.run("dotnet", "tool", "list", "-g")
        if not result.ok:
            self.logger.warning(f"dotnet tool list -g failed (exit {result.returncode})")
            return set()
        return parse_tool_list(result.stdout)

    async def _install(self, name: str) -> None:
        self.logger.info(f"Installing {name}...")
        await self.runner.run_checked("dotnet", "tool", "install", "--global", name, "--verbosity", "quiet")

    async def ensure_installed(self) -> List[GlobalTool]:
        """
        Install every configured tool that is not already present.

        All launched installs are joined before returning, including failed ones.

        Returns:
            One GlobalTool per configured tool with its final status
        """
        self.logger.info("Installing .NET global tools...")
        installed = await self.installed_tools()
        tools = [GlobalTool(name=name) for name in self.tool_names]

        group = TaskGroup("global_tools")
        for tool in tools:
            if tool.name.lower() in installed:
                tool.update_status(ToolStatus.ALREADY_INSTALLED)
                self.logger.info(f"{tool.name} already installed")
            else:
                group.launch(tool.name, self._install(tool.name))

        results = {r.name: r for r in await group.join_all()}
        for tool in tools:
            result = results.get(tool.name)
            if result is None:
                continue
            if result.state == TaskState.COMPLETED:
                tool.update_status(ToolStatus.INSTALLED)
            else:
                tool.update_status(ToolStatus.FAILED, result.error)
                self.logger.warning(f"Failed to install {tool.name}: {result.error}")

        self.logger.info("Global tools installation complete")
        return tools

    async def ensure_tool(self, name: str) -> StepResult:
        """Install a single tool on demand unless it is already available."""
        step = f"tool:{name}"
        if self.runner.which(name) or name.lower() in await self.installed_tools():
            self.logger.info(f"{name} tools ready")
            return StepResult.ok(step, f"{name} already installed")
        try:
            await self._install(name)
        except CommandError as e:
            return StepResult.warning(step, str(e), output=e.result.output)
        return StepResult.ok(step, f"{name} installed")

    @staticmethod
    def summarize(tools: List[GlobalTool]) -> StepResult:
        failed = [t for t in tools if t.status == ToolStatus.FAILED]
        if failed:
            names = ", ".join(t.name for t in failed)
            return StepResult.warning("global_tools", f"Failed to install: {names}")
        return StepResult.ok("global_tools", f"{len(tools)} global tools ready")
