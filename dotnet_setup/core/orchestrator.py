"""
Orchestrates the .NET development environment setup.
"""

import tempfile
from pathlib import Path
from typing import Optional

from config.settings import Settings
from ..errors import RuntimeNotFoundError, RuntimeVersionError
from ..integrations.installer_client import InstallerClient
from ..models.installation import SetupReport, StepResult
from ..models.task import TaskResult
from ..utils.logging import get_logger
from .architecture import detect_architecture
from .artifact_manager import ArtifactManager
from .global_tools import GlobalToolInstaller
from .process import CommandRunner
from .project_restore import ProjectRestorer
from .runtime_installer import RuntimeInstaller
from .shell_profile import EnvironmentExports, ShellProfileConfigurator
from .system_deps import SystemDependencyInstaller
from .task_group import TaskGroup
from .version_check import check_runtime


class SetupOrchestrator:
    """Sequences the setup steps and joins their concurrent stages."""

    def __init__(self,
                 settings: Settings,
                 runner: Optional[CommandRunner] = None,
                 installer_client: Optional[InstallerClient] = None,
                 artifact_manager: Optional[ArtifactManager] = None):
        """
        Initialize the orchestrator.

        Args:
            settings: Immutable run configuration
            runner: Command runner, created from settings when omitted
            installer_client: Client for dotnet-install.sh
            artifact_manager: Stores the run report when given
        """
        self.logger = get_logger(__name__)
        self.settings = settings
        self.runner = runner or CommandRunner(timeout=settings.command_timeout)
        self.installer_client = installer_client or InstallerClient(
            settings.dotnet.installer_url, timeout=settings.command_timeout
        )
        self.artifact_manager = artifact_manager

        dotnet = settings.dotnet
        self.profile = ShellProfileConfigurator(
            settings.shell_profile,
            EnvironmentExports(dotnet.install_dir, dotnet.tools_dir, dict(dotnet.opt_out))
        )
        self.system_deps = SystemDependencyInstaller(
            self.runner, settings.apt.packages, use_sudo=settings.apt.use_sudo
        )
        self.runtime = RuntimeInstaller(self.runner, dotnet.channel, dotnet.install_dir, target=dotnet.version)
        self.tools = GlobalToolInstaller(self.runner, settings.global_tools)
        project = settings.project
        self.restorer = ProjectRestorer(
            self.runner,
            project.app_dir,
            solution_name=project.solution_name,
            project_extensions=list(project.project_extensions),
            search_depth=project.search_depth,
            ef_marker=project.ef_marker
        )

    async def run(self) -> SetupReport:
        """
        Run the whole setup.

        Returns:
            The aggregated report; report.success is False if any step was fatal
        """
        target = self.settings.dotnet.version
        report = SetupReport(target_version=target)
        self.logger.info(f"Starting .NET {target} setup...")

        # Later commands must see the install directory even before it is persisted
        self.profile.apply_to(self.runner)

        status = await check_runtime(self.runner, target, self.settings.dotnet.install_dir)
        if status.matches_target:
            report.fast_path = True
            report.installed_version = status.version
            report.add(StepResult.ok("version_check", f".NET {status.version} already installed"))
            await self._setup_tools_and_project(report)
        else:
            message = "not installed" if not status.present else f"found {status.version}"
            report.add(StepResult.ok("version_check", f".NET {target} {message}"))
            await self._install_runtime(report)

        return self._finish(report)

    async def _install_runtime(self, report: SetupReport) -> None:
        self.logger.info("Setting up system dependencies and .NET in parallel...")

        with tempfile.TemporaryDirectory(prefix="dotnet-install-") as temp_dir:
            async with TaskGroup("prerequisites") as group:
                group.launch("system_dependencies", self.system_deps.install())
                group.launch("installer_download", self.installer_client.download_async(Path(temp_dir)))
                host_arch = await detect_architecture(self.runner)

            deps, download = group.results
            report.add(self._as_step(deps, "system_dependencies"))
            if not download.ok:
                report.add(StepResult.fatal("installer_download", download.error))
                return
            script_path = download.value
            report.add(StepResult.ok("installer_download", f"Downloaded {script_path.name}"))
            if self.artifact_manager:
                self.artifact_manager.record_installer(script_path)

            if report.add(await self.runtime.install(script_path, host_arch)).is_fatal:
                return

        try:
            report.add(self.profile.configure(self.runner))
        except OSError as e:
            report.add(StepResult.fatal("shell_profile", f"Could not update {self.profile.profile_path}: {e}"))
            return

        try:
            report.installed_version = await self.runtime.verify()
        except (RuntimeNotFoundError, RuntimeVersionError) as e:
            self.logger.error(str(e))
            report.add(StepResult.fatal("runtime_verify", str(e)))
            return

        self.logger.info("Configuring .NET...")
        await self._setup_tools_and_project(report, warm_up=True)

    async def _setup_tools_and_project(self, report: SetupReport, warm_up: bool = False) -> None:
        """Install global tools and restore the project concurrently, then join both."""
        async with TaskGroup("tools_and_project") as group:
            if warm_up:
                group.launch("warm_up", self._warm_up())
            group.launch("global_tools", self.tools.ensure_installed())
            restore = self.restorer.start(group)

        tools = await group.join("global_tools")
        if tools.ok:
            report.tools = tools.value
            report.add(self.tools.summarize(tools.value))
        else:
            report.add(StepResult.warning("global_tools", tools.error))

        if warm_up:
            report.add(self._as_step(await group.join("warm_up"), "warm_up"))

        if restore is not None:
            report.add(self._as_step(await group.join(restore), "project_restore"))
            ef = await self.restorer.ensure_ef_tools(self.tools, self.settings.project.ef_tool)
            if ef is not None:
                report.add(ef)

        self.logger.info("All dependencies setup complete")

    async def _warm_up(self) -> StepResult:
        self.logger.info("Warming up .NET CLI...")
        result = await self.runner.run("dotnet", "--info")
        if not result.ok:
            return StepResult.warning("warm_up", f"dotnet --info failed (exit {result.returncode})")
        self.logger.info(".NET CLI warmed up")
        return StepResult.ok("warm_up", ".NET CLI warmed up")

    @staticmethod
    def _as_step(result: TaskResult, step: str) -> StepResult:
        if result.ok and isinstance(result.value, StepResult):
            return result.value
        return StepResult.warning(step, result.error or f"{step} did not report a result")

    def _finish(self, report: SetupReport) -> SetupReport:
        report.complete()

        fatal = report.fatal
        if fatal:
            self.logger.error(f"Setup failed at {fatal.step}: {fatal.message}")
        for warning in report.warnings:
            self.logger.warning(f"{warning.step}: {warning.message}")

        if self.artifact_manager:
            summary_path = self.artifact_manager.save_report(report)
            self.logger.info(f"Summary saved to {summary_path}")

        return report
