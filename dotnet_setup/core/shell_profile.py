"""
Idempotent shell startup file configuration.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from ..models.installation import StepResult
from .process import CommandRunner


def ensure_line_present(path: Path, line: str) -> bool:
    """
    Append a line to a file unless the file already contains it.

    The check is an exact substring match on the existing content.

    Returns:
        True if the line was written
    """
    path = Path(path)
    existing = path.read_text() if path.exists() else ""
    if line in existing:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    return True


@dataclass(frozen=True)
class EnvironmentExports:
    """Variables and PATH entries the SDK needs, in shell and process form."""
    install_dir: Path
    tools_dir: Path
    opt_out: Dict[str, str] = field(default_factory=dict)

    @property
    def path_lines(self) -> List[str]:
        tools = str(self.tools_dir)
        home_tools = str(Path.home() / ".dotnet" / "tools")
        # Keep $HOME unexpanded for the default tools directory
        tools_ref = "$HOME/.dotnet/tools" if tools == home_tools else tools
        return [
            f'export PATH="$PATH:{self.install_dir}"',
            f'export PATH="$PATH:{tools_ref}"',
            f'export DOTNET_ROOT="{self.install_dir}"',
        ]

    @property
    def opt_out_lines(self) -> List[str]:
        return [f"export {key}={value}" for key, value in self.opt_out.items()]

    @property
    def lines(self) -> List[str]:
        return self.path_lines + self.opt_out_lines

    @property
    def variables(self) -> Dict[str, str]:
        return {"DOTNET_ROOT": str(self.install_dir), **self.opt_out}

    @property
    def path_entries(self) -> List[str]:
        return [str(self.install_dir), str(self.tools_dir)]


class ShellProfileConfigurator:
    """Persists exports to the shell startup file and applies them to the runner."""

    def __init__(self, profile_path: Path, exports: EnvironmentExports):
        self.logger = logging.getLogger(__name__)
        self.profile_path = Path(profile_path)
        self.exports = exports

    def apply_to(self, runner: CommandRunner) -> None:
        """Export the variables into the child-process environment of this run."""
        runner.export(self.exports.variables, self.exports.path_entries)

    def persist(self) -> StepResult:
        """Append any missing export line to the startup file."""
        self.logger.info("Configuring PATH...")
        added = []
        for line in self.exports.lines:
            if ensure_line_present(self.profile_path, line):
                self.logger.info(f"Added to {self.profile_path.name}: {line}")
                added.append(line)

        if not added:
            return StepResult.ok("shell_profile", f"{self.profile_path} already configured")
        return StepResult.ok("shell_profile", f"Added {len(added)} lines to {self.profile_path}")

    def configure(self, runner: CommandRunner) -> StepResult:
        result = self.persist()
        self.apply_to(runner)
        return result
