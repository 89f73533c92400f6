"""
Subprocess runner shared by every setup step.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

from ..errors import CommandError
from ..models.task import CommandResult


class CommandRunner:
    """Runs external commands against an explicit child-process environment."""

    def __init__(self,
                 env: Optional[Mapping[str, str]] = None,
                 timeout: Optional[float] = None):
        """
        Initialize the runner.

        Args:
            env: Base environment for child processes (defaults to os.environ)
            timeout: Per-command timeout in seconds, None to wait indefinitely
        """
        self.logger = logging.getLogger(__name__)
        self.env: Dict[str, str] = dict(os.environ if env is None else env)
        self.timeout = timeout

    def export(self, variables: Mapping[str, str], path_entries: Iterable[Union[str, Path]] = ()) -> None:
        """
        Make variables and PATH entries visible to every later command.

        PATH entries are moved to the front so they shadow any other
        installation already on PATH.
        """
        self.env.update(variables)
        entries = []
        for entry in path_entries:
            entry = str(entry)
            if entry not in entries:
                entries.append(entry)
        path = self.env.get("PATH", "")
        rest = [p for p in path.split(os.pathsep) if p and p not in entries]
        self.env["PATH"] = os.pathsep.join(entries + rest)

    def which(self, name: str, path: Optional[Union[str, Path]] = None) -> Optional[str]:
        """Resolve an executable against the child-process PATH, or the given search path."""
        return shutil.which(name, path=str(path) if path is not None else self.env.get("PATH"))

    async def run(self,
                  *args: str,
                  cwd: Optional[Path] = None,
                  extra_env: Optional[Mapping[str, str]] = None) -> CommandResult:
        """
        Run a command and capture its output.

        A missing executable is reported as exit status 127 rather than raised.
        """
        cmd = [str(a) for a in args]
        env = dict(self.env)
        if extra_env:
            env.update(extra_env)

        self.logger.debug(f"Running: {' '.join(cmd)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(cwd) if cwd else None,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except (FileNotFoundError, PermissionError) as e:
            return CommandResult(args=cmd, returncode=127, stderr=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            try:
                process.terminate()
            except ProcessLookupError:
                pass  # exited after the timeout fired
            await process.wait()
            return CommandResult(
                args=cmd,
                returncode=process.returncode if process.returncode is not None else -1,
                stderr=f"Timed out after {self.timeout} seconds",
                timed_out=True
            )

        return CommandResult(
            args=cmd,
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else ""
        )

    async def run_checked(self, *args: str, **kwargs) -> CommandResult:
        """Run a command and raise CommandError on failure."""
        result = await self.run(*args, **kwargs)
        if not result.ok:
            raise CommandError(result)
        return result
