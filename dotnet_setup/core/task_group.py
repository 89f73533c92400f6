"""
Launch-many / join-all grouping of concurrent setup tasks.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional

from ..models.task import TaskResult, TaskState


class TaskGroup:
    """
    Tracks concurrently launched tasks and joins each of them exactly once.

    Every joined task yields a TaskResult, whether it completed, raised, or
    had already finished before the join. Used as an async context manager
    the group joins all remaining tasks on exit.
    """

    def __init__(self, name: str = "tasks"):
        self.logger = logging.getLogger(__name__)
        self.name = name
        self._tasks: Dict[str, asyncio.Task] = {}
        self._joined: Dict[str, TaskResult] = {}

    def launch(self, name: str, coro: Awaitable[Any]) -> str:
        """Schedule a coroutine and return its handle."""
        if name in self._tasks:
            raise ValueError(f"Task already launched in {self.name}: {name}")
        self._tasks[name] = asyncio.ensure_future(coro)
        self.logger.debug(f"[{self.name}] launched {name}")
        return name

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def pending(self) -> List[str]:
        return [n for n in self._tasks if n not in self._joined]

    async def join(self, name: Optional[str]) -> Optional[TaskResult]:
        """
        Wait for one task.

        Args:
            name: Handle returned by launch, or None when nothing was launched

        Returns:
            The task result, or None for the None handle
        """
        if name is None:
            return None
        if name in self._joined:
            return self._joined[name]

        task = self._tasks[name]
        try:
            value = await task
            result = TaskResult(name=name, state=TaskState.COMPLETED, value=value)
        except Exception as e:
            self.logger.warning(f"[{self.name}] {name} failed: {e}")
            result = TaskResult(name=name, state=TaskState.FAILED, error=str(e) or type(e).__name__)

        self._joined[name] = result
        return result

    async def join_all(self) -> List[TaskResult]:
        """Join every launched task, in launch order."""
        for name in list(self._tasks):
            await self.join(name)
        return self.results

    @property
    def results(self) -> List[TaskResult]:
        return [self._joined[n] for n in self._tasks if n in self._joined]

    async def __aenter__(self) -> "TaskGroup":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.join_all()
