"""
Task runner interface.

Exports triggered over HTTP run in the background; the API only needs to
submit work and poll it.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional


class TaskStatus(str, Enum):
    """Task execution status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskRunner(ABC):
    """
    Task execution interface.

    Allows switching between inline and threaded execution.
    """

    @abstractmethod
    def submit(
        self,
        func: Callable,
        *args,
        task_id: Optional[str] = None,
        **kwargs,
    ) -> str:
        """
        Submit a task for execution.

        Args:
            func: Function to execute
            *args: Positional arguments
            task_id: Optional task ID (generated if not provided)
            **kwargs: Keyword arguments

        Returns:
            Task ID for status tracking
        """
        pass

    @abstractmethod
    def status(self, task_id: str) -> TaskStatus:
        """
        Get task status.

        Raises:
            KeyError: If the task is unknown
        """
        pass

    @abstractmethod
    def result(self, task_id: str, timeout: Optional[float] = None) -> Any:
        """
        Get task result (blocking).

        Raises:
            KeyError: If the task is unknown
            TimeoutError: If timeout exceeded
            ExportError: Re-raised from a failed task
        """
        pass

    @abstractmethod
    def error(self, task_id: str) -> Optional[str]:
        """Error message of a failed task, or None."""
        pass
