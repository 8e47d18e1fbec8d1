"""
Inline task runner implementation.

Runs exports either immediately in the calling thread or in a background
thread pool. Failed tasks keep their exception so result() can re-raise it.
"""
import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, Optional

from table_export.ports.tasks import TaskRunner, TaskStatus

logger = logging.getLogger(__name__)


class InlineTaskRunner(TaskRunner):
    """
    Inline/threaded task execution.

    Modes:
    - inline: Execute immediately in current thread (default)
    - thread: Execute in background thread pool
    """

    def __init__(self, mode: str = "inline", max_workers: int = 2, max_finished: int = 1000):
        """
        Initialize task runner.

        Args:
            mode: Execution mode ("inline" or "thread")
            max_workers: Max concurrent exports (only for thread mode)
            max_finished: Finished tasks kept for polling; older ones are evicted
        """
        if mode not in ("inline", "thread"):
            raise ValueError(f"Unknown task runner mode: {mode}")
        self.mode = mode
        self.executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="export-task")
            if mode == "thread"
            else None
        )
        self.max_finished = max_finished
        self._tasks: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def submit(
        self,
        func: Callable,
        *args,
        task_id: Optional[str] = None,
        **kwargs,
    ) -> str:
        """Submit a task for execution."""
        task_id = task_id or str(uuid.uuid4())
        with self._lock:
            self._evict_finished()
            self._tasks[task_id] = {
                "status": TaskStatus.PENDING,
                "result": None,
                "error": None,
                "future": None,
            }

        if self.mode == "inline":
            self._run(task_id, func, args, kwargs)
        else:
            future = self.executor.submit(self._run, task_id, func, args, kwargs)
            with self._lock:
                # Already evicted if it finished before this point
                if task_id in self._tasks:
                    self._tasks[task_id]["future"] = future

        return task_id

    def _run(self, task_id: str, func: Callable, args, kwargs) -> None:
        self._update(task_id, status=TaskStatus.RUNNING)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Task {task_id} failed: {e}", exc_info=True)
            self._update(task_id, status=TaskStatus.FAILED, error=e)
            return
        self._update(task_id, status=TaskStatus.COMPLETED, result=result)

    def _evict_finished(self) -> None:
        """Drop the oldest finished tasks beyond max_finished. Caller holds the lock."""
        finished = [
            task_id
            for task_id, task in self._tasks.items()
            if task["status"] in (TaskStatus.COMPLETED, TaskStatus.FAILED)
        ]
        for task_id in finished[: max(0, len(finished) - self.max_finished)]:
            del self._tasks[task_id]

    def _update(self, task_id: str, **fields) -> None:
        with self._lock:
            self._tasks[task_id].update(fields)

    def _task(self, task_id: str) -> Dict[str, Any]:
        with self._lock:
            if task_id not in self._tasks:
                raise KeyError(f"Task {task_id} not found")
            return dict(self._tasks[task_id])

    def status(self, task_id: str) -> TaskStatus:
        """Get task status."""
        return self._task(task_id)["status"]

    def error(self, task_id: str) -> Optional[str]:
        """Error message of a failed task."""
        error = self._task(task_id)["error"]
        return str(error) if error is not None else None

    def result(self, task_id: str, timeout: Optional[float] = None) -> Any:
        """Get task result (blocking)."""
        task = self._task(task_id)

        future: Optional[Future] = task["future"]
        if future is not None:
            try:
                future.result(timeout=timeout)
            except FutureTimeoutError:
                raise TimeoutError(f"Task {task_id} still running after {timeout}s")
            task = self._task(task_id)

        if task["status"] == TaskStatus.FAILED:
            raise task["error"]

        return task["result"]

    def shutdown(self):
        """Shutdown executor (cleanup)."""
        if self.executor:
            self.executor.shutdown(wait=True)
