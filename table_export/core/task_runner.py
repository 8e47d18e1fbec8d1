"""
Shared task runner singleton for background exports.

Provides a module-level InlineTaskRunner in thread mode that is shared by
every API request.
"""
import atexit
import threading
from typing import Optional

from table_export.adapters.tasks_inline import InlineTaskRunner

# Module-level singleton instance
_task_runner: Optional[InlineTaskRunner] = None
_task_runner_lock = threading.Lock()


def get_task_runner() -> InlineTaskRunner:
    """
    Get the shared task runner singleton instance.

    Creates the instance on first call and reuses it for all subsequent calls.
    The runner is automatically shut down on application exit.
    """
    global _task_runner
    with _task_runner_lock:
        if _task_runner is None:
            _task_runner = InlineTaskRunner(mode="thread", max_workers=2)
            # Register cleanup on application shutdown
            atexit.register(shutdown_task_runner)
        return _task_runner


def shutdown_task_runner():
    """
    Shutdown the task runner and wait for running exports to finish.

    Called automatically on application exit.
    """
    global _task_runner
    with _task_runner_lock:
        runner, _task_runner = _task_runner, None
    if runner is not None:
        runner.shutdown()
