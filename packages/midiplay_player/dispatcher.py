"""
Command dispatcher - runs player commands in the background.

Every outward command goes through dispatch():
1. Sweep: pending commands get a short grace interval, then queued ones are
   cancelled and a still-running one is abandoned to its own worker
2. The call is submitted to a single worker, so commands run in order
3. A failure inside the call is logged and handed to the error handler
4. The task is recorded for the next sweep
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .protocols import TaskExecutor, TaskHandle

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[BaseException], None]
ExecutorFactory = Callable[[], TaskExecutor]


def _command_worker() -> TaskExecutor:
    return ThreadPoolExecutor(max_workers=1, thread_name_prefix="midiplay-command")


class CommandDispatcher:
    """
    Fire-and-forget command channel to the player process.

    Queued commands that haven't started are cancelled by the sweep.
    A command still running after the grace interval (eg a poll waiting
    on a silent process) can't be interrupted: its worker is shut down
    and left to finish it, and new commands go to a fresh worker.

    Usage:
        >>> dispatcher = CommandDispatcher(on_error=errors.append)
        >>> future = dispatcher.dispatch(player.load_file, "intro.mp4")
    """

    # Grace interval before pending commands are cancelled (seconds)
    SWEEP_INTERVAL: float = 0.01

    def __init__(
        self,
        executor_factory: ExecutorFactory | None = None,
        sweep_interval: float = SWEEP_INTERVAL,
        on_error: ErrorHandler | None = None,
    ) -> None:
        """
        Args:
            executor_factory: Builds the worker commands run on (default:
                one worker thread). Called again when a worker is abandoned.
            sweep_interval: Grace interval before cancelling pending commands
            on_error: Called with any exception raised by a command
        """
        self._executor_factory = executor_factory or _command_worker
        self._executor: TaskExecutor = self._executor_factory()
        self._sweep_interval = sweep_interval
        self._on_error = on_error
        self._pending: list[TaskHandle] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def pending(self) -> list[TaskHandle]:
        """Tasks recorded and not yet done"""
        with self._lock:
            return [task for task in self._pending if not task.done()]

    @property
    def is_closed(self) -> bool:
        return self._closed

    def dispatch(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> TaskHandle:
        """
        Run fn(*args, **kwargs) in the background.

        Returns:
            Handle for the submitted task

        Raises:
            RuntimeError: If the dispatcher has been shut down
        """
        if self._closed:
            raise RuntimeError("Command dispatcher is shut down")

        self.sweep()
        with self._lock:
            task = self._executor.submit(self._run, fn, *args, **kwargs)
            self._pending.append(task)
        return task

    def sweep(self) -> bool:
        """
        Cancel leftover commands.

        Returns:
            True if there were pending commands to sweep
        """
        with self._lock:
            self._pending = [task for task in self._pending if not task.done()]
            stale = list(self._pending)

        if not stale:
            return False

        time.sleep(self._sweep_interval)
        cancelled = [task for task in stale if task.cancel()]
        if cancelled:
            logger.debug(f"Swept {len(cancelled)} pending command(s)")

        stragglers = [task for task in stale if task not in cancelled and not task.done()]
        with self._lock:
            self._pending = [task for task in self._pending if task not in stale]
            if stragglers:
                abandoned, self._executor = self._executor, self._executor_factory()
        if stragglers:
            abandoned.shutdown(wait=False, cancel_futures=True)
            logger.warning(f"Abandoned {len(stragglers)} running command(s) to their worker")
        return True

    def shutdown(self) -> None:
        """Cancel everything pending and stop the worker"""
        self._closed = True
        with self._lock:
            stale, self._pending = self._pending, []
        for task in stale:
            task.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _run(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        name = getattr(fn, "__name__", repr(fn))
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.error(f"Player command '{name}' failed: {e}", exc_info=True)
            if self._on_error is not None:
                self._on_error(e)
            raise
