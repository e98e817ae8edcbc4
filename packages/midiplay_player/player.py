"""
midiplay Player

Wrapper for MPlayer functionality. Starts the MPlayer process lazily
on first play() and sends every command in the background through
a CommandDispatcher, so callers never block on the process.

A failure in a background task is queued and re-raised as
PlayerProcessError in the caller's thread by check(), which every
public method runs first.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from types import TracebackType
from typing import Any

from .dispatcher import CommandDispatcher, ExecutorFactory
from .exceptions import PlayerProcessError
from .progress import Progress
from .protocols import PlayerHandle, TaskExecutor
from .slave import MPlayerSlave
from .state import ProcessState

logger = logging.getLogger(__name__)

HandleFactory = Callable[..., PlayerHandle]


class Player:
    """
    Async command facade over the media player process.

    Dependencies are injected via constructor for testability:
    handle_factory builds the process handle (MPlayerSlave by default),
    the executors run the starter and command tasks.
    """

    DEFAULT_FLAGS: str = "-fixed-vo -idle"

    # Seconds progress() waits for a poll to come back
    PROGRESS_TIMEOUT: float = 1.0

    def __init__(
        self,
        flags: str | None = None,
        *,
        handle_factory: HandleFactory = MPlayerSlave,
        start_executor: TaskExecutor | None = None,
        command_executor_factory: ExecutorFactory | None = None,
        sweep_interval: float = CommandDispatcher.SWEEP_INTERVAL,
        progress_timeout: float = PROGRESS_TIMEOUT,
    ):
        """
        Args:
            flags: MPlayer command-line flags appended to DEFAULT_FLAGS
            handle_factory: Called as handle_factory(file, options=flags)
            start_executor: Runs the starter task (default: one worker thread)
            command_executor_factory: Builds the command worker (default: one
                worker thread)
            sweep_interval: Grace interval before pending commands are cancelled
            progress_timeout: Seconds progress() waits for an answer
        """
        self._flags = self.DEFAULT_FLAGS
        if flags:
            self._flags += f" {flags}"

        self._handle_factory = handle_factory
        # functools.partial keeps the handle class in .func
        self._handle_class = getattr(handle_factory, "func", handle_factory)
        self._handle: PlayerHandle | None = None
        self._state = ProcessState.ABSENT
        self._state_lock = threading.Lock()

        self._owns_starter = start_executor is None
        self._starter: TaskExecutor = start_executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="midiplay-start"
        )
        self._starter_task: Future[Any] | None = None

        self._commands = CommandDispatcher(
            executor_factory=command_executor_factory,
            sweep_interval=sweep_interval,
            on_error=self._on_background_error,
        )
        self._errors: queue.SimpleQueue[BaseException] = queue.SimpleQueue()
        self._progress_timeout = progress_timeout

    # ================================================================
    # Properties
    # ================================================================

    @property
    def flags(self) -> str:
        """MPlayer command-line flags used on startup"""
        return self._flags

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def handle(self) -> PlayerHandle | None:
        return self._handle

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._commands

    # ================================================================
    # Playback
    # ================================================================

    def play(self, file: str) -> bool:
        """
        Play a media file.

        The first call starts MPlayer with the file and returns False
        while the process is starting. Once it's up, the file is loaded
        in the background.

        Returns:
            True if the load command was sent
        """
        self.check()
        self._ensure_player(file)
        handle = self._handle
        if handle is None:
            return False
        self._commands.dispatch(handle.load_file, file)
        return True

    def is_active(self) -> bool:
        """Is MPlayer active? Blocks until it produces a line of output."""
        self.check()
        handle = self._handle
        return handle is not None and bool(handle.readline())

    def progress(self, timeout: float | None = None) -> Progress | None:
        """
        Media progress information.

        Polls time_length and time_pos in the background and waits up to
        timeout seconds for the answer.

        Returns:
            Progress snapshot, or None if there is no process yet or the
            poll was cancelled or timed out
        """
        self.check()
        handle = self._handle
        if handle is None:
            return None

        task = self._commands.dispatch(self._poll_progress, handle)
        try:
            return task.result(timeout=self._progress_timeout if timeout is None else timeout)
        except (CancelledError, FuturesTimeoutError):
            logger.debug("Progress poll did not complete")
            return None
        except Exception:
            # Already queued by the dispatcher
            self.check()
            raise

    # ================================================================
    # Passthrough
    # ================================================================

    def send(self, command: str, *args: Any, **kwargs: Any) -> bool:
        """
        Send any supported command to MPlayer, eg send("seek", 30, 2).

        Only the handle's passthrough COMMANDS are dispatched; "quit"
        goes through quit() so the process state follows it.

        Returns:
            True if the command was dispatched, False if there is no
            process yet or it doesn't support the command
        """
        self.check()
        if command == "quit":
            return self.quit()
        handle = self._handle
        if handle is None:
            if _is_command(self._handle_class, command):
                logger.warning(f"MPlayer not started, '{command}' ignored")
            else:
                logger.warning(f"Unsupported MPlayer command: '{command}'")
            return False

        if not _is_command(handle, command):
            logger.warning(f"Unsupported MPlayer command: '{command}'")
            return False

        self._commands.dispatch(getattr(handle, command), *args, **kwargs)
        return True

    def responds_to(self, command: str) -> bool:
        """Does MPlayer (or, before it starts, MPlayerSlave) support the command?"""
        if command == "quit":
            return True
        handle = self._handle
        if handle is None:
            return _is_command(self._handle_class, command)
        return _is_command(handle, command)

    # ================================================================
    # Lifecycle
    # ================================================================

    def quit(self) -> bool:
        """
        Cause MPlayer to exit.

        Returns True even if MPlayer was never started.
        """
        with self._state_lock:
            handle = self._handle
            starter = self._starter_task
            self._handle = None
            self._state = ProcessState.TERMINATED

        try:
            if handle is not None:
                handle.quit()
        except Exception as e:
            logger.warning(f"MPlayer did not quit cleanly: {e}", exc_info=True)
        finally:
            if starter is not None:
                starter.cancel()
            self._commands.shutdown()
            if self._owns_starter:
                self._starter.shutdown(wait=False, cancel_futures=True)
        logger.info("Player quit")
        return True

    def check(self) -> None:
        """
        Re-raise a background failure in the calling thread.

        Raises:
            PlayerProcessError: If a starter or command task failed
        """
        try:
            error = self._errors.get_nowait()
        except queue.Empty:
            return
        raise PlayerProcessError(f"Background player task failed: {error}") from error

    def __enter__(self) -> Player:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.quit()

    # ================================================================
    # Internal
    # ================================================================

    def _ensure_player(self, file: str) -> None:
        """Start the MPlayer process unless it's starting or started"""
        with self._state_lock:
            if self._state is not ProcessState.ABSENT:
                return
            self._state = ProcessState.STARTING
            self._starter_task = self._starter.submit(self._start_player, file)
        logger.info(f"Starting MPlayer: {self._flags}")

    def _start_player(self, file: str) -> PlayerHandle:
        """Starter task: build the handle and publish it"""
        try:
            handle = self._handle_factory(file, options=self._flags)
        except Exception as e:
            logger.error(f"MPlayer failed to start: {e}", exc_info=True)
            with self._state_lock:
                if self._state is ProcessState.STARTING:
                    self._state = ProcessState.ABSENT
            self._on_background_error(e)
            raise

        with self._state_lock:
            published = self._state is ProcessState.STARTING
            if published:
                self._handle = handle
                self._state = ProcessState.READY

        if not published:
            # quit() won the race
            handle.quit()
        else:
            logger.info("MPlayer ready")
        return handle

    def _poll_progress(self, handle: PlayerHandle) -> Progress:
        """Command task: poll length and position"""
        length = _get_float(handle, "time_length")
        position = _get_float(handle, "time_pos")
        return Progress.from_times(length=length, position=position)

    def _on_background_error(self, error: BaseException) -> None:
        self._errors.put(error)


def _get_float(handle: PlayerHandle, key: str) -> float:
    """Poll a single MPlayer value for the given key"""
    return float(handle.get(key).strip())


def _is_command(target: Any, command: str) -> bool:
    """Passthrough command declared in a handle's (or handle class's) COMMANDS"""
    if command not in getattr(target, "COMMANDS", ()):
        return False
    return callable(getattr(target, command, None))
