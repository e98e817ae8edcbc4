"""
Protocols for midiplay_player.

Implementations:
    - MPlayerSlave: MPlayer running in slave mode
    - MockPlayerHandle: Test double for unit tests
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PlayerHandle(Protocol):
    """
    Blocking request/response interface to the media player process.

    Implementations list the methods Player.send() may pass through in a
    COMMANDS class attribute; anything else is refused.
    """

    def load_file(self, file: str, append: bool = False) -> None:
        """Load a media file, replacing the current one unless append is True."""
        ...

    def get(self, key: str) -> str:
        """Query a property (eg "time_pos") and return the raw answer."""
        ...

    def readline(self) -> str:
        """Read one line of process output; empty string at end of output."""
        ...

    def quit(self) -> None:
        """Make the process exit."""
        ...


@runtime_checkable
class TaskHandle(Protocol):
    """
    Handle to a background command task.

    concurrent.futures.Future satisfies this.
    """

    def done(self) -> bool:
        ...

    def cancel(self) -> bool:
        ...

    def result(self, timeout: float | None = None) -> Any:
        ...


class TaskExecutor(Protocol):
    """Anything that can submit a call and return a TaskHandle."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
        ...

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        ...
