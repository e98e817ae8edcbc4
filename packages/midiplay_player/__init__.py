"""
midiplay Player

Asynchronous command facade over an MPlayer slave process.
"""

from .dispatcher import CommandDispatcher
from .exceptions import (
    MidiplayError,
    PlayerError,
    PlayerNotRunningError,
    PlayerProcessError,
)
from .player import Player
from .progress import Progress, get_percentage
from .protocols import PlayerHandle, TaskExecutor, TaskHandle
from .slave import MPlayerSlave
from .state import ProcessState

__all__ = [
    "Player",
    "CommandDispatcher",
    "MPlayerSlave",
    "Progress",
    "ProcessState",
    "get_percentage",
    "PlayerHandle",
    "TaskHandle",
    "TaskExecutor",
    "MidiplayError",
    "PlayerError",
    "PlayerProcessError",
    "PlayerNotRunningError",
]
