"""
Player process lifecycle state.
"""

from enum import Enum


class ProcessState(Enum):
    """
    Lifecycle of the player process handle.

    ABSENT -> STARTING -> READY -> TERMINATED
    A failed start goes back from STARTING to ABSENT.
    """
    ABSENT = "absent"
    STARTING = "starting"
    READY = "ready"
    TERMINATED = "terminated"
