"""Custom exceptions for midiplay"""


class MidiplayError(Exception):
    """Base exception for all midiplay errors"""
    pass


class PlayerError(MidiplayError):
    """Media player error"""
    pass


class PlayerProcessError(PlayerError):
    """A background player task (start or command) failed"""
    pass


class PlayerNotRunningError(PlayerError):
    """The player process is not running or closed its output"""
    pass
