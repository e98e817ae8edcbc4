"""
midiplay Application

MIDI-controlled media playback: routes a MIDI input port through the
message handler to an MPlayer process.
"""

__version__ = "0.1.0"

from .app import MidiPlayApp
from .config import Settings
from .factory import create_app, create_player
from .loader import load_mapping, load_mapping_from_file
from .mapping_models import BindingConfig, MappingConfig

__all__ = [
    "create_app",
    "create_player",
    "MidiPlayApp",
    "Settings",
    "BindingConfig",
    "MappingConfig",
    "load_mapping",
    "load_mapping_from_file",
]
