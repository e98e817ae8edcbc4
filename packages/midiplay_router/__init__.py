"""
Router package for midiplay.

Routes incoming MIDI messages (mido.Message) to registered callbacks,
falling back from exact note/CC keys to a wildcard callback.
"""

from .constants import (
    CATEGORIES,
    CATEGORY_CC,
    CATEGORY_NOTE,
    CATEGORY_SYSTEM,
    SYSTEM_TYPES,
    note_name,
    note_value,
    resolve_cc_index,
)
from .handler import MessageHandler

__all__ = [
    "MessageHandler",
    "CATEGORIES",
    "CATEGORY_NOTE",
    "CATEGORY_CC",
    "CATEGORY_SYSTEM",
    "SYSTEM_TYPES",
    "note_value",
    "note_name",
    "resolve_cc_index",
]
