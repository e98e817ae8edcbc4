"""MIDI constants for the message router.

Message type groups follow mido's type names. Note names use the
convention where middle C ("C4") is note 60.
"""

from __future__ import annotations

import re
from typing import Final

# =============================================================================
# Message categories
# =============================================================================

CATEGORY_NOTE: Final[str] = "note"
CATEGORY_CC: Final[str] = "cc"
CATEGORY_SYSTEM: Final[str] = "system"

CATEGORIES: Final[tuple[str, ...]] = (CATEGORY_NOTE, CATEGORY_CC, CATEGORY_SYSTEM)

# mido message types
SYSTEM_COMMON_TYPES: Final[frozenset[str]] = frozenset({
    "sysex",
    "quarter_frame",
    "songpos",
    "song_select",
    "tune_request",
})

SYSTEM_REALTIME_TYPES: Final[frozenset[str]] = frozenset({
    "clock",
    "start",
    "continue",
    "stop",
    "active_sensing",
    "reset",
})

SYSTEM_TYPES: Final[frozenset[str]] = SYSTEM_COMMON_TYPES | SYSTEM_REALTIME_TYPES

# =============================================================================
# Note names
# =============================================================================

NOTE_NAMES: Final[tuple[str, ...]] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)

# Names are upper-cased before matching, so a flat arrives as "B"
_ACCIDENTALS: Final[dict[str, int]] = {"#": 1, "B": -1}

_NOTE_PATTERN = re.compile(r"^([A-G])([#B]?)(-?\d+)?$")

DEFAULT_OCTAVE: Final[int] = 4

# =============================================================================
# CC aliases
# =============================================================================

CC_ALIASES: Final[dict[str, int]] = {
    "bank_msb": 0,
    "modwheel": 1,
    "mod": 1,
    "breath": 2,
    "foot": 4,
    "portamento_time": 5,
    "volume": 7,
    "balance": 8,
    "pan": 10,
    "expression": 11,
    "bank_lsb": 32,
    "sustain": 64,
    "hold": 64,
    "portamento": 65,
    "sostenuto": 66,
    "soft": 67,
    "all_sound_off": 120,
    "reset_all_controllers": 121,
    "all_notes_off": 123,
}


def note_value(name: str) -> int:
    """
    Resolve a note name to a MIDI note number.

    Accepts sharps ("F#2") and flats ("Bb3"). The octave defaults to 4
    when omitted, so "A" is 69.

    Args:
        name: Note name, case-insensitive

    Returns:
        MIDI note number (0-127)

    Raises:
        ValueError: If the name can't be parsed or is out of range
    """
    match = _NOTE_PATTERN.match(name.strip().upper())
    if match is None:
        raise ValueError(f"Invalid note name: {name!r}")

    letter, accidental, octave_text = match.groups()
    octave = int(octave_text) if octave_text is not None else DEFAULT_OCTAVE
    offset = _ACCIDENTALS.get(accidental, 0)

    number = (octave + 1) * 12 + NOTE_NAMES.index(letter) + offset
    if not 0 <= number <= 127:
        raise ValueError(f"Note out of range: {name!r} -> {number}")
    return number


def note_name(number: int) -> str:
    """Convert a MIDI note number to a name with octave (60 -> "C4")."""
    octave = (number // 12) - 1
    return f"{NOTE_NAMES[number % 12]}{octave}"


def resolve_cc_index(target: int | str) -> int:
    """
    Resolve a CC index given as number, numeric string or alias.

    Raises:
        ValueError: If the alias is unknown or the number is out of range
    """
    if isinstance(target, str):
        text = target.strip().lower()
        if text.startswith("cc."):
            text = text[3:]
        if text.isdigit():
            index = int(text)
        elif text in CC_ALIASES:
            index = CC_ALIASES[text]
        else:
            raise ValueError(f"Unknown CC alias: {target!r}")
    else:
        index = target

    if not 0 <= index <= 127:
        raise ValueError(f"CC index out of range: {index}")
    return index
