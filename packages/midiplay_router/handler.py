"""
Message handler - routes incoming MIDI messages to registered callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping
from types import MappingProxyType
from typing import Any, Protocol

from .constants import (
    CATEGORIES,
    CATEGORY_CC,
    CATEGORY_NOTE,
    CATEGORY_SYSTEM,
    SYSTEM_TYPES,
    note_value,
    resolve_cc_index,
)

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]


class Message(Protocol):
    """
    The slice of mido.Message the handler reads.

    Channel messages also carry channel/note/velocity or
    channel/control/value depending on their type.
    """

    type: str


class MessageHandler:
    """
    Directs what should happen when MIDI messages are received.

    Design:
    - One callback per (category, key); registering again overwrites
    - note/cc lookups try the exact key first, then the wildcard (None)
    - System messages are keyed by their lower-cased type and ignore
      the channel filter

    Usage:
        >>> handler = MessageHandler()
        >>> _ = handler.add_note_callback("C4", lambda velocity: print(velocity))
        >>> _ = handler.add_callback("cc", None, lambda value: print(value))
        >>> handler.process(0, mido.Message("note_on", note=60, velocity=90))
        90
        True
    """

    def __init__(self) -> None:
        self._callbacks: dict[str, dict[Hashable, Callback]] = {
            category: {} for category in CATEGORIES
        }

    @property
    def callbacks(self) -> Mapping[str, Mapping[Hashable, Callback]]:
        """Read-only view of the registry."""
        return MappingProxyType(
            {category: MappingProxyType(table) for category, table in self._callbacks.items()}
        )

    # ================================================================
    # Registration
    # ================================================================

    def add_callback(
        self,
        category: str,
        key: Hashable,
        callback: Callback,
    ) -> dict[Hashable, Callback]:
        """
        Add a callback for a given message category.

        Args:
            category: "note", "cc" or "system"
            key: Note number / CC index, None for the wildcard, or a
                system message name
            callback: Called with the velocity (note), the value (cc),
                or no arguments (system)

        Returns:
            The category's current key -> callback mapping

        Raises:
            ValueError: If the category is unknown
        """
        table = self._table(category)
        if category == CATEGORY_SYSTEM and isinstance(key, str):
            key = key.lower()
        table[key] = callback
        logger.debug(f"Callback registered: {category}[{key!r}]")
        return table

    def add_note_callback(self, note: int | str | None, callback: Callback) -> dict[Hashable, Callback]:
        """
        Add a callback for a given note.

        Args:
            note: Note number, note name such as "C4" or "Bb3", or None
                for any note
            callback: Called with the note-on velocity
        """
        if isinstance(note, str):
            note = note_value(note)
        return self.add_callback(CATEGORY_NOTE, note, callback)

    def add_cc_callback(self, index: int | str | None, callback: Callback) -> dict[Hashable, Callback]:
        """
        Add a callback for a given control change index.

        Args:
            index: CC number, alias such as "volume", or None for any CC
            callback: Called with the CC value
        """
        if index is not None:
            index = resolve_cc_index(index)
        return self.add_callback(CATEGORY_CC, index, callback)

    def add_system_callback(self, name: str, callback: Callback) -> dict[Hashable, Callback]:
        """Add a callback for a system message such as "start" or "stop"."""
        return self.add_callback(CATEGORY_SYSTEM, name, callback)

    def remove_callback(self, category: str, key: Hashable) -> None:
        """Remove a callback. Missing keys are ignored."""
        self._table(category).pop(key, None)

    # ================================================================
    # Dispatch
    # ================================================================

    def process(self, channel: int | None, message: Message) -> bool | None:
        """
        Process a message for the given channel.

        Args:
            channel: Channel filter (0-15), or None to accept every channel
            message: Incoming message

        Returns:
            True if a callback was called, None otherwise
        """
        if message.type in SYSTEM_TYPES:
            return self.system_message(message)
        return self.channel_message(channel, message)

    def channel_message(self, channel: int | None, message: Any) -> bool | None:
        """Route a channel message if it passes the channel filter."""
        if channel is not None and message.channel != channel:
            return None

        if message.type == "note_on":
            return self.note_message(message)
        if message.type == "control_change":
            return self.cc_message(message)
        return None

    def note_message(self, message: Any) -> bool | None:
        """Find and call a note callback if it exists."""
        callback = self._lookup(CATEGORY_NOTE, message.note)
        if callback is None:
            return None
        callback(message.velocity)
        return True

    def cc_message(self, message: Any) -> bool | None:
        """Find and call a CC callback if it exists."""
        callback = self._lookup(CATEGORY_CC, message.control)
        if callback is None:
            return None
        callback(message.value)
        return True

    def system_message(self, message: Message) -> bool | None:
        """Find and call a system message callback if it exists."""
        callback = self._callbacks[CATEGORY_SYSTEM].get(message.type.lower())
        if callback is None:
            return None
        callback()
        return True

    # ================================================================
    # Helpers
    # ================================================================

    def _table(self, category: str) -> dict[Hashable, Callback]:
        try:
            return self._callbacks[category]
        except KeyError:
            raise ValueError(
                f"Unknown message category '{category}'. Must be one of {', '.join(CATEGORIES)}"
            ) from None

    def _lookup(self, category: str, key: int) -> Callback | None:
        """Exact key first, then the wildcard."""
        table = self._callbacks[category]
        callback = table.get(key)
        if callback is None:
            callback = table.get(None)
        return callback
