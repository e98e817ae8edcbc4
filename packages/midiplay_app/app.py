"""
midiplay Application

Wires a MIDI input port to the message handler and the handler's
callbacks to the player:

    mido input -> MessageHandler.process() -> callback -> Player command

The run loop drains pending MIDI input, then calls Player.check() so
a failed background command stops the application. Each poll runs in a
worker thread; the progress and quit bindings block on the player.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import mido

from midiplay_player import Player
from midiplay_router import MessageHandler

from .mapping_models import BindingConfig, MappingConfig

logger = logging.getLogger(__name__)

MIDI_MAX: int = 127


class MidiPlayApp:
    """
    Supervising application for the router and the player.

    Dependencies are injected via constructor for testability.
    Use create_app() factory for production instances.
    """

    POLL_INTERVAL: float = 0.005  # seconds between input polls

    def __init__(
        self,
        handler: MessageHandler,
        player: Player,
        port_name: str | None = None,
        channel: int | None = None,
        poll_interval: float = POLL_INTERVAL,
    ):
        """
        Args:
            handler: Message handler holding the bindings
            player: Player the bindings drive
            port_name: MIDI input port name. If None, uses first available.
            channel: Channel filter for channel messages (None: all)
            poll_interval: Seconds between input polls
        """
        self._handler = handler
        self._player = player
        self._port_name = port_name
        self._port: Any = None
        self._channel = channel
        self._poll_interval = poll_interval
        self._running = False

    @property
    def handler(self) -> MessageHandler:
        return self._handler

    @property
    def player(self) -> Player:
        return self._player

    @property
    def channel(self) -> int | None:
        return self._channel

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_connected(self) -> bool:
        return self._port is not None

    # ================================================================
    # Bindings
    # ================================================================

    def bind(self, binding: BindingConfig) -> None:
        """Register one mapping binding with the message handler"""
        action = self._make_action(binding)
        key = binding.resolved_key

        if binding.type == "note":
            def on_note(velocity: int) -> None:
                # Note on with velocity 0 is a note off
                if velocity > 0:
                    action(velocity)
            self._handler.add_callback("note", key, on_note)
        elif binding.type == "cc":
            self._handler.add_callback("cc", key, action)
        else:
            self._handler.add_callback("system", key, lambda: action(None))

        logger.debug(f"Bound {binding.type}[{key!r}] -> {binding.action}")

    def bind_all(self, mapping: MappingConfig) -> None:
        """Register every binding of a mapping"""
        for binding in mapping.bindings:
            self.bind(binding)
        logger.info(f"Loaded {len(mapping.bindings)} binding(s)")

    def _make_action(self, binding: BindingConfig) -> Callable[[int | None], Any]:
        """
        Build the callback for a binding.

        The callback receives the note velocity or CC value (None for
        system messages). A CC value drives seek and volume when the
        binding has no explicit args.
        """
        player = self._player
        args = list(binding.args)

        if binding.action == "play":
            file = binding.file
            return lambda value: player.play(file)
        if binding.action == "quit":
            def quit_player(value: int | None) -> None:
                player.quit()
                self.stop()
            return quit_player
        if binding.action == "progress":
            def log_progress(value: int | None) -> None:
                progress = player.progress()
                if progress is not None:
                    logger.info(
                        f"Progress: {progress.position:.1f}s / {progress.length:.1f}s ({progress.percent}%)"
                    )
            return log_progress
        if binding.action == "seek" and not args:
            # Absolute percent
            return lambda value: player.send("seek", _scale(value), 1)
        if binding.action == "volume" and not args:
            return lambda value: player.send("volume", _scale(value), True)

        command = binding.action
        return lambda value: player.send(command, *args)

    # ================================================================
    # Input
    # ================================================================

    def connect(self) -> bool:
        """
        Open the MIDI input port

        Returns:
            True if connected successfully
        """
        try:
            available_ports = mido.get_input_names()

            if not available_ports:
                logger.warning("No MIDI input ports available")
                return False

            if self._port_name:
                if self._port_name not in available_ports:
                    logger.warning(f"MIDI port '{self._port_name}' not found")
                    return False
                port_name = self._port_name
            else:
                port_name = available_ports[0]

            self._port = mido.open_input(port_name)
            logger.info(f"MIDI input connected to: {port_name}")
            return True

        except Exception as e:
            logger.error(f"MIDI connection error: {e}")
            return False

    def disconnect(self) -> None:
        """Close the MIDI input port"""
        if self._port:
            self._port.close()
            self._port = None
            logger.info("MIDI input disconnected")

    def process(self, message: Any) -> bool | None:
        """Route one message through the handler"""
        logger.debug(f"MIDI in: {message}")
        return self._handler.process(self._channel, message)

    def poll(self) -> int:
        """
        Route every pending input message, then surface player failures.

        Returns:
            Number of messages read

        Raises:
            PlayerProcessError: If a background player task failed
        """
        count = 0
        if self._port is not None:
            for message in self._port.iter_pending():
                self.process(message)
                count += 1
        self._player.check()
        return count

    # ================================================================
    # Lifecycle
    # ================================================================

    async def run(self) -> None:
        """Poll input until stop() is called or a player task fails"""
        self._running = True
        logger.info("midiplay running")
        try:
            while self._running:
                await asyncio.to_thread(self.poll)
                await asyncio.sleep(self._poll_interval)
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop the run loop"""
        self._running = False

    def close(self) -> None:
        """Stop, close the input and quit the player"""
        self.stop()
        self.disconnect()
        self._player.quit()
        logger.info("midiplay stopped")


def _scale(value: int | None) -> int:
    """Map a 0-127 MIDI value onto 0-100"""
    if value is None:
        return 0
    return round(value / MIDI_MAX * 100)
