"""
midiplay Factory

Factory functions for creating production MidiPlayApp instances.
Separates object creation from business logic (DI pattern).
"""

from __future__ import annotations

from functools import partial

from midiplay_player import MPlayerSlave, Player
from midiplay_router import MessageHandler

from .app import MidiPlayApp
from .config import Settings
from .mapping_models import MappingConfig


def create_player(settings: Settings, flags: str | None = None) -> Player:
    """
    Create a Player driving a real MPlayer process.

    Args:
        settings: Application settings
        flags: Extra MPlayer flags (default: settings.player_flags)
    """
    return Player(
        flags if flags is not None else settings.player_flags,
        handle_factory=partial(MPlayerSlave, program=settings.mplayer_program),
        sweep_interval=settings.sweep_interval,
        progress_timeout=settings.progress_timeout,
    )


def create_app(
    settings: Settings,
    mapping: MappingConfig,
    port_name: str | None = None,
    channel: int | None = None,
    flags: str | None = None,
) -> MidiPlayApp:
    """
    Create a MidiPlayApp with real I/O dependencies.

    Explicit arguments win over the mapping, which wins over settings.

    Args:
        settings: Application settings
        mapping: Validated mapping with the bindings to register
        port_name: MIDI input port name (None for settings / first available)
        channel: Channel filter (None for mapping / settings)
        flags: Extra MPlayer flags (None for mapping / settings)

    Returns:
        Configured MidiPlayApp with bindings registered
    """
    if channel is None:
        channel = mapping.channel if mapping.channel is not None else settings.channel
    if flags is None:
        flags = mapping.flags

    app = MidiPlayApp(
        handler=MessageHandler(),
        player=create_player(settings, flags),
        port_name=port_name or settings.input_port,
        channel=channel,
        poll_interval=settings.poll_interval,
    )
    app.bind_all(mapping)
    return app
