"""Tests for the production factories."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from midiplay_app import BindingConfig, MappingConfig, MidiPlayApp, Settings, create_app, create_player
from midiplay_player import MPlayerSlave, ProcessState


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        input_port="USB MIDI 1",
        channel=2,
        mplayer_program="/usr/local/bin/mplayer",
        player_flags="-vo x11",
        sweep_interval=0,
    )


@pytest.fixture
def apps() -> Iterator[list[MidiPlayApp]]:
    created: list[MidiPlayApp] = []
    yield created
    for app in created:
        app.player.quit()


MAPPING = MappingConfig(bindings=[BindingConfig(type="note", key="C4", action="play", file="a.mp4")])


class TestCreatePlayer:
    def test_uses_settings(self, settings: Settings):
        player = create_player(settings)
        try:
            assert player.flags == "-fixed-vo -idle -vo x11"
            assert player.state is ProcessState.ABSENT
            assert player.responds_to("seek") is True
            assert player._handle_factory.func is MPlayerSlave
            assert player._handle_factory.keywords == {"program": "/usr/local/bin/mplayer"}
        finally:
            player.quit()

    def test_explicit_flags(self, settings: Settings):
        player = create_player(settings, "-fs")
        try:
            assert player.flags == "-fixed-vo -idle -fs"
        finally:
            player.quit()


class TestCreateApp:
    def test_settings_fallback(self, settings: Settings, apps):
        app = create_app(settings, MAPPING)
        apps.append(app)

        assert app.channel == 2
        assert app._port_name == "USB MIDI 1"
        assert app.player.flags == "-fixed-vo -idle -vo x11"
        assert 60 in app.handler.callbacks["note"]

    def test_mapping_overrides_settings(self, settings: Settings, apps):
        mapping = MappingConfig(channel=0, flags="-fs", bindings=[])
        app = create_app(settings, mapping)
        apps.append(app)

        assert app.channel == 0
        assert app.player.flags == "-fixed-vo -idle -fs"

    def test_arguments_override_mapping(self, settings: Settings, apps):
        mapping = MappingConfig(channel=0, flags="-fs", bindings=[])
        app = create_app(settings, mapping, port_name="USB MIDI 2", channel=9, flags="-nosound")
        apps.append(app)

        assert app.channel == 9
        assert app._port_name == "USB MIDI 2"
        assert app.player.flags == "-fixed-vo -idle -nosound"


class TestSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MIDIPLAY_CHANNEL", "5")
        monkeypatch.setenv("MIDIPLAY_MPLAYER_PROGRAM", "mplayer2")

        settings = Settings(_env_file=None)

        assert settings.channel == 5
        assert settings.mplayer_program == "mplayer2"

    def test_defaults(self, monkeypatch):
        for name in ("MIDIPLAY_CHANNEL", "MIDIPLAY_INPUT_PORT", "MIDIPLAY_PLAYER_FLAGS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.channel is None
        assert settings.mplayer_program == "mplayer"
        assert settings.sweep_interval == 0.01
        assert settings.progress_timeout == 1.0

    def test_channel_out_of_range(self, monkeypatch):
        monkeypatch.setenv("MIDIPLAY_CHANNEL", "16")

        with pytest.raises(ValueError):
            Settings(_env_file=None)
