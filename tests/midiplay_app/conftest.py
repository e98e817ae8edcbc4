"""
Pytest fixtures for midiplay_app tests.
"""

from __future__ import annotations

import pytest

from midiplay_app import MidiPlayApp
from midiplay_router import MessageHandler

from mocks import MockInputPort, MockPlayer


@pytest.fixture
def mock_player() -> MockPlayer:
    return MockPlayer()


@pytest.fixture
def app(mock_player: MockPlayer) -> MidiPlayApp:
    """MidiPlayApp over a MockPlayer, not connected to any port."""
    return MidiPlayApp(handler=MessageHandler(), player=mock_player, poll_interval=0.001)


@pytest.fixture
def input_port(app: MidiPlayApp) -> MockInputPort:
    """MockInputPort attached to the app as its open input."""
    port = MockInputPort()
    app._port = port
    return port
