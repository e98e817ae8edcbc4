"""
Pytest fixtures for midiplay_player tests.

Provides recording handle factories and fake executors.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from midiplay_player import Player

from mocks import FakeExecutor, RecordingFactory


@pytest.fixture
def factory() -> RecordingFactory:
    """Handle factory that returns MockPlayerHandle instances."""
    return RecordingFactory()


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """Executor that records submissions without running them."""
    return FakeExecutor()


@pytest.fixture
def player(factory: RecordingFactory) -> Iterator[Player]:
    """
    Player with real worker threads and a mock handle.

    sweep_interval=0 keeps tests fast.
    """
    player = Player(handle_factory=factory, sweep_interval=0, progress_timeout=2.0)
    yield player
    player.quit()
