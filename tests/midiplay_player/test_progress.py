"""Tests for progress snapshots."""

import pytest

from midiplay_player import Progress, get_percentage


@pytest.mark.parametrize(
    "length,position,expected",
    [
        (90.3, 40.1, 44),
        (100.0, 0.0, 0),
        (100.0, 100.0, 100),
        (60.0, 20.0, 33),
        (3.0, 2.0, 67),
    ],
)
def test_get_percentage(length, position, expected):
    assert get_percentage(length, position) == expected


def test_zero_length_is_zero_percent():
    """No reported duration means no progress rather than an error."""
    assert get_percentage(0.0, 12.5) == 0
    assert get_percentage(-1.0, 12.5) == 0


def test_from_times():
    progress = Progress.from_times(length=90.3, position=40.1)

    assert progress.length == 90.3
    assert progress.position == 40.1
    assert progress.percent == 44


def test_to_dict():
    progress = Progress.from_times(length=10.0, position=5.0)

    assert progress.to_dict() == {"length": 10.0, "position": 5.0, "percent": 50}


def test_progress_is_frozen():
    progress = Progress.from_times(length=10.0, position=5.0)

    with pytest.raises(AttributeError):
        progress.percent = 99
