"""Tests for the MPlayer slave-mode handle, without a real process."""

from __future__ import annotations

import io
import subprocess
import threading

import pytest

from midiplay_player import MPlayerSlave, PlayerHandle, PlayerNotRunningError


class SilentOutput:
    """stdout of a process that never writes until closed."""

    def __init__(self):
        self.released = threading.Event()

    def readline(self):
        self.released.wait(timeout=5)
        return ""

    def close(self):
        self.released.set()


class FakeProcess:
    """Stand-in for subprocess.Popen with in-memory pipes."""

    def __init__(self, args, output: str = "", hang: bool = False, silent: bool = False, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.pid = 4242
        self.stdin = io.StringIO()
        self.stdout = SilentOutput() if silent else io.StringIO(output)
        self.returncode: int | None = None
        self.hang = hang
        self.killed = False
        self.sent: list[str] = []

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        if self.hang and not self.killed:
            raise subprocess.TimeoutExpired(self.args, timeout)
        self.returncode = 0
        return 0

    def kill(self):
        self.killed = True


@pytest.fixture
def spawn(monkeypatch):
    """Patch Popen; returns a function building MPlayerSlave over a FakeProcess."""
    created: list[FakeProcess] = []

    def make(file="intro.mp4", options="", output="", hang=False, silent=False, **kwargs):
        def fake_popen(args, **popen_kwargs):
            process = FakeProcess(args, output=output, hang=hang, silent=silent, **popen_kwargs)
            created.append(process)
            return process

        monkeypatch.setattr("midiplay_player.slave.subprocess.Popen", fake_popen)
        slave = MPlayerSlave(file, options=options, **kwargs)
        return slave, created[-1]

    return make


def written(process: FakeProcess) -> list[str]:
    return process.stdin.getvalue().splitlines()


class TestStartup:
    def test_command_line(self, spawn):
        """Test MPlayer is started in slave mode with the flags and the file."""
        slave, process = spawn("intro.mp4", options="-fixed-vo -idle -fs")

        assert process.args == [
            "mplayer", "-slave", "-quiet", "-fixed-vo", "-idle", "-fs", "intro.mp4"
        ]
        assert slave.args == process.args
        assert process.kwargs["text"] is True

    def test_custom_program(self, spawn):
        slave, process = spawn("a.mp4", program="/opt/mplayer/bin/mplayer")

        assert process.args[0] == "/opt/mplayer/bin/mplayer"

    def test_satisfies_protocol(self, spawn):
        slave, _ = spawn()

        assert isinstance(slave, PlayerHandle)
        assert slave.is_running is True


class TestCommands:
    def test_load_file(self, spawn):
        slave, process = spawn()

        slave.load_file("my movie.mp4")
        slave.load_file("next.mp4", append=True)

        assert written(process) == ['loadfile "my movie.mp4" 0', 'loadfile "next.mp4" 1']

    def test_load_file_quotes(self, spawn):
        slave, process = spawn()

        slave.load_file('say "hi".mp4')

        assert written(process) == ['loadfile "say \\"hi\\".mp4" 0']

    def test_simple_commands(self, spawn):
        slave, process = spawn()

        slave.pause()
        slave.stop()
        slave.seek(30, 2)
        slave.seek(-5)
        slave.volume(50, absolute=True)
        slave.volume(-1)
        slave.mute()
        slave.mute(True)

        assert written(process) == [
            "pause",
            "stop",
            "seek 30 2",
            "seek -5 0",
            "volume 50 1",
            "volume -1 0",
            "mute",
            "mute 1",
        ]

    def test_command_after_exit_raises(self, spawn):
        slave, process = spawn()
        process.returncode = 0

        with pytest.raises(PlayerNotRunningError):
            slave.pause()


class TestQueries:
    def test_get_skips_unrelated_output(self, spawn):
        """Test get() returns the value of the first ANS_ line."""
        slave, process = spawn(output="Playing intro.mp4.\nA:  40.0 V:  40.0\nANS_TIME_POSITION=40.1\n")

        assert slave.get("time_pos") == "40.1"
        assert written(process) == ["get_time_pos"]

    def test_get_strips_quotes(self, spawn):
        slave, _ = spawn(output="ANS_FILENAME='intro.mp4'\n")

        assert slave.get("file_name") == "intro.mp4"

    def test_get_output_closed(self, spawn):
        slave, _ = spawn(output="Playing intro.mp4.\n")

        with pytest.raises(PlayerNotRunningError):
            slave.get("time_length")

    def test_get_times_out_on_silent_process(self, spawn, monkeypatch):
        """Test get() gives up when MPlayer never answers."""
        monkeypatch.setattr(MPlayerSlave, "ANSWER_TIMEOUT", 0.05)
        slave, process = spawn(silent=True)

        with pytest.raises(PlayerNotRunningError, match="No answer"):
            slave.get("time_pos")
        process.stdout.close()

    def test_declared_commands(self):
        """Test only playback commands are declared for passthrough."""
        assert MPlayerSlave.COMMANDS == {"load_file", "pause", "stop", "seek", "volume", "mute"}

    def test_readline(self, spawn):
        slave, _ = spawn(output="MPlayer 1.5\n")

        assert slave.readline() == "MPlayer 1.5\n"
        assert slave.readline() == ""


class TestQuit:
    def test_quit_sends_quit_and_waits(self, spawn):
        slave, process = spawn()
        stdin = process.stdin

        slave.quit()

        assert stdin.closed
        assert process.returncode == 0
        assert process.killed is False

    def test_quit_kills_hung_process(self, spawn, monkeypatch):
        slave, process = spawn(hang=True)
        monkeypatch.setattr(MPlayerSlave, "QUIT_TIMEOUT", 0.01)

        slave.quit()

        assert process.killed is True

    def test_quit_after_exit(self, spawn):
        """Test quit doesn't write to a process that already exited."""
        slave, process = spawn()
        process.returncode = 1

        slave.quit()

        assert process.stdin.closed
