"""
MPlayer slave-mode process handle

Runs MPlayer with -slave and talks to it over stdin/stdout.
Every method blocks until MPlayer has taken (or answered) the command.
Output is read by a background thread into a queue, so get() can give
up after ANSWER_TIMEOUT instead of hanging on a silent process.
"""

from __future__ import annotations

import logging
import queue
import shlex
import subprocess
import threading
import time
from typing import IO

from .exceptions import PlayerNotRunningError

logger = logging.getLogger(__name__)


class MPlayerSlave:
    """MPlayer process driven through its slave protocol"""

    PROGRAM = "mplayer"
    BASE_ARGS: tuple[str, ...] = ("-slave", "-quiet")

    # Seconds to wait for the process to exit after "quit"
    QUIT_TIMEOUT: float = 2.0

    # Seconds get() waits for an ANS_ reply
    ANSWER_TIMEOUT: float = 2.0

    # Passthrough commands Player.send() may dispatch
    COMMANDS: frozenset[str] = frozenset({"load_file", "pause", "stop", "seek", "volume", "mute"})

    def __init__(self, file: str, options: str = "", program: str = PROGRAM):
        """
        Start MPlayer playing the given file.

        Args:
            file: Media file to open on startup
            options: Extra MPlayer command-line flags
            program: MPlayer executable

        Raises:
            FileNotFoundError: If the executable can't be found
        """
        self._args = [program, *self.BASE_ARGS, *shlex.split(options), file]
        self._write_lock = threading.Lock()
        self._process = subprocess.Popen(
            self._args,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            bufsize=1,
        )
        self._lines: queue.Queue[str] = queue.Queue()
        self._reader = threading.Thread(
            target=self._read_output, name="midiplay-mplayer-output", daemon=True
        )
        self._reader.start()
        logger.info(f"MPlayer started (pid={self._process.pid}): {file}")

    @property
    def args(self) -> list[str]:
        """Command line the process was started with"""
        return list(self._args)

    @property
    def is_running(self) -> bool:
        return self._process.poll() is None

    @property
    def stdout(self) -> IO[str]:
        assert self._process.stdout is not None
        return self._process.stdout

    # ================================================================
    # Protocol
    # ================================================================

    def command(self, text: str) -> None:
        """
        Send one raw slave command.

        Raises:
            PlayerNotRunningError: If the process has exited
        """
        stdin = self._process.stdin
        if stdin is None or not self.is_running:
            raise PlayerNotRunningError(f"MPlayer is not running, can't send '{text}'")
        with self._write_lock:
            try:
                stdin.write(text + "\n")
                stdin.flush()
            except (BrokenPipeError, ValueError) as e:
                raise PlayerNotRunningError(f"MPlayer closed its input: {e}") from e
        logger.debug(f"MPlayer <- {text}")

    def readline(self, timeout: float | None = None) -> str:
        """
        Read one line of output; empty string once MPlayer closed it.

        Raises:
            queue.Empty: If timeout is given and no line arrived in time
        """
        line = self._lines.get(timeout=timeout)
        if not line:
            # Keep end of output visible to every later reader
            self._lines.put(line)
        return line

    def get(self, key: str) -> str:
        """
        Query a property, eg get("time_pos") -> "40.1".

        MPlayer answers "get_<key>" with a line like ANS_TIME_POSITION=40.1.
        Other output in between is skipped.

        Raises:
            PlayerNotRunningError: If output ends, or no answer arrives
                within ANSWER_TIMEOUT
        """
        self.command(f"get_{key}")
        deadline = time.monotonic() + self.ANSWER_TIMEOUT
        while True:
            remaining = deadline - time.monotonic()
            try:
                if remaining <= 0:
                    raise queue.Empty
                line = self.readline(timeout=remaining)
            except queue.Empty:
                raise PlayerNotRunningError(f"No answer from MPlayer for '{key}'") from None
            if not line:
                raise PlayerNotRunningError(f"MPlayer output closed while waiting for '{key}'")
            line = line.strip()
            if line.startswith("ANS_"):
                _, _, value = line.partition("=")
                return value.strip("'")

    def _read_output(self) -> None:
        """Reader thread: queue every output line, then "" at end of output"""
        try:
            for line in iter(self.stdout.readline, ""):
                self._lines.put(line)
        except (OSError, ValueError) as e:
            logger.debug(f"MPlayer output reader stopped: {e}")
        finally:
            self._lines.put("")

    # ================================================================
    # Commands
    # ================================================================

    def load_file(self, file: str, append: bool = False) -> None:
        """Load a media file, replacing the playlist unless append is True"""
        self.command(f"loadfile {_quote(file)} {int(append)}")

    def pause(self) -> None:
        """Toggle pause"""
        self.command("pause")

    def stop(self) -> None:
        """Stop playback"""
        self.command("stop")

    def seek(self, value: float, seek_type: int = 0) -> None:
        """
        Seek in the current media.

        Args:
            value: Seconds (type 0, 2) or percent (type 1)
            seek_type: 0 relative, 1 absolute percent, 2 absolute seconds
        """
        self.command(f"seek {value} {seek_type}")

    def volume(self, value: float, absolute: bool = False) -> None:
        """Change volume by value, or set it when absolute"""
        self.command(f"volume {value} {int(absolute)}")

    def mute(self, on: bool | None = None) -> None:
        """Toggle mute, or set it explicitly"""
        self.command("mute" if on is None else f"mute {int(on)}")

    def quit(self) -> None:
        """Make MPlayer exit and reap the process"""
        if self.is_running:
            try:
                self.command("quit")
            except PlayerNotRunningError:
                pass
        try:
            self._process.wait(timeout=self.QUIT_TIMEOUT)
        except subprocess.TimeoutExpired:
            logger.warning("MPlayer did not exit after quit, killing it")
            self._process.kill()
            self._process.wait()
        self._reader.join(timeout=self.QUIT_TIMEOUT)
        for stream in (self._process.stdin, self._process.stdout):
            if stream is not None:
                stream.close()
        logger.info("MPlayer exited")


def _quote(file: str) -> str:
    """Quote a path for the slave command line"""
    return '"' + file.replace("\\", "\\\\").replace('"', '\\"') + '"'
