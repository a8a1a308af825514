"""Buffered message log written to a console stream and appended to a file."""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Callable, Optional, TextIO

from .utilities import datef

RESTART_BANNER = b"\r\n** Restart **\r\n\n"
DEFAULT_BUFFER_SIZE = 60


class MessageLog:
    """Collects message text and appends it to a log file and an optional console.

    ``clock`` returns the current local unix time, or None while the clock is
    not set; when it gives a time each message is prefixed with a timestamp,
    marked with "z" when ``local_time_diff`` is zero.
    """

    def __init__(
        self,
        path: str | Path,
        console: Optional[TextIO] = None,
        clock: Optional[Callable[[], Optional[int]]] = None,
        local_time_diff: float = 0,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        self.path = Path(path)
        self.console = console
        self.clock = clock
        self.local_time_diff = local_time_diff
        self.buffer_size = buffer_size
        self._buf = bytearray()
        self._new_msg = True
        self._restart = True
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def write(self, data: str | bytes) -> int:
        """Add text to the current message; return the number of bytes taken."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        for byte in data:
            self._put(byte)
        return len(data)

    def end_msg(self) -> None:
        """Terminate the current message and flush it."""
        self.write(b"\r\n")
        self._flush(create_dir=False)
        self._buf = bytearray()
        self._new_msg = True

    def log(self, fmt: str, *args) -> None:
        """Format and record one complete message."""
        self.write(fmt % args if args else fmt)
        self.end_msg()

    def _start_message(self) -> None:
        self._new_msg = False
        self._buf = bytearray()
        if self._restart:
            self._restart = False
            for byte in RESTART_BANNER:
                self._put(byte)
        now = self.clock() if self.clock is not None else None
        if now is not None:
            for byte in (datef(now, "M/DD/YY hh:mm:ss") + " ").encode():
                self._put(byte)
            if self.local_time_diff == 0:
                self._buf[-1:] = b"z "

    def _put(self, byte: int) -> None:
        if self._new_msg:
            self._start_message()
        if len(self._buf) >= self.buffer_size:
            self._flush(create_dir=True)
            self._buf.clear()
        self._buf.append(byte)

    def _flush(self, create_dir: bool) -> None:
        data = bytes(self._buf)
        if self.console is not None:
            self.console.write(self._decoder.decode(data))
        try:
            handle = self.path.open("ab")
        except FileNotFoundError:
            if not create_dir:
                return
            try:
                self.path.parent.mkdir(exist_ok=True)
                handle = self.path.open("ab")
            except OSError:
                return
        except OSError:
            return
        with handle:
            handle.write(data)