"""Raw terminal input: key presses and resize notifications.

POSIX only, built on termios. Raw mode is held by :class:`ScopedRaw` for as
short as possible and always restored when the ``with`` block exits,
including on exceptions.
"""

from __future__ import annotations

import logging
import os
import select
import shutil
import signal
import sys
import termios
import tty
from dataclasses import dataclass
from typing import TextIO, Union

LOGGER = logging.getLogger(__name__)


class Key:
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESC = "esc"
    BACKSPACE = "backspace"
    TAB = "tab"
    CHAR = "char"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class KeyEvent:
    key: str
    char: str = ""
    ctrl: bool = False

    @classmethod
    def of(cls, char: str) -> KeyEvent:
        return cls(Key.CHAR, char)

    def is_char(self, char: str) -> bool:
        return self.key == Key.CHAR and self.char == char and not self.ctrl


@dataclass(frozen=True)
class ResizeEvent:
    columns: int
    rows: int


Event = Union[KeyEvent, ResizeEvent]

_ESCAPES = {
    b"[A": Key.UP,
    b"[B": Key.DOWN,
    b"[C": Key.RIGHT,
    b"[D": Key.LEFT,
    b"OA": Key.UP,
    b"OB": Key.DOWN,
    b"OC": Key.RIGHT,
    b"OD": Key.LEFT,
}


class ScopedRaw:
    """Keep the terminal in raw mode for the duration of a ``with`` block."""

    def __init__(self, stream: TextIO | None = None):
        self.fd = (stream or sys.stdin).fileno()
        self._saved: list | None = None

    def __enter__(self) -> ScopedRaw:
        self._saved = termios.tcgetattr(self.fd)
        tty.setraw(self.fd)
        return self

    def __exit__(self, *exc_info: object) -> bool:
        if self._saved is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            except termios.error as err:
                LOGGER.warning("Failed to restore terminal mode: %s", err)
            self._saved = None
        return False


def _utf8_length(lead: int) -> int:
    if lead >> 5 == 0b110:
        return 2
    if lead >> 4 == 0b1110:
        return 3
    if lead >> 3 == 0b11110:
        return 4
    return 1


class TerminalEvents:
    """Blocking reader of terminal events from stdin.

    Window size changes arrive through ``SIGWINCH``; the handler writes to a
    pipe so a blocked ``select`` wakes up and reports a :class:`ResizeEvent`.
    """

    ESCAPE_TIMEOUT = 0.05

    def __init__(self, stream: TextIO | None = None):
        self.fd = (stream or sys.stdin).fileno()
        self._wake_r: int | None = None
        self._wake_w: int | None = None
        self._previous_handler = None

    def _install_resize_handler(self) -> None:
        if self._wake_r is not None or not hasattr(signal, "SIGWINCH"):
            return
        wake_r, wake_w = os.pipe()
        os.set_blocking(wake_w, False)

        def _on_resize(signum: int, frame: object) -> None:
            try:
                os.write(wake_w, b"\0")
            except BlockingIOError:
                pass  # a wakeup is already pending

        try:
            self._previous_handler = signal.signal(signal.SIGWINCH, _on_resize)
        except ValueError:
            # signal handlers can only be installed from the main thread
            os.close(wake_r)
            os.close(wake_w)
            return
        self._wake_r, self._wake_w = wake_r, wake_w

    def close(self) -> None:
        if self._wake_r is None:
            return
        signal.signal(signal.SIGWINCH, self._previous_handler or signal.SIG_DFL)
        os.close(self._wake_r)
        os.close(self._wake_w)  # type: ignore[arg-type]
        self._wake_r = self._wake_w = None

    def read(self) -> Event:
        self._install_resize_handler()
        watched = [self.fd] if self._wake_r is None else [self.fd, self._wake_r]
        while True:
            readable, _, _ = select.select(watched, [], [])
            if self._wake_r is not None and self._wake_r in readable:
                os.read(self._wake_r, 1024)
                size = shutil.get_terminal_size()
                return ResizeEvent(size.columns, size.lines)
            if self.fd in readable:
                return self._read_key()

    def _pending(self) -> bytes:
        data = b""
        while select.select([self.fd], [], [], self.ESCAPE_TIMEOUT)[0]:
            chunk = os.read(self.fd, 8)
            if not chunk:
                break
            data += chunk
            if len(data) >= 2 and data[-1:].isalpha():
                break
        return data

    def _read_exact(self, n: int) -> bytes:
        data = b""
        while len(data) < n:
            chunk = os.read(self.fd, n - len(data))
            if not chunk:
                break
            data += chunk
        return data

    def _read_key(self) -> KeyEvent:
        first = os.read(self.fd, 1)
        if not first:
            raise EOFError("stdin closed while waiting for a key press")
        if first == b"\x1b":
            sequence = self._pending()
            if not sequence:
                return KeyEvent(Key.ESC)
            return KeyEvent(_ESCAPES.get(sequence, Key.UNKNOWN))
        if first in (b"\r", b"\n"):
            return KeyEvent(Key.ENTER)
        if first in (b"\x7f", b"\x08"):
            return KeyEvent(Key.BACKSPACE)
        if first == b"\t":
            return KeyEvent(Key.TAB)
        lead = first[0]
        if lead < 0x20:
            return KeyEvent(Key.CHAR, chr(lead + 0x60), ctrl=True)
        length = _utf8_length(lead)
        data = first + (self._read_exact(length - 1) if length > 1 else b"")
        return KeyEvent(Key.CHAR, data.decode("utf-8", errors="replace"))
