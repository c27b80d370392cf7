from __future__ import annotations

import os

import pytest

from docspell.terminal import Key, KeyEvent, TerminalEvents


class PipeStream:
    def __init__(self, fd: int):
        self.fd = fd

    def fileno(self) -> int:
        return self.fd


@pytest.fixture()
def feed():
    read_fd, write_fd = os.pipe()
    events = TerminalEvents(PipeStream(read_fd))  # type: ignore[arg-type]

    def _feed(data: bytes) -> KeyEvent:
        os.write(write_fd, data)
        return events._read_key()

    yield _feed
    os.close(read_fd)
    os.close(write_fd)


def test_plain_and_control_keys(feed) -> None:
    assert feed(b"y") == KeyEvent.of("y")
    assert feed(b"\r") == KeyEvent(Key.ENTER)
    assert feed(b"\x7f") == KeyEvent(Key.BACKSPACE)
    assert feed(b"\x03") == KeyEvent(Key.CHAR, "c", ctrl=True)


def test_arrow_keys_and_lone_escape(feed) -> None:
    assert feed(b"\x1b[A") == KeyEvent(Key.UP)
    assert feed(b"\x1b[B") == KeyEvent(Key.DOWN)
    assert feed(b"\x1b") == KeyEvent(Key.ESC)


def test_multibyte_character(feed) -> None:
    assert feed("ü".encode("utf-8")) == KeyEvent.of("ü")


def test_is_char_ignores_modifiers() -> None:
    assert KeyEvent.of("q").is_char("q")
    assert not KeyEvent(Key.CHAR, "q", ctrl=True).is_char("q")
    assert not KeyEvent(Key.ENTER).is_char("q")


def test_read_reports_keys() -> None:
    read_fd, write_fd = os.pipe()
    events = TerminalEvents(PipeStream(read_fd))  # type: ignore[arg-type]
    try:
        os.write(write_fd, b"n")
        assert events.read() == KeyEvent.of("n")
    finally:
        events.close()
        os.close(read_fd)
        os.close(write_fd)
