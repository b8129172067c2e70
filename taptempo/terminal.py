"""Raw-mode keyboard input.

The terminal is switched to raw mode for exactly one key read and restored
before anything is printed, so a crash never leaves the shell unusable.
Streams without a real file descriptor (pipes in tests, ``io.StringIO``) are
read as-is.
"""

from __future__ import annotations

import io
import os
import select
import sys
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional, TextIO

if os.name == "nt":
    import msvcrt
else:
    import termios
    import tty

ESC = "\x1b"
CTRL_C = "\x03"
CTRL_D = "\x04"
QUIT_CHARS = {"q", CTRL_C, CTRL_D}
ENTER_CHARS = {"\r", "\n"}

# Bytes following ESC within this window belong to the same key sequence.
ESCAPE_TIMEOUT_S = 0.05


class Key(Enum):
    HIT = "hit"
    QUIT = "quit"
    IGNORE = "ignore"


def _fileno(stream) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, io.UnsupportedOperation, ValueError):
        return None


def _is_tty(stream) -> bool:
    fd = _fileno(stream)
    return fd is not None and os.isatty(fd)


@contextmanager
def raw_mode(stream: Optional[TextIO] = None) -> Iterator[TextIO]:
    """Put ``stream``'s terminal in raw mode, restoring it on every exit path."""
    stream = stream if stream is not None else sys.stdin
    if os.name == "nt" or not _is_tty(stream):
        yield stream
        return
    fd = _fileno(stream)
    try:
        saved = termios.tcgetattr(fd)
        # TCSANOW keeps keys typed while the previous line was printing.
        tty.setraw(fd, termios.TCSANOW)
    except termios.error as exc:
        raise OSError(*exc.args) from exc
    try:
        yield stream
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        except termios.error as exc:
            raise OSError(*exc.args) from exc


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_char(stream) -> str:
    if not _is_tty(stream):
        return stream.read(1)
    # Bypass Python's buffering so select() sees every pending byte.
    fd = _fileno(stream)
    data = os.read(fd, 1)
    if not data:
        return ""
    remaining = _utf8_length(data[0]) - 1
    if remaining > 0:
        data += os.read(fd, remaining)
    return data.decode("utf-8", errors="replace")


def _pending(stream, timeout: float = ESCAPE_TIMEOUT_S) -> bool:
    if not _is_tty(stream):
        # In-memory input is fully available; end of input reads as "".
        return True
    ready, _, _ = select.select([_fileno(stream)], [], [], timeout)
    return bool(ready)


def _read_escape(stream) -> Key:
    if not _pending(stream):
        return Key.QUIT
    second = _read_char(stream)
    if second == "":
        return Key.QUIT
    if second in ("[", "O"):
        # CSI/SS3 sequence: parameters up to a final byte in '@'..'~'
        while True:
            ch = _read_char(stream)
            if ch == "" or "@" <= ch <= "~":
                break
    return Key.IGNORE


def classify(ch: str) -> Key:
    """Map one decoded character to a key action, escape sequences aside."""
    if ch == "" or ch in QUIT_CHARS:
        return Key.QUIT
    if ch in ENTER_CHARS:
        return Key.HIT
    if ch.isprintable():
        return Key.HIT
    return Key.IGNORE


def _read_key_windows() -> Key:
    ch = msvcrt.getwch()
    if ch in ("\x00", "\xe0"):
        # Function and arrow keys arrive as a two-character sequence
        msvcrt.getwch()
        return Key.IGNORE
    if ch == ESC:
        return Key.QUIT
    return classify(ch)


def read_key(stream: Optional[TextIO] = None) -> Key:
    """Block until one key is pressed and classify it as a hit, quit or noise."""
    stream = stream if stream is not None else sys.stdin
    if os.name == "nt" and _is_tty(stream):
        return _read_key_windows()
    ch = _read_char(stream)
    if ch == ESC:
        return _read_escape(stream)
    return classify(ch)
