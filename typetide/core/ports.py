"""Capabilities the session engine needs from the outside world.

The engine only talks to these protocols. ``typetide.ui.terminal`` provides
the curses implementation; tests provide fakes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Tuple

Position = Tuple[int, int]  # (x, y), zero based


class Clock(Protocol):
    def now(self) -> float:
        ...

    def elapsed(self, since: float) -> float:
        ...


class MonotonicClock:
    """Wall clock backed by :func:`time.monotonic`, in seconds."""

    def now(self) -> float:
        return time.monotonic()

    def elapsed(self, since: float) -> float:
        return time.monotonic() - since


class KeyCode(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    ESC = "esc"


@dataclass(frozen=True)
class KeyEvent:
    code: KeyCode
    char: str = ""
    ctrl: bool = False
    alt: bool = False

    @classmethod
    def key(cls, char: str, ctrl: bool = False, alt: bool = False) -> "KeyEvent":
        return cls(KeyCode.CHAR, char=char, ctrl=ctrl, alt=alt)

    @classmethod
    def backspace(cls, ctrl: bool = False, alt: bool = False) -> "KeyEvent":
        return cls(KeyCode.BACKSPACE, ctrl=ctrl, alt=alt)

    @classmethod
    def esc(cls) -> "KeyEvent":
        return cls(KeyCode.ESC)


class KeyInputSource(Protocol):
    def poll(self, timeout: float) -> Optional[KeyEvent]:
        """Wait up to ``timeout`` seconds for a key press."""
        ...


class Style(Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    CURRENT_LINE = "current_line"
    FOLLOWING_LINES = "following_lines"
    INFO = "info"
    HELP_WINDOW = "help_window"


class RenderSink(Protocol):
    def viewport_size(self) -> Tuple[int, int]:
        """Return ``(width, height)`` in character cells."""
        ...

    def begin_frame(self) -> None:
        ...

    def draw_text_span(self, text: str, position: Position, style: Style) -> None:
        ...

    def set_cursor(self, position: Optional[Position]) -> None:
        """Place the cursor, or hide it when ``position`` is ``None``."""
        ...

    def end_frame(self) -> None:
        ...
