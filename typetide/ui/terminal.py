"""Curses implementation of the render sink and key input source."""

from __future__ import annotations

import curses
import logging
import os
from typing import Dict, Optional, Tuple

from typetide.core.config import ColorScheme
from typetide.core.errors import RenderError
from typetide.core.ports import KeyEvent, Position, Style
from typetide.core.session import SessionEngine
from typetide.core.stats import Results
from typetide.ui.colors import init_color_pairs

logger = logging.getLogger(__name__)

ESC = "\x1b"
DEL = "\x7f"


def translate_key(key, next_key=None) -> Optional[KeyEvent]:
    """Turn a value returned by ``get_wch`` into a :class:`KeyEvent`.

    ``next_key`` is the key read right after an Escape, if any; together they
    form an Alt combination.
    """
    if isinstance(key, int):
        if key == curses.KEY_BACKSPACE:
            return KeyEvent.backspace()
        return None
    if key == ESC:
        if next_key is None:
            return KeyEvent.esc()
        inner = translate_key(next_key)
        if inner is None:
            return None
        return KeyEvent(inner.code, char=inner.char, ctrl=inner.ctrl, alt=True)
    if key == DEL:
        return KeyEvent.backspace()
    if len(key) == 1 and ord(key) < 32:
        # ctrl+a .. ctrl+z arrive as 0x01 .. 0x1a; ctrl+Backspace usually as ctrl+h
        return KeyEvent.key(chr(ord(key) + 96), ctrl=True)
    return KeyEvent.key(key)


class CursesTerminal:
    def __init__(self, stdscr, attrs: Dict[Style, int]) -> None:
        self._screen = stdscr
        self._attrs = attrs

    def viewport_size(self) -> Tuple[int, int]:
        height, width = self._screen.getmaxyx()
        return width, height

    def begin_frame(self) -> None:
        self._screen.erase()

    def draw_text_span(self, text: str, position: Position, style: Style) -> None:
        x, y = position
        width, height = self.viewport_size()
        if not text or y < 0 or y >= height or x < 0 or x >= width:
            return
        text = text[: width - x]
        if y == height - 1 and x + len(text) >= width:
            # writing the bottom-right cell moves the cursor off screen
            text = text[: width - 1 - x]
        try:
            self._screen.addstr(y, x, text, self._attrs.get(style, curses.A_NORMAL))
        except curses.error as e:
            raise RenderError(f"Unable to draw text at {position}: {e}") from e

    def set_cursor(self, position: Optional[Position]) -> None:
        if position is None:
            self._cursor_visibility(0)
            return
        x, y = position
        width, height = self.viewport_size()
        if 0 <= x < width and 0 <= y < height:
            self._cursor_visibility(1)
            self._screen.move(y, x)

    def end_frame(self) -> None:
        try:
            self._screen.refresh()
        except curses.error as e:
            raise RenderError(f"Unable to refresh terminal: {e}") from e

    def poll(self, timeout: float) -> Optional[KeyEvent]:
        self._screen.timeout(max(0, int(timeout * 1000)))
        key = self._read()
        if key is None:
            return None
        next_key = None
        if key == ESC:
            self._screen.nodelay(True)
            next_key = self._read()
        return translate_key(key, next_key)

    def _read(self):
        try:
            return self._screen.get_wch()
        except curses.error:
            # raised by curses when the timeout expires without a key press
            return None

    def _cursor_visibility(self, visibility: int) -> None:
        try:
            curses.curs_set(visibility)
        except curses.error:
            logger.debug("Terminal does not support changing cursor visibility")


def run_session(engine: SessionEngine, colors: ColorScheme, tick_rate: float = 1.0) -> Results:
    """Run ``engine`` full screen; the terminal is restored even on errors."""
    os.environ.setdefault("ESCDELAY", "25")

    def _session(stdscr) -> Results:
        terminal = CursesTerminal(stdscr, init_color_pairs(colors))
        return engine.run(terminal, terminal, tick_rate=tick_rate)

    return curses.wrapper(_session)
