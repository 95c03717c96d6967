"""Curses color pairs for each render style."""

from __future__ import annotations

import curses
from typing import Dict, Tuple

from typetide.core.config import ColorScheme
from typetide.core.ports import Style

CURSES_COLORS: Dict[str, int] = {
    "default": -1,
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}

# Fixed styles; typed characters use the configurable scheme
STATIC_STYLES: Dict[Style, Tuple[str, str]] = {
    Style.CURRENT_LINE: ("white", "default"),
    Style.FOLLOWING_LINES: ("default", "default"),
    Style.INFO: ("yellow", "default"),
    Style.HELP_WINDOW: ("default", "default"),
}


def style_colors(scheme: ColorScheme) -> Dict[Style, Tuple[str, str]]:
    """(foreground, background) color names for every :class:`Style`."""
    colors = dict(STATIC_STYLES)
    colors[Style.CORRECT] = (scheme.correct_match_fg, scheme.correct_match_bg)
    colors[Style.INCORRECT] = (scheme.incorrect_match_fg, scheme.incorrect_match_bg)
    return colors


def init_color_pairs(scheme: ColorScheme) -> Dict[Style, int]:
    """Register one curses color pair per style and return their attributes.

    Must be called after ``curses.initscr``. Without color support every style
    falls back to plain text, with mistakes shown in reverse video.
    """
    if not curses.has_colors():
        return {style: curses.A_REVERSE if style is Style.INCORRECT else curses.A_NORMAL for style in Style}

    curses.start_color()
    curses.use_default_colors()
    attrs: Dict[Style, int] = {}
    for pair_number, (style, (fg, bg)) in enumerate(style_colors(scheme).items(), start=1):
        curses.init_pair(pair_number, CURSES_COLORS[fg], CURSES_COLORS[bg])
        attrs[style] = curses.color_pair(pair_number)
    attrs[Style.FOLLOWING_LINES] |= curses.A_DIM
    return attrs
