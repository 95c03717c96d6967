from __future__ import annotations

import logging
from enum import Enum
from itertools import groupby
from typing import List, Optional

from typetide.core.config import Config
from typetide.core.expected import ExpectedTextProvider
from typetide.core.layout import LineLayout, compute_layout
from typetide.core.ports import (
    Clock,
    KeyCode,
    KeyEvent,
    KeyInputSource,
    MonotonicClock,
    Position,
    RenderSink,
    Style,
)
from typetide.core.stats import Results, Stats, calculate_stats

logger = logging.getLogger(__name__)

# Terminals report ctrl+Backspace as ctrl+h or ctrl+w
WORD_DELETE_CHARS = ("h", "w")

HELP_LINES = [
    "",
    " Navigation:",
    " 's' - Start/resume the test",
    " <Esc> - Pause the test",
    " 'q' - Quit",
    " '?' - Close this window",
    "",
    " Configuration:",
    " --duration <seconds> - Set test duration",
    " --numbers true - Include numbers in the test",
    " --uppercase true - Include uppercase letters",
    " --symbols true - Include punctuation and brackets",
    "",
    " Run 'typetide --help' in your terminal to get more information ",
    "",
]


class Mode(Enum):
    PAUSED = "paused"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class SessionEngine:
    """Timed typing test state machine.

    The session starts ``PAUSED``. ``s`` starts (or resumes) it, ``Esc``
    pauses it and ``q`` while paused cancels it. Once the configured duration
    has elapsed on the running clock, :meth:`tick` moves it to ``FINISHED``.
    Time spent paused is not counted: on resume the start time is pushed
    forward by the length of the pause.

    Raw counters record every typed character as valid or a mistake at the
    moment it was typed and are never decremented, not even by Backspace.
    """

    def __init__(
        self,
        config: Config,
        expected: ExpectedTextProvider,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        self._expected = expected
        self._clock = clock if clock is not None else MonotonicClock()
        self._mode = Mode.PAUSED
        self._input = ""
        self._is_started = False
        self._start_time = 0.0
        self._pause_anchor: Optional[float] = None
        self._raw_valid_count = 0
        self._raw_mistake_count = 0
        self._show_help = False
        self._results: Optional[Results] = None

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def input(self) -> str:
        """Text typed so far, after corrections."""
        return self._input

    @property
    def is_started(self) -> bool:
        return self._is_started

    @property
    def raw_valid_count(self) -> int:
        return self._raw_valid_count

    @property
    def raw_mistake_count(self) -> int:
        return self._raw_mistake_count

    @property
    def show_help(self) -> bool:
        """Whether the help window is open."""
        return self._show_help

    @property
    def results(self) -> Optional[Results]:
        """Results once the session reached ``FINISHED`` or ``CANCELLED``."""
        return self._results

    def is_over(self) -> bool:
        """True once the test is finished or cancelled."""
        return self._mode in (Mode.FINISHED, Mode.CANCELLED)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> None:
        """Apply one key press to the current mode."""
        if self._mode is Mode.PAUSED:
            self._handle_paused_key(event)
        elif self._mode is Mode.RUNNING:
            self._handle_running_key(event)
        # FINISHED and CANCELLED ignore further input

    def tick(self) -> Optional[Results]:
        """Finish the test if its time is up. Returns the results when over."""
        if (
            self._mode is Mode.RUNNING
            and self._is_started
            and self._clock.elapsed(self._start_time) >= self._config.duration
        ):
            self._finish()
        return self._results

    def time_left(self) -> float:
        """Seconds left on the running clock, never negative."""
        duration = float(self._config.duration)
        if self.is_over():
            return 0.0
        if not self._is_started:
            return duration
        running = self._clock.elapsed(self._start_time)
        if self._mode is Mode.PAUSED and self._pause_anchor is not None:
            running -= self._clock.elapsed(self._pause_anchor)
        return max(0.0, duration - running)

    def _handle_paused_key(self, event: KeyEvent) -> None:
        if event.code is KeyCode.ESC:
            self._show_help = False
            return
        if event.code is not KeyCode.CHAR or event.ctrl or event.alt:
            return
        if event.char == "s":
            self._resume()
        elif event.char == "q":
            self._cancel()
        elif event.char == "?":
            self._show_help = not self._show_help

    def _handle_running_key(self, event: KeyEvent) -> None:
        if event.code is KeyCode.ESC:
            self._pause()
        elif event.code is KeyCode.BACKSPACE:
            if event.ctrl or event.alt:
                self._delete_last_word()
            else:
                self._input = self._input[:-1]
        elif event.ctrl and event.char in WORD_DELETE_CHARS:
            self._delete_last_word()
        elif not (event.ctrl or event.alt) and len(event.char) == 1 and event.char.isprintable():
            self._type_char(event.char)

    def _resume(self) -> None:
        if self._is_started:
            paused_for = self._clock.elapsed(self._pause_anchor) if self._pause_anchor is not None else 0.0
            self._start_time += paused_for
            logger.info("Test resumed after %.1fs pause", paused_for)
        else:
            self._start_time = self._clock.now()
            self._is_started = True
            logger.info("Test started, duration %ss", self._config.duration)
        self._pause_anchor = None
        self._show_help = False
        self._mode = Mode.RUNNING

    def _pause(self) -> None:
        self._pause_anchor = self._clock.now()
        self._mode = Mode.PAUSED
        logger.info("Test paused with %.1fs left", self.time_left())

    def _type_char(self, char: str) -> None:
        self._input += char
        if char == self._expected.char_at(len(self._input) - 1):
            self._raw_valid_count += 1
        else:
            self._raw_mistake_count += 1

    def _delete_last_word(self) -> None:
        head = self._input.rstrip()
        cut = max(head.rfind(" "), head.rfind("\t"))
        head = head[: cut + 1].rstrip() if cut >= 0 else ""
        self._input = head + " " if head else ""

    def _finish(self) -> None:
        typed = self._input
        stats = calculate_stats(
            typed,
            self._expected.get_text(len(typed)),
            self._raw_valid_count,
            self._raw_mistake_count,
            self._config.duration,
        )
        self._results = Results.from_config(stats, self._config, completed=True)
        self._mode = Mode.FINISHED
        logger.info("Test finished: %.2f wpm, %.2f%% accuracy", stats.wpm, stats.accuracy)

    def _cancel(self) -> None:
        self._results = Results.from_config(Stats(), self._config, completed=False)
        self._mode = Mode.CANCELLED
        logger.info("Test cancelled")

    # ------------------------------------------------------------------
    # Control loop
    # ------------------------------------------------------------------

    def run(self, sink: RenderSink, keys: KeyInputSource, tick_rate: float = 1.0) -> Results:
        """Render, wait for a key or the next tick, repeat until the test is over.

        Errors raised by ``sink`` propagate to the caller unchanged.
        """
        last_tick = self._clock.now()
        while True:
            results = self.tick()
            if results is not None:
                return results

            self.render(sink)

            timeout = max(0.0, tick_rate - self._clock.elapsed(last_tick))
            event = keys.poll(timeout)
            if event is not None:
                self.handle_key(event)
                if self._results is not None:
                    return self._results

            if self._clock.elapsed(last_tick) >= tick_rate:
                last_tick = self._clock.now()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, sink: RenderSink) -> None:
        """Draw one frame: the status row on top and the text below it."""
        width, height = sink.viewport_size()
        sink.begin_frame()
        cursor: Optional[Position] = None
        if width >= 1 and height >= 1:
            self._render_info(sink, width)
            if height > 1:
                cursor = self._render_text(sink, width, top=1, rows=height - 1)
            if self._show_help:
                self._render_help(sink, width, height)
        sink.set_cursor(cursor if self._mode is Mode.RUNNING else None)
        sink.end_frame()

    def status_message(self) -> str:
        """Text of the status row for the current mode."""
        if self._mode is Mode.RUNNING:
            return "press 'Esc' to pause the test"
        if self._is_started:
            return "press 's' to unpause the test, press 'q' to quit"
        return "press 's' to start the test, press 'q' to quit"

    def time_left_label(self) -> str:
        """Remaining whole seconds, as shown while running."""
        seconds = int(self.time_left())
        unit = "second" if seconds == 1 else "seconds"
        return f"{seconds} {unit} left"

    def _render_info(self, sink: RenderSink, width: int) -> None:
        sink.draw_text_span(self.time_left_label(), (0, 0), Style.INFO)
        message = self.status_message()
        sink.draw_text_span(message, (max(0, width - len(message)), 0), Style.INFO)

    def _render_text(self, sink: RenderSink, width: int, top: int, rows: int) -> Position:
        layout = compute_layout(len(self._input), width, self._expected)
        # keep the cursor row, and the lookahead row when there is room, on screen
        first_row = max(0, layout.line_index - max(rows - 2, 0))

        self._render_typed(sink, layout, top, first_row)

        cursor_y = top + layout.line_index - first_row
        if layout.current_line_remainder:
            sink.draw_text_span(layout.current_line_remainder, (layout.line_offset, cursor_y), Style.CURRENT_LINE)
        for offset, row in enumerate(layout.following_rows(), start=1):
            if layout.line_index + offset - first_row >= rows:
                break
            sink.draw_text_span(row, (0, cursor_y + offset), Style.FOLLOWING_LINES)
        return layout.line_offset, cursor_y

    def _render_typed(self, sink: RenderSink, layout: LineLayout, top: int, first_row: int) -> None:
        expected = layout.already_typed
        width = layout.width

        def span_key(index: int):
            style = Style.CORRECT if self._input[index] == expected[index] else Style.INCORRECT
            return index // width, style

        # typed positions show the expected character, colored by correctness
        for (row, style), group in groupby(range(first_row * width, len(self._input)), key=span_key):
            indices = list(group)
            text = expected[indices[0]:indices[-1] + 1]
            sink.draw_text_span(text, (indices[0] % width, top + row - first_row), style)

    def _render_help(self, sink: RenderSink, width: int, height: int) -> None:
        for position, line in help_window_lines(width, height):
            sink.draw_text_span(line, position, Style.HELP_WINDOW)


def help_window_lines(width: int, height: int) -> List[tuple]:
    """Bordered help window centred in a ``width`` x ``height`` viewport."""
    inner = max(len(line) for line in HELP_LINES)
    title = " Help "
    top = "┌" + title + "─" * (inner - len(title)) + "┐"
    body = ["│" + line.ljust(inner) + "│" for line in HELP_LINES]
    bottom = "└" + "─" * inner + "┘"
    box = [top] + body + [bottom]

    x = max(0, (width - len(top)) // 2)
    y = max(0, (height - len(box)) // 2)
    return [((x, y + i), line) for i, line in enumerate(box)]
