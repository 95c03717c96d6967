"""Test doubles for the clock, key input and render capabilities."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import pytest

from typetide.core.ports import KeyEvent, Position, Style


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def elapsed(self, since: float) -> float:
        return self.current - since

    def advance(self, seconds: float) -> None:
        self.current += seconds


class ScriptedKeys:
    """Returns queued events; an empty poll lets ``timeout`` pass on the clock."""

    def __init__(self, clock: FakeClock, events: Iterable[Optional[KeyEvent]] = ()) -> None:
        self.clock = clock
        self.events: List[Optional[KeyEvent]] = list(events)
        self.timeouts: List[float] = []

    def poll(self, timeout: float) -> Optional[KeyEvent]:
        self.timeouts.append(timeout)
        if self.events:
            return self.events.pop(0)
        self.clock.advance(timeout)
        return None


class RecordingSink:
    def __init__(self, width: int = 20, height: int = 6) -> None:
        self.width = width
        self.height = height
        self.frames = 0
        self.spans: List[Tuple[str, Position, Style]] = []
        self.cursor: Optional[Position] = None

    def viewport_size(self) -> Tuple[int, int]:
        return self.width, self.height

    def begin_frame(self) -> None:
        self.frames += 1
        self.spans = []

    def draw_text_span(self, text: str, position: Position, style: Style) -> None:
        self.spans.append((text, position, style))

    def set_cursor(self, position: Optional[Position]) -> None:
        self.cursor = position

    def end_frame(self) -> None:
        pass

    def texts(self, style: Style) -> List[str]:
        return [text for text, _, s in self.spans if s is style]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def scripted_keys(clock: FakeClock):
    def _make(*events: Optional[KeyEvent]) -> ScriptedKeys:
        return ScriptedKeys(clock, events)

    return _make


@pytest.fixture()
def sink_factory():
    def _make(width: int, height: int) -> RecordingSink:
        return RecordingSink(width=width, height=height)

    return _make
