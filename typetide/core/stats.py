from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from typetide.core.config import Config


@dataclass(frozen=True)
class Stats:
    """Statistics of a finished test.

    Two families of counters are kept:
      * **raw** – every keystroke, classified when it was typed and never
        revised, even if the character was deleted afterwards.
      * **corrected** – the final input compared with the expected text.

    ``wpm`` is computed from corrected valid characters only, with a word
    normalised to five characters.
    """

    wpm: float = 0.0
    raw_accuracy: float = 0.0
    raw_valid_characters_count: int = 0
    raw_mistakes_count: int = 0
    raw_typed_characters_count: int = 0
    accuracy: float = 0.0
    valid_characters_count: int = 0
    typed_characters_count: int = 0
    mistakes_count: int = 0

    def summary_lines(self) -> List[str]:
        """Human readable lines, as printed after a test."""
        return [
            f"WPM: {self.wpm:.2f}",
            f"Raw accuracy: {self.raw_accuracy:.2f}%",
            f"Raw valid characters: {self.raw_valid_characters_count}",
            f"Raw mistakes: {self.raw_mistakes_count}",
            f"Raw characters typed: {self.raw_typed_characters_count}",
            f"Accuracy after corrections: {self.accuracy:.2f}%",
            f"Valid characters after corrections: {self.valid_characters_count}",
            f"Mistakes after corrections: {self.mistakes_count}",
            f"Characters typed after corrections: {self.typed_characters_count}",
        ]


def percentage(numerator: float, denominator: float) -> float:
    """``numerator`` as a percentage of ``denominator``, 0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100.0


def calculate_stats(
    typed: str,
    expected: str,
    raw_valid_count: int,
    raw_mistake_count: int,
    duration_seconds: float,
) -> Stats:
    """Derive :class:`Stats` from the final input and the matching expected slice."""
    typed_count = len(typed)
    mistakes = sum(1 for a, b in zip(typed, expected) if a != b)
    # positions with no expected counterpart are mistakes as well
    mistakes += max(0, typed_count - len(expected))
    valid = typed_count - mistakes

    wpm = (valid / 5.0) * (60.0 / duration_seconds) if duration_seconds > 0 else 0.0

    return Stats(
        wpm=wpm,
        raw_accuracy=percentage(raw_valid_count, raw_valid_count + raw_mistake_count),
        raw_valid_characters_count=raw_valid_count,
        raw_mistakes_count=raw_mistake_count,
        raw_typed_characters_count=raw_valid_count + raw_mistake_count,
        accuracy=percentage(valid, typed_count),
        valid_characters_count=valid,
        typed_characters_count=typed_count,
        mistakes_count=mistakes,
    )


@dataclass(frozen=True)
class Results:
    """Stats of one test together with the settings it was run with."""

    stats: Stats
    completed: bool
    duration: int
    numbers: bool
    numbers_ratio: float
    uppercase: bool
    uppercase_ratio: float
    symbols: bool
    symbols_ratio: float
    dictionary_path: Optional[str]
    local_datetime: datetime = field(default_factory=lambda: datetime.now().astimezone())

    @classmethod
    def from_config(
        cls,
        stats: Stats,
        config: Config,
        completed: bool,
        local_datetime: Optional[datetime] = None,
    ) -> "Results":
        """Results of a test run with ``config``."""
        extra = {} if local_datetime is None else {"local_datetime": local_datetime}
        return cls(
            stats=stats,
            completed=completed,
            duration=config.duration,
            numbers=config.numbers,
            numbers_ratio=config.numbers_ratio,
            uppercase=config.uppercase,
            uppercase_ratio=config.uppercase_ratio,
            symbols=config.symbols,
            symbols_ratio=config.symbols_ratio,
            dictionary_path=str(config.dictionary_path) if config.dictionary_path else None,
            **extra,
        )
