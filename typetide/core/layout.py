"""Maps the flat expected text onto wrapped terminal rows.

The input area is ``width`` columns wide. With ``typed_length`` characters
typed, the cursor sits on row ``typed_length // width`` at column
``typed_length % width``. Only the rows up to and including the cursor row,
plus one lookahead row, are requested from the provider; the result is split
into what has been typed, the rest of the cursor row, and the rows after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol


class TextSource(Protocol):
    def get_text(self, length: int) -> str:
        ...


@dataclass(frozen=True)
class LineLayout:
    already_typed: str
    current_line_remainder: str
    following_lines: str
    line_index: int
    line_offset: int
    width: int

    def following_rows(self) -> List[str]:
        """``following_lines`` cut into rows of ``width`` characters."""
        text = self.following_lines
        return [text[i:i + self.width] for i in range(0, len(text), self.width)]


def compute_layout(typed_length: int, width: int, source: TextSource) -> LineLayout:
    """Split the text around the cursor into rows of ``width`` characters."""
    if width < 1:
        raise ValueError(f"width must be at least 1, got {width}")
    if typed_length < 0:
        raise ValueError(f"typed_length must be non-negative, got {typed_length}")

    line_index, line_offset = divmod(typed_length, width)
    expected = source.get_text((line_index + 2) * width)

    # str slicing is by code point, never by byte
    split_at = (line_index + 1) * width
    current_block, following_lines = expected[:split_at], expected[split_at:]
    already_typed, remainder = current_block[:typed_length], current_block[typed_length:]

    return LineLayout(
        already_typed=already_typed,
        current_line_remainder=remainder,
        following_lines=following_lines,
        line_index=line_index,
        line_offset=line_offset,
        width=width,
    )
