from __future__ import annotations


class ExpectedTextProvider:
    """Serves the text the user is expected to type.

    The corpus is treated as endless: it is padded with one space and
    repeated as often as needed. Lengths are counted in characters, so
    multi-byte scripts are cut on character boundaries.
    """

    def __init__(self, corpus: str) -> None:
        self._corpus = corpus

    @property
    def corpus(self) -> str:
        """The text that repeats endlessly."""
        return self._corpus

    def get_text(self, length: int) -> str:
        """Return exactly ``length`` characters of expected text."""
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        padded = self._corpus + " "
        repeats = length // len(padded) + 1
        return (padded * repeats)[:length]

    def char_at(self, index: int) -> str:
        """Expected character at position ``index`` (0-based)."""
        return self.get_text(index + 1)[index]
