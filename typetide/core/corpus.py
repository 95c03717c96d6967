"""Reference text construction.

Reads a dictionary (one word per line, or any whitespace separated words),
shuffles it, optionally perturbs words with digits, capitals and symbols,
shuffles again and joins everything into one string: the corpus.

Each perturbation is applied to every word independently with probability
equal to its ratio, so a ratio of 0.0 never changes a word and 1.0 changes
every word.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional, Protocol

from typetide.core.config import Config
from typetide.core.errors import CorpusEmpty, DictionaryUnavailable

logger = logging.getLogger(__name__)

BUILTIN_DICTIONARY = Path(__file__).resolve().parent.parent / "data" / "words.txt"

END_SYMBOLS = (".", ",", ";", ":", "!", "?")
SYMBOL_PAIRS = (
    ("(", ")"),
    ("[", "]"),
    ("{", "}"),
    ("<", ">"),
    ('"', '"'),
    ("'", "'"),
)
DIGITS = "0123456789"


class DictionarySource(Protocol):
    def read_all_text(self) -> str:
        ...


class FileDictionary:
    """Dictionary read from a user supplied file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read_all_text(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DictionaryUnavailable(f"Dictionary file not found: {self.path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise DictionaryUnavailable(f"Unable to read dictionary file {self.path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FileDictionary({str(self.path)!r})"


class BuiltinDictionary(FileDictionary):
    """The English word list shipped with the package."""

    def __init__(self) -> None:
        super().__init__(BUILTIN_DICTIONARY)


def dictionary_for(config: Config) -> FileDictionary:
    """Pick the dictionary source named by the config, or the built-in list."""
    if config.dictionary_path is None:
        return BuiltinDictionary()
    return FileDictionary(config.dictionary_path)


class TextCorpusBuilder:
    """Builds the immutable reference text for one session.

    ``rng`` is the only source of randomness in a session; pass a seeded
    :class:`random.Random` to get a reproducible corpus.
    """

    def __init__(
        self,
        numbers: bool = False,
        numbers_ratio: float = 0.05,
        uppercase: bool = False,
        uppercase_ratio: float = 0.15,
        symbols: bool = False,
        symbols_ratio: float = 0.10,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.numbers = numbers
        self.numbers_ratio = numbers_ratio
        self.uppercase = uppercase
        self.uppercase_ratio = uppercase_ratio
        self.symbols = symbols
        self.symbols_ratio = symbols_ratio
        self._rng = rng if rng is not None else random.Random()

    @classmethod
    def from_config(cls, config: Config, rng: Optional[random.Random] = None) -> "TextCorpusBuilder":
        """Builder using the toggles and ratios of ``config``."""
        return cls(
            numbers=config.numbers,
            numbers_ratio=config.numbers_ratio,
            uppercase=config.uppercase,
            uppercase_ratio=config.uppercase_ratio,
            symbols=config.symbols,
            symbols_ratio=config.symbols_ratio,
            rng=rng,
        )

    def build_from(self, source: DictionarySource) -> str:
        """Read ``source`` and build the corpus from its words."""
        corpus = self.build(source.read_all_text())
        logger.info("Built corpus of %d characters from %r", len(corpus), source)
        return corpus

    def build(self, text: str) -> str:
        words = text.split()
        if not words:
            raise CorpusEmpty("Dictionary contains no words")
        self._rng.shuffle(words)

        if self.numbers:
            words = [self._to_digits(w) if self._hit(self.numbers_ratio) else w for w in words]
        if self.uppercase:
            words = [self._capitalize(w) if self._hit(self.uppercase_ratio) else w for w in words]
        if self.symbols:
            words = [self._add_symbol(w) if self._hit(self.symbols_ratio) else w for w in words]

        self._rng.shuffle(words)
        return " ".join(words).strip()

    def _hit(self, ratio: float) -> bool:
        # random() is in [0, 1), so ratio 0.0 never hits and 1.0 always does
        return self._rng.random() < ratio

    def _to_digits(self, word: str) -> str:
        return "".join(self._rng.choice(DIGITS) for _ in word)

    @staticmethod
    def _capitalize(word: str) -> str:
        if not word:
            return word
        # keep a single character so multi-character mappings ("ß" -> "SS") do not grow the word
        return word[0].upper()[0] + word[1:]

    def _add_symbol(self, word: str) -> str:
        if not word:
            return word
        if self._rng.random() < 0.5:
            return word + self._rng.choice(END_SYMBOLS)
        opening, closing = self._rng.choice(SYMBOL_PAIRS)
        return f"{opening}{word}{closing}"


def build_corpus(config: Config, rng: Optional[random.Random] = None) -> str:
    """Build the corpus for ``config``; raises :class:`ConstructionError` subclasses."""
    return TextCorpusBuilder.from_config(config, rng=rng).build_from(dictionary_for(config))
