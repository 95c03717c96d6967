"""Exception types raised by the typetide core."""

from __future__ import annotations


class ConstructionError(Exception):
    """A session could not be prepared; raised before any terminal UI starts."""


class DictionaryUnavailable(ConstructionError):
    """The dictionary file could not be opened or decoded."""


class CorpusEmpty(ConstructionError):
    """The dictionary contained no words to build a reference text from."""


class ConfigError(ConstructionError):
    """The configuration file exists but cannot be used."""


class RenderError(Exception):
    """Drawing to the terminal failed; the running session is aborted."""


class HistoryError(Exception):
    """The results history file could not be read or written."""
