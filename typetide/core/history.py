from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from typetide.core.errors import HistoryError
from typetide.core.stats import Results, Stats

logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY_LABEL = "default_dictionary"

STATS_FIELDS = (
    "wpm",
    "raw_accuracy",
    "raw_valid_characters_count",
    "raw_mistakes_count",
    "raw_typed_characters_count",
    "accuracy",
    "valid_characters_count",
    "typed_characters_count",
    "mistakes_count",
)
CONFIG_FIELDS = (
    "duration",
    "numbers",
    "numbers_ratio",
    "dictionary_path",
    "uppercase",
    "uppercase_ratio",
    "symbols",
    "symbols_ratio",
)
FIELDNAMES = ("local_datetime",) + STATS_FIELDS + CONFIG_FIELDS


class ResultsStore:
    """Results of completed tests, one CSV row per test.

    The file is created (with a header row) on the first :meth:`append`.
    Rows that cannot be parsed are skipped when loading.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        """Location of the CSV file."""
        return self._file_path

    def append(self, results: Results) -> None:
        """Add one row for ``results``.

        A file written with an older set of columns is rewritten with the
        current header first, keeping its rows.
        """
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            header = self._read_header()
            if header is not None and header != list(FIELDNAMES):
                self._rewrite(results)
            else:
                with self._file_path.open("a", newline="", encoding="utf-8") as fh:
                    writer = csv.DictWriter(fh, fieldnames=FIELDNAMES)
                    if header is None:
                        writer.writeheader()
                    writer.writerow(_to_row(results))
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise HistoryError(f"Could not save results to {self._file_path}: {e}") from e
        logger.info("Saved results to %s", self._file_path)

    def load(self) -> List[Results]:
        """All stored results, oldest first. A missing file means no history."""
        try:
            with self._file_path.open(newline="", encoding="utf-8") as fh:
                rows = list(csv.DictReader(fh))
        except FileNotFoundError:
            return []
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise HistoryError(f"Could not load results from {self._file_path}: {e}") from e

        results: List[Results] = []
        for line_no, row in enumerate(rows, start=2):
            try:
                results.append(_from_row(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable row %d in %s: %s", line_no, self._file_path, e)
        return results

    def _read_header(self) -> Optional[List[str]]:
        """Column names of the existing file, ``None`` if it is missing or empty."""
        try:
            with self._file_path.open(newline="", encoding="utf-8") as fh:
                return next(csv.reader(fh), None)
        except FileNotFoundError:
            return None

    def _rewrite(self, results: Results) -> None:
        with self._file_path.open(newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        logger.info("Upgrading %s to the current columns", self._file_path)
        with self._file_path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(fh, fieldnames=FIELDNAMES, restval="", extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)
            writer.writerow(_to_row(results))


def _to_row(results: Results) -> Dict[str, object]:
    row: Dict[str, object] = {"local_datetime": results.local_datetime.isoformat()}
    for name in STATS_FIELDS:
        row[name] = getattr(results.stats, name)
    for name in CONFIG_FIELDS:
        row[name] = getattr(results, name)
    if results.dictionary_path is None:
        row["dictionary_path"] = DEFAULT_DICTIONARY_LABEL
    return row


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _from_row(row: Dict[str, str]) -> Results:
    stats = Stats(
        wpm=float(row["wpm"]),
        raw_accuracy=float(row["raw_accuracy"]),
        raw_valid_characters_count=int(row["raw_valid_characters_count"]),
        raw_mistakes_count=int(row["raw_mistakes_count"]),
        raw_typed_characters_count=int(row["raw_typed_characters_count"]),
        accuracy=float(row["accuracy"]),
        valid_characters_count=int(row["valid_characters_count"]),
        typed_characters_count=int(row["typed_characters_count"]),
        mistakes_count=int(row["mistakes_count"]),
    )
    dictionary_path = row.get("dictionary_path") or DEFAULT_DICTIONARY_LABEL
    # rows written before symbols existed have no symbols columns
    return Results(
        stats=stats,
        completed=True,
        duration=int(row["duration"]),
        numbers=_parse_bool(row["numbers"]),
        numbers_ratio=float(row["numbers_ratio"]),
        uppercase=_parse_bool(row["uppercase"]),
        uppercase_ratio=float(row["uppercase_ratio"]),
        symbols=_parse_bool(row.get("symbols") or "false"),
        symbols_ratio=float(row.get("symbols_ratio") or 0.0),
        dictionary_path=None if dictionary_path == DEFAULT_DICTIONARY_LABEL else dictionary_path,
        local_datetime=datetime.fromisoformat(row["local_datetime"]),
    )
