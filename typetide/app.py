"""Command-line entry point for the typetide typing test."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from typetide.core.config import Config, load_config
from typetide.core.corpus import build_corpus
from typetide.core.errors import ConstructionError, HistoryError, RenderError
from typetide.core.expected import ExpectedTextProvider
from typetide.core.history import ResultsStore
from typetide.core.session import SessionEngine
from typetide.core.stats import Results
from typetide.ui.terminal import run_session

logger = logging.getLogger(__name__)

DATA_DIR = Path.home() / ".typetide"
CONFIG_FILE_NAME = "config.yaml"
RESULTS_FILE_NAME = "results.csv"
LOG_FILE_NAME = "typetide.log"

_OVERRIDE_OPTIONS = (
    "duration",
    "numbers",
    "numbers_ratio",
    "uppercase",
    "uppercase_ratio",
    "symbols",
    "symbols_ratio",
    "dictionary_path",
    "save_results",
    "results_path",
)


def configure_logging(log_file: Path, verbose: bool = False) -> None:
    """Send application logs to ``log_file``; the terminal belongs to curses."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_file),
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_bool(value: str) -> bool:
    """Read a yes/no style command-line value."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1", "on"):
        return True
    if lowered in ("false", "no", "0", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    """Options of the test itself plus the ``history`` subcommand."""
    parser = argparse.ArgumentParser(
        prog="typetide",
        description="A minimalistic timed typing test for the terminal.",
    )
    parser.add_argument("-d", "--duration", type=int, help="Test duration in seconds.")
    parser.add_argument("-n", "--numbers", type=parse_bool, metavar="BOOL", help="Replace some words with numbers.")
    parser.add_argument("--numbers-ratio", type=float, metavar="RATIO", help="Share of words turned into numbers.")
    parser.add_argument("-u", "--uppercase", type=parse_bool, metavar="BOOL", help="Capitalize some words.")
    parser.add_argument("--uppercase-ratio", type=float, metavar="RATIO", help="Share of capitalized words.")
    parser.add_argument("-s", "--symbols", type=parse_bool, metavar="BOOL", help="Add punctuation and brackets.")
    parser.add_argument("--symbols-ratio", type=float, metavar="RATIO", help="Share of words given symbols.")
    parser.add_argument("--dictionary-path", type=Path, metavar="PATH", help="Word list, one word per line.")
    parser.add_argument("--save-results", type=parse_bool, metavar="BOOL", help="Append results to the history file.")
    parser.add_argument("--results-path", type=Path, metavar="PATH", help="CSV file results are saved to.")
    parser.add_argument("--config", type=Path, metavar="PATH", help="YAML config file to read.")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible test text.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")

    subparsers = parser.add_subparsers(dest="command")
    history = subparsers.add_parser("history", help="Show previous test results.")
    history.add_argument("--limit", type=int, default=20, help="Number of most recent results to show.")
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Config overrides given on the command line; ``None`` means not given."""
    return {name: getattr(args, name) for name in _OVERRIDE_OPTIONS}


def format_history(records: List[Results], limit: int) -> List[str]:
    """Table rows for the last ``limit`` results, all of them when ``limit`` is not positive."""
    if not records:
        return ["No results saved yet."]
    lines = [f"{'date':<19}  {'duration':>8}  {'wpm':>7}  {'accuracy':>8}  {'raw acc.':>8}"]
    for record in records[-limit:] if limit > 0 else records:
        stats = record.stats
        lines.append(
            f"{record.local_datetime:%Y-%m-%d %H:%M:%S}  {record.duration:>7}s  "
            f"{stats.wpm:>7.2f}  {stats.accuracy:>7.2f}%  {stats.raw_accuracy:>7.2f}%"
        )
    return lines


def show_history(store: ResultsStore, limit: int) -> int:
    """Print stored results and return the exit status."""
    try:
        records = store.load()
    except HistoryError as e:
        print(f"typetide: {e}", file=sys.stderr)
        return 1
    for line in format_history(records, limit):
        print(line)
    return 0


def prepare_session(config: Config, seed: Optional[int] = None) -> SessionEngine:
    """Build the corpus and the engine. Raises :class:`ConstructionError`."""
    rng = random.Random(seed) if seed is not None else None
    corpus = build_corpus(config, rng=rng)
    return SessionEngine(config, ExpectedTextProvider(corpus))


def report(results: Results, store: Optional[ResultsStore]) -> int:
    """Print the outcome of a test and save it to ``store`` when completed."""
    if not results.completed:
        print("Test not finished.")
        return 0
    for line in results.stats.summary_lines():
        print(line)
    if store is None:
        return 0
    try:
        store.append(results)
    except HistoryError as e:
        logger.error("%s", e)
        print(f"typetide: {e}", file=sys.stderr)
        return 1
    return 0


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run one test (or show history) and return the exit status."""
    args = build_parser().parse_args(argv)
    log_file = DATA_DIR / LOG_FILE_NAME
    try:
        configure_logging(log_file, verbose=args.verbose)
    except OSError as e:
        print(f"typetide: Unable to open log file {log_file}: {e}", file=sys.stderr)
        return 1

    base = Config(results_path=DATA_DIR / RESULTS_FILE_NAME)
    config_path = args.config if args.config is not None else DATA_DIR / CONFIG_FILE_NAME

    try:
        config = load_config(config_path, overrides_from_args(args), base=base)
        if args.command == "history":
            return show_history(ResultsStore(config.results_path), args.limit)
        engine = prepare_session(config, seed=args.seed)
    except ConstructionError as e:
        logger.error("Unable to prepare the test: %s", e)
        print(f"typetide: {e}", file=sys.stderr)
        return 1

    try:
        results = run_session(engine, config.colors)
    except RenderError as e:
        logger.error("Terminal error: %s", e)
        print(f"typetide: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Test interrupted")
        print("Test not finished.")
        return 130

    store = ResultsStore(config.results_path) if config.save_results else None
    return report(results, store)


def main() -> None:
    sys.exit(run())
