"""Tests for typetide.core.stats – statistics and results."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from typetide.core.config import Config
from typetide.core.stats import Results, Stats, calculate_stats, percentage


class TestStatsDefaults:
    def test_all_zero(self):
        s = Stats()
        assert s.wpm == 0.0
        assert s.accuracy == 0.0
        assert s.raw_accuracy == 0.0
        assert s.typed_characters_count == 0
        assert s.raw_typed_characters_count == 0

    def test_summary_lines(self):
        lines = Stats(wpm=42.5, accuracy=97.123).summary_lines()
        assert lines[0] == "WPM: 42.50"
        assert "Accuracy after corrections: 97.12%" in lines
        assert len(lines) == 9


class TestPercentage:
    def test_zero_denominator(self):
        assert percentage(5, 0) == 0.0

    def test_half(self):
        assert percentage(1, 2) == 50.0


class TestCalculateStats:
    def test_perfect_input(self):
        s = calculate_stats("hello world", "hello world", 11, 0, 30)
        assert s.mistakes_count == 0
        assert s.valid_characters_count == 11
        assert s.accuracy == 100.0
        assert s.raw_accuracy == 100.0

    def test_empty_input(self):
        s = calculate_stats("", "", 0, 0, 30)
        assert s.accuracy == 0.0
        assert s.raw_accuracy == 0.0
        assert s.wpm == 0.0

    def test_mistakes_counted_by_position(self):
        s = calculate_stats("abxy", "abcd", 2, 2, 60)
        assert s.mistakes_count == 2
        assert s.valid_characters_count == 2
        assert s.typed_characters_count == 4
        assert s.accuracy == 50.0

    def test_wpm_formula(self):
        s = calculate_stats("a" * 300, "a" * 300, 300, 0, 60)
        assert s.wpm == pytest.approx(60.0)

    def test_wpm_scales_with_duration(self):
        s = calculate_stats("a" * 50, "a" * 50, 50, 0, 30)
        assert s.wpm == pytest.approx(20.0)

    def test_wpm_ignores_uncorrected_mistakes(self):
        s = calculate_stats("aaaaaxxxxx", "aaaaaaaaaa", 5, 5, 60)
        assert s.wpm == pytest.approx(1.0)

    def test_raw_counters_independent_of_input(self):
        s = calculate_stats("abc", "abc", 3, 4, 60)
        assert s.raw_valid_characters_count == 3
        assert s.raw_mistakes_count == 4
        assert s.raw_typed_characters_count == 7
        assert s.raw_accuracy == pytest.approx(300 / 7)
        assert s.accuracy == 100.0

    def test_multibyte(self):
        s = calculate_stats("Բարեւ", "Բարեզ", 4, 1, 60)
        assert s.typed_characters_count == 5
        assert s.mistakes_count == 1

    def test_expected_shorter_than_input(self):
        s = calculate_stats("abcd", "ab", 2, 2, 60)
        assert s.mistakes_count == 2


class TestResults:
    def test_from_config(self):
        config = Config(duration=45, numbers=True, numbers_ratio=0.2, dictionary_path=Path("/tmp/w.txt"))
        stamp = datetime(2024, 1, 2, 3, 4, 5)
        r = Results.from_config(Stats(wpm=10.0), config, completed=True, local_datetime=stamp)
        assert r.completed
        assert r.duration == 45
        assert r.numbers and r.numbers_ratio == 0.2
        assert r.dictionary_path == str(Path("/tmp/w.txt"))
        assert r.local_datetime == stamp
        assert r.stats.wpm == 10.0

    def test_builtin_dictionary_has_no_path(self):
        r = Results.from_config(Stats(), Config(), completed=False)
        assert r.dictionary_path is None
        assert not r.completed
        assert r.local_datetime.tzinfo is not None
