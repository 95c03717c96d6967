"""Tests for typetide.app – command line and composition."""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path

import pytest

from typetide import app
from typetide.core.config import Config
from typetide.core.history import ResultsStore
from typetide.core.session import Mode
from typetide.core.stats import Results, Stats


@pytest.fixture()
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the application at a temp data directory instead of ~/.typetide."""
    monkeypatch.setattr(app, "DATA_DIR", tmp_path)
    return tmp_path


def _completed(wpm: float = 33.0) -> Results:
    return Results.from_config(Stats(wpm=wpm, accuracy=98.0), Config(), completed=True,
                               local_datetime=datetime(2024, 1, 1, 12, 0, 0))


class TestParser:
    def test_no_arguments(self):
        args = app.build_parser().parse_args([])
        assert args.command is None
        assert all(value is None for value in app.overrides_from_args(args).values())

    def test_options(self):
        args = app.build_parser().parse_args(
            ["--duration", "60", "--numbers", "yes", "--uppercase-ratio", "0.3", "--dictionary-path", "/w.txt"]
        )
        overrides = app.overrides_from_args(args)
        assert overrides["duration"] == 60
        assert overrides["numbers"] is True
        assert overrides["uppercase_ratio"] == 0.3
        assert overrides["dictionary_path"] == Path("/w.txt")

    def test_history_subcommand(self):
        args = app.build_parser().parse_args(["history", "--limit", "5"])
        assert args.command == "history"
        assert args.limit == 5

    def test_bad_bool(self):
        with pytest.raises(argparse.ArgumentTypeError):
            app.parse_bool("perhaps")

    @pytest.mark.parametrize("value,expected", [("true", True), ("0", False), ("No", False), ("on", True)])
    def test_parse_bool(self, value, expected):
        assert app.parse_bool(value) is expected


class TestPrepareSession:
    def test_builds_paused_engine(self, tmp_path: Path):
        path = tmp_path / "dict.txt"
        path.write_text("hello\n", encoding="utf-8")
        engine = app.prepare_session(Config(dictionary_path=path), seed=1)
        assert engine.mode is Mode.PAUSED


class TestReport:
    def test_cancelled(self, capsys, tmp_path: Path):
        store = ResultsStore(tmp_path / "r.csv")
        cancelled = Results.from_config(Stats(), Config(), completed=False)
        assert app.report(cancelled, store) == 0
        assert capsys.readouterr().out.strip() == "Test not finished."
        assert not store.file_path.exists()

    def test_completed_prints_and_saves(self, capsys, tmp_path: Path):
        store = ResultsStore(tmp_path / "r.csv")
        assert app.report(_completed(), store) == 0
        assert "WPM: 33.00" in capsys.readouterr().out
        assert len(store.load()) == 1

    def test_completed_without_saving(self, capsys):
        assert app.report(_completed(), None) == 0
        assert "WPM" in capsys.readouterr().out


class TestHistory:
    def test_empty(self):
        assert app.format_history([], 10) == ["No results saved yet."]

    def test_limit_keeps_latest(self):
        lines = app.format_history([_completed(1.0), _completed(2.0), _completed(3.0)], 2)
        assert len(lines) == 3
        assert "2.00" in lines[1]
        assert "3.00" in lines[2]

    def test_history_command(self, data_dir: Path, capsys):
        ResultsStore(data_dir / app.RESULTS_FILE_NAME).append(_completed(44.0))
        assert app.run(["history"]) == 0
        assert "44.00" in capsys.readouterr().out


class TestRun:
    def test_missing_dictionary_fails_before_ui(self, data_dir: Path, capsys, monkeypatch):
        def _no_ui(*args, **kwargs):
            raise AssertionError("terminal UI must not start")

        monkeypatch.setattr(app, "run_session", _no_ui)
        status = app.run(["--dictionary-path", str(data_dir / "missing.txt")])
        assert status == 1
        assert "Dictionary file not found" in capsys.readouterr().err

    def test_completed_session_saved(self, data_dir: Path, capsys, monkeypatch):
        monkeypatch.setattr(app, "run_session", lambda engine, colors: _completed(55.0))
        assert app.run(["--seed", "3"]) == 0
        assert "WPM: 55.00" in capsys.readouterr().out
        assert ResultsStore(data_dir / app.RESULTS_FILE_NAME).load()[0].stats.wpm == 55.0

    def test_save_results_disabled(self, data_dir: Path, monkeypatch):
        monkeypatch.setattr(app, "run_session", lambda engine, colors: _completed())
        assert app.run(["--save-results", "false"]) == 0
        assert not (data_dir / app.RESULTS_FILE_NAME).exists()

    def test_config_file_read_from_data_dir(self, data_dir: Path, monkeypatch):
        (data_dir / app.CONFIG_FILE_NAME).write_text("duration: 15\n", encoding="utf-8")
        seen = {}

        def _capture(engine, colors):
            seen["time_left"] = engine.time_left()
            return Results.from_config(Stats(), Config(), completed=False)

        monkeypatch.setattr(app, "run_session", _capture)
        assert app.run([]) == 0
        assert seen["time_left"] == 15.0

    def test_interrupted_session(self, data_dir: Path, capsys, monkeypatch):
        def _interrupt(engine, colors):
            raise KeyboardInterrupt

        monkeypatch.setattr(app, "run_session", _interrupt)
        assert app.run([]) == 130
        assert capsys.readouterr().out.strip() == "Test not finished."
        assert not (data_dir / app.RESULTS_FILE_NAME).exists()

    def test_unusable_log_directory(self, tmp_path: Path, capsys, monkeypatch):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        monkeypatch.setattr(app, "DATA_DIR", blocker)
        monkeypatch.setattr(app, "run_session", lambda engine, colors: _completed())
        assert app.run([]) == 1
        assert "Unable to open log file" in capsys.readouterr().err

    def test_unreadable_config_reported(self, data_dir: Path, capsys, monkeypatch):
        monkeypatch.setattr(app, "run_session", lambda engine, colors: _completed())
        assert app.run(["--config", str(data_dir / ("a" * 300) / "config.yaml")]) == 1
        assert "Unable to read config file" in capsys.readouterr().err
