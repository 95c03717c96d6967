"""Test configuration: defaults, YAML config file and command-line overrides.

Values are layered in this order, each layer overriding the previous one:

  1. the defaults declared on :class:`Config`
  2. a YAML mapping read from the config file (if the file exists)
  3. options passed on the command line

Example config file::

    duration: 60
    dictionary_path: /usr/share/dict/words
    numbers: true
    numbers_ratio: 0.1
    uppercase: true
    uppercase_ratio: 0.3
    colors:
      correct_match_fg: green
      incorrect_match_bg: red

Ratios outside ``[0, 1]`` and non-positive durations are ignored with a
warning, so the core only ever sees valid values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from typetide.core.errors import ConfigError

logger = logging.getLogger(__name__)

COLOR_NAMES = ("default", "black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

_RATIO_KEYS = ("numbers_ratio", "uppercase_ratio", "symbols_ratio")
_FLAG_KEYS = ("numbers", "uppercase", "symbols", "save_results")
_PATH_KEYS = ("dictionary_path", "results_path")


@dataclass(frozen=True)
class ColorScheme:
    """Colors used for typed characters. Names from :data:`COLOR_NAMES`."""

    correct_match_fg: str = "green"
    correct_match_bg: str = "default"
    incorrect_match_fg: str = "default"
    incorrect_match_bg: str = "red"


@dataclass(frozen=True)
class Config:
    duration: int = 30
    numbers: bool = False
    numbers_ratio: float = 0.05
    uppercase: bool = False
    uppercase_ratio: float = 0.15
    symbols: bool = False
    symbols_ratio: float = 0.10
    dictionary_path: Optional[Path] = None
    save_results: bool = True
    results_path: Optional[Path] = None
    colors: ColorScheme = field(default_factory=ColorScheme)


def load_config(
    config_path: Optional[Path],
    overrides: Optional[Mapping[str, Any]] = None,
    base: Optional[Config] = None,
) -> Config:
    """Build a :class:`Config` from defaults, the YAML file and overrides.

    ``overrides`` maps field names to values; ``None`` values mean "not given"
    and are skipped. Raises :class:`ConfigError` if the file cannot be parsed.
    """
    config = base if base is not None else Config()
    if config_path is not None:
        settings = _read_config_file(config_path)
        if settings is not None:
            config = apply_settings(config, settings, source=str(config_path))
    if overrides:
        given = {key: value for key, value in overrides.items() if value is not None}
        config = apply_settings(config, given, source="command line")
    return config


def apply_settings(config: Config, settings: Mapping[str, Any], source: str) -> Config:
    """Return a copy of ``config`` with valid entries of ``settings`` applied."""
    changes: Dict[str, Any] = {}
    for key, value in settings.items():
        if key == "duration":
            duration = _coerce(int, key, value, source)
            if duration <= 0:
                logger.warning("%s: ignoring non-positive duration %s", source, duration)
                continue
            changes[key] = duration
        elif key in _RATIO_KEYS:
            ratio = _coerce(float, key, value, source)
            if not 0.0 <= ratio <= 1.0:
                logger.warning("%s: ignoring %s=%s, expected a value between 0 and 1", source, key, ratio)
                continue
            changes[key] = ratio
        elif key in _FLAG_KEYS:
            if not isinstance(value, bool):
                raise ConfigError(f"{source}: '{key}' must be true or false, got {value!r}")
            changes[key] = value
        elif key in _PATH_KEYS:
            changes[key] = Path(str(value)).expanduser()
        elif key == "colors":
            changes[key] = _apply_colors(config.colors, value, source)
        else:
            logger.warning("%s: unknown option '%s' ignored", source, key)

    if changes:
        logger.info("%s: applied %s", source, ", ".join(sorted(changes)))
    return replace(config, **changes)


def _read_config_file(path: Path) -> Optional[Mapping[str, Any]]:
    """Options from the YAML file at ``path``, or ``None`` when there is no such file."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path.name}: expected a YAML mapping of options")
    return raw


def _coerce(kind: type, key: str, value: Any, source: str) -> Any:
    if isinstance(value, bool):
        raise ConfigError(f"{source}: '{key}' must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{source}: '{key}' must be a number, got {value!r}") from exc


def _apply_colors(colors: ColorScheme, value: Any, source: str) -> ColorScheme:
    if not isinstance(value, dict):
        raise ConfigError(f"{source}: 'colors' must be a mapping")
    changes = {}
    for key, name in value.items():
        if key not in ColorScheme.__dataclass_fields__:
            logger.warning("%s: unknown color '%s' ignored", source, key)
            continue
        name = str(name).strip().lower()
        if name not in COLOR_NAMES:
            logger.warning("%s: unsupported color %r for %s, keeping %s", source, name, key, getattr(colors, key))
            continue
        changes[key] = name
    return replace(colors, **changes)
