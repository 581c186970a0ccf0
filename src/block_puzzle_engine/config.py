from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Tuple

from block_puzzle_engine.exceptions import ConfigError
from block_puzzle_engine.game import GameConfig, ScoringRules, SelectorConfig


logger = logging.getLogger(__name__)

SECTIONS = {
    "game": GameConfig,
    "selector": SelectorConfig,
    "scoring": ScoringRules,
}


def default_config() -> Dict[str, Dict[str, Any]]:
    return {name: asdict(cls()) for name, cls in SECTIONS.items()}


def _deep_merge(default: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(default)
    for key, value in loaded.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _check_type(section: str, key: str, value: Any, default: Any) -> None:
    # int fields take ints only (bool excluded), float fields take ints or floats,
    # fields defaulting to None take None or an int
    if isinstance(value, bool):
        ok = isinstance(default, bool)
    elif default is None:
        ok = value is None or isinstance(value, int)
    elif isinstance(default, float):
        ok = isinstance(value, (int, float))
    elif isinstance(default, int):
        ok = isinstance(value, int)
    else:
        ok = isinstance(value, type(default))
    if not ok:
        raise ConfigError(f"Config value {section}.{key} has wrong type: {value!r}")


def build_config(data: Dict[str, Any]) -> Tuple[GameConfig, SelectorConfig, ScoringRules]:
    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise ConfigError(f"Unknown config section(s): {', '.join(sorted(unknown))}")
    merged = _deep_merge(default_config(), data)
    built = []
    for name, cls in SECTIONS.items():
        section = merged[name]
        if not isinstance(section, dict):
            raise ConfigError(f"Config section '{name}' must be an object")
        allowed = {f.name for f in fields(cls)}
        extra = set(section) - allowed
        if extra:
            raise ConfigError(f"Unknown key(s) in '{name}': {', '.join(sorted(extra))}")
        for f in fields(cls):
            if f.name in section:
                _check_type(name, f.name, section[f.name], f.default)
        obj = cls(**section)
        obj.validate()
        built.append(obj)
    game, selector, scoring = built
    return game, selector, scoring


def load_config(path: str | Path) -> Tuple[GameConfig, SelectorConfig, ScoringRules]:
    """Read a JSON config file; missing sections and keys keep their defaults."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must hold a JSON object")
    logger.info("Loaded config from %s", path)
    return build_config(data)
