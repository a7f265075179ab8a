"""
Configuration - YAML settings with environment overrides.

Example file:

    correlation:
      worker_count: 8
      confidence_window: 10
    window:
      start_offset: 0
      count: 10000

Environment variables of the form IQ_XCORR__SECTION__KEY override the
file, e.g. IQ_XCORR__CORRELATION__WORKER_COUNT=4.
"""

import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "IQ_XCORR__"
SECTIONS = ("correlation", "window")


@dataclass
class CorrelationConfig:
    worker_count: Optional[int] = None  # None = one worker per CPU
    confidence_window: int = 10


@dataclass
class WindowConfig:
    start_offset: int = 0
    count: int = 10000


@dataclass
class AppConfig:
    correlation: CorrelationConfig = field(default_factory=CorrelationConfig)
    window: WindowConfig = field(default_factory=WindowConfig)


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")
        return data


def coerce_env_value(val: str) -> Any:
    """Interpret an environment string as YAML scalar (ints, null, bools)."""
    try:
        return yaml.safe_load(val)
    except yaml.YAMLError:
        return val


def os_environ_items() -> List[Tuple[str, str]]:
    return list(os.environ.items())


def _build_section(cls, section: str, values: Any):
    """Construct a section dataclass, rejecting unknown keys and non-int values."""
    if values is None:
        values = {}
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{section}' must be a mapping")

    known = {f.name: f for f in fields(cls)}
    for key, value in values.items():
        if key not in known:
            raise ValueError(f"Unknown config key '{section}.{key}'")
        # Every setting is an int; worker_count may also be null
        if value is None and key == "worker_count":
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(
                f"Config key '{section}.{key}' must be an integer (got {value!r})"
            )
    return cls(**values)


def load_config(path_str: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a YAML file, then apply environment overrides.

    No path yields the defaults; a path that does not exist raises
    FileNotFoundError. Unknown keys and non-integer values raise ValueError.
    """
    raw: Dict[str, Any] = _read_yaml(Path(path_str)) if path_str else {}

    for section in raw:
        if section not in SECTIONS:
            raise ValueError(f"Unknown config section '{section}'")

    for k, v in os_environ_items():
        if not k.startswith(ENV_PREFIX):
            continue
        parts = k[len(ENV_PREFIX):].split("__")
        if len(parts) != 2:
            continue
        section, key = parts[0].lower(), parts[1].lower()
        if section not in SECTIONS:
            continue
        raw.setdefault(section, {})
        if isinstance(raw[section], dict):
            raw[section][key] = coerce_env_value(v)

    config = AppConfig(
        correlation=_build_section(CorrelationConfig, "correlation", raw.get("correlation")),
        window=_build_section(WindowConfig, "window", raw.get("window")),
    )
    logger.debug(f"Loaded config: {config}")
    return config
