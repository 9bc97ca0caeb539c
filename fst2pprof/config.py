"""Centralized configuration for fst2pprof.

This module contains the constants used when building profiles and opening
traces, and the loader for the signal selection file passed with --config.
"""

import json
import pathlib
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

import yaml

from .errors import ConfigError


@dataclass(frozen=True)
class ProfileConfig:
    """Names written into every generated profile."""
    PERIOD_TYPE: str = "time"
    PERIOD_UNIT: str = "cycle"
    SAMPLE_TYPE: str = "changes"
    SAMPLE_UNIT: str = "count"
    PERIOD: int = 1

    # Label keys
    SIGNAL_LABEL: str = "signal"
    MODULE_LABEL: str = "module"
    VALUE_LABEL: str = "value"
    TIME_LABEL: str = "time"

    # Unit used for the time label when the trace has no timescale
    DEFAULT_TIME_UNIT: str = "cycle"

    OUTPUT_SUFFIX: str = ".pprof.gz"


@dataclass(frozen=True)
class ReaderConfig:
    """Options passed to the waveform reader."""
    MULTI_THREADED: bool = False
    REMOVE_SCOPES_WITH_EMPTY_NAME: bool = False
    SUPPORTED_EXTENSIONS: tuple = (".fst", ".vcd")


PROFILE = ProfileConfig()
READER = ReaderConfig()

SIGNALS_KEY = "signals"


def _read_document(path: pathlib.Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed JSON in {path}: {exc}") from exc


def load_signal_config(path: Union[str, pathlib.Path]) -> List[str]:
    """Load the requested signal names from a config file.

    The document must be a mapping with a ``signals`` list of strings, e.g.
    ``{"signals": ["clk", "valid"]}``. JSON is the default format; files with
    a ``.yaml``/``.yml`` suffix are read as YAML.

    Args:
        path: Path to the config file

    Returns:
        The signal names in file order

    Raises:
        ConfigError: If the file is unreadable, malformed or has the wrong shape
    """
    path = pathlib.Path(path)
    data = _read_document(path)

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping with a '{SIGNALS_KEY}' list")
    if SIGNALS_KEY not in data:
        raise ConfigError(f"Config {path} is missing required field '{SIGNALS_KEY}'")

    signals = data[SIGNALS_KEY]
    if not isinstance(signals, list) or not all(isinstance(s, str) for s in signals):
        raise ConfigError(f"'{SIGNALS_KEY}' in {path} must be a list of strings")
    return list(signals)


def parse_signal_list(text: Optional[str]) -> List[str]:
    """Split a comma-separated ``--signals`` argument, dropping blanks."""
    if not text:
        return []
    return [name.strip() for name in text.split(",") if name.strip()]


def merge_signal_names(*name_lists: Iterable[str]) -> List[str]:
    """Concatenate name lists, keeping the first occurrence of each name."""
    merged: List[str] = []
    seen = set()
    for names in name_lists:
        for name in names:
            if name not in seen:
                seen.add(name)
                merged.append(name)
    return merged
