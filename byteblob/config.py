"""
Configuration for the byteblob CLI.

Precedence (lowest to highest):
    DEFAULT_CONFIG  <  ~/.byteblob/config.toml  <  BYTEBLOB_* environment

Example config.toml:
    codec = "base58"
    scrub = "zeros"
    compare = "constant"
    strict = true
    log_level = "INFO"
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from byteblob import DEFAULT_CONFIG_PATH, ENV_PREFIX
from byteblob.compare import CompareType
from byteblob.container import ScrubType

log = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "codec": "hex",
    "scrub": "none",
    "compare": "fast",
    "strict": False,
    "log_level": "WARNING",
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from TOML and environment, falling back to defaults."""
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if path.is_file():
        try:
            file_config = _load_toml(path)
        except Exception as e:
            log.warning("Failed to load config from %s: %s", path, e)
        else:
            unknown = set(file_config) - set(DEFAULT_CONFIG)
            if unknown:
                log.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(sorted(unknown)))
            config.update({k: v for k, v in file_config.items() if k in DEFAULT_CONFIG})

    for key in DEFAULT_CONFIG:
        value = os.environ.get(ENV_PREFIX + key.upper())
        if value is None or value == "":
            continue
        if key == "strict":
            config[key] = value.strip().lower() in _TRUE_VALUES
        else:
            config[key] = value.strip()

    return config


def scrub_type(config: dict[str, Any]) -> ScrubType:
    """Parse the configured scrub policy name."""
    name = str(config.get("scrub", "none")).lower()
    try:
        return ScrubType(name)
    except ValueError:
        raise ValueError(
            f"Invalid scrub type {name!r} (choose from: none, zeros)"
        ) from None


def compare_type(config: dict[str, Any]) -> CompareType:
    """Parse the configured compare policy name."""
    name = str(config.get("compare", "fast")).lower()
    try:
        return CompareType(name)
    except ValueError:
        raise ValueError(
            f"Invalid compare type {name!r} (choose from: fast, constant)"
        ) from None
