"""Configuration manager for gosnippet using TOML files.

Layout of ``config.toml``::

    [output]
    format = "markdown"

    [loader]
    backend = "gomod"
    go_binary = "go"
    timeout = 60.0
    goos = ""        # empty: $GOOS, then this machine
    goarch = ""
    tags = ""        # comma-separated extra build tags
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from . import config
from .buildctx import KNOWN_ARCH, KNOWN_OS

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "output": {
        "format": config.DEFAULT_FORMAT,
    },
    "loader": {
        "backend": config.DEFAULT_BACKEND,
        "go_binary": config.DEFAULT_GO_BINARY,
        "timeout": config.DEFAULT_GO_LIST_TIMEOUT,
        "goos": "",
        "goarch": "",
        "tags": "",
    },
}


def _config_file(path: Optional[Path] = None) -> Path:
    return path or config.CONFIG_FILE


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the raw TOML config (all sections), or ``{}`` if unavailable."""
    cfg_file = _config_file(path)
    if not cfg_file.exists():
        return {}
    try:
        with open(cfg_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", cfg_file, exc)
        return {}


def load_config(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """Return the effective configuration: file values merged over defaults."""
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in load_full_config(path).items():
        if section not in merged or not isinstance(values, dict):
            continue
        for key, value in values.items():
            if key in merged[section]:
                merged[section][key] = value
    return merged


def split_tags(value: str) -> List[str]:
    """Split a comma- or space-separated build tag list."""
    return [t for t in value.replace(",", " ").split() if t]


def validate_setting(section: str, key: str, value: str) -> Any:
    """Coerce *value* for ``section.key``; raise ``ValueError`` if invalid."""
    if section not in DEFAULT_CONFIG or key not in DEFAULT_CONFIG[section]:
        known = ", ".join(f"{s}.{k}" for s, keys in DEFAULT_CONFIG.items() for k in keys)
        raise ValueError(f"Unknown setting '{section}.{key}'. Known settings: {known}")

    if (section, key) == ("output", "format"):
        value = value.lower().strip()
        if value not in config.OUTPUT_FORMATS:
            raise ValueError(f"Format must be one of: {', '.join(config.OUTPUT_FORMATS)}")
        return value
    if (section, key) == ("loader", "backend"):
        value = value.lower().strip()
        if value not in config.LOADER_BACKENDS:
            raise ValueError(f"Backend must be one of: {', '.join(config.LOADER_BACKENDS)}")
        return value
    if (section, key) == ("loader", "timeout"):
        try:
            timeout = float(value)
        except ValueError:
            raise ValueError(f"Timeout must be a number, got '{value}'") from None
        if timeout <= 0:
            raise ValueError("Timeout must be positive")
        return timeout
    if (section, key) == ("loader", "goos"):
        value = value.lower().strip()
        if value and value not in KNOWN_OS:
            raise ValueError(f"Unknown GOOS '{value}'")
        return value
    if (section, key) == ("loader", "goarch"):
        value = value.lower().strip()
        if value and value not in KNOWN_ARCH:
            raise ValueError(f"Unknown GOARCH '{value}'")
        return value
    if (section, key) == ("loader", "tags"):
        return ",".join(split_tags(value))
    return value


def save_setting(section: str, key: str, value: str, path: Optional[Path] = None) -> Any:
    """Validate and persist one setting, preserving the rest of the file.

    Returns the coerced value that was written.
    """
    coerced = validate_setting(section, key, value)
    cfg_file = _config_file(path)
    full = load_full_config(cfg_file)
    full.setdefault(section, {})[key] = coerced
    cfg_file.parent.mkdir(parents=True, exist_ok=True)
    with open(cfg_file, "w", encoding="utf-8") as f:
        toml.dump(full, f)
    logger.debug("Saved %s.%s=%r to %s", section, key, coerced, cfg_file)
    return coerced
