"""Configuration paths and defaults for gosnippet."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("GOSNIPPET_HOME", str(Path.home() / ".gosnippet"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

OUTPUT_FORMATS = ("plain", "markdown", "json")
LOADER_BACKENDS = ("gomod", "golist")

DEFAULT_FORMAT = "plain"
DEFAULT_BACKEND = "gomod"
DEFAULT_GO_BINARY = "go"
DEFAULT_GO_LIST_TIMEOUT = 60.0
