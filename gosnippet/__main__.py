"""Allow ``python -m gosnippet``."""

from .cli import app

app()
