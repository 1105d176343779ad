"""gosnippet: resolve Go symbol names to the source text of their declarations."""

__version__ = "0.3.0"
