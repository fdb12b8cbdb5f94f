"""VexTab: a parser and renderer for compact guitar tablature notation."""

__version__ = "0.1.0"
