"""taskdeck: a personal task tracker with a local SQLite-backed store."""

__version__ = "0.1.0"
