"""Command-line focus/rest session timer."""

__version__ = "0.3.0"
