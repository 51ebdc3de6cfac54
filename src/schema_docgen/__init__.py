"""Markdown API documentation from Swift schema declarations."""

__version__ = "0.1.0"
