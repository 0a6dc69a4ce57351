"""Headless text editing engine: UTF-8 buffer, layout, caret movement, selection and undo history."""

__version__ = "0.1.0"