"""Small text helpers shared by the engine and the CLI."""

from .formatting import clean_text, truncate, clean_filename

__all__ = [
    "clean_text",
    "truncate",
    "clean_filename",
]
