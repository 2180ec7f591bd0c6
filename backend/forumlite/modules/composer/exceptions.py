"""
Composer exceptions.
"""


class ComposerError(Exception):
    """Base error for composer operations."""


class PasteParseError(ComposerError):
    """Clipboard HTML could not be turned into a node tree."""
