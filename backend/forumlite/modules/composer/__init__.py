"""
Composer Module - Post composition helpers.

Features:
- Rich-text paste to markdown conversion
- Toolbar editing operations
- Post preview rendering
- Mention extraction
"""

from forumlite.modules.composer.editor import EditResult
from forumlite.modules.composer.exceptions import ComposerError, PasteParseError
from forumlite.modules.composer.mentions import parse_mentions
from forumlite.modules.composer.paste import (
    PasteResult,
    convert_paste,
    html_to_markdown,
    paste_into,
    transform_paste,
)
from forumlite.modules.composer.render import render_post

__all__ = [
    "ComposerError",
    "EditResult",
    "PasteParseError",
    "PasteResult",
    "convert_paste",
    "html_to_markdown",
    "parse_mentions",
    "paste_into",
    "render_post",
    "transform_paste",
]
