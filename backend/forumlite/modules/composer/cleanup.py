"""
Markdown cleanup pass.

Runs after serialization. Fenced code blocks are left untouched; everything
else gets degenerate markers and empty passthrough tags removed and blank
line runs collapsed. Applying the pass twice gives the same result.
"""

import re
from typing import Callable

# Fences may sit under list indentation or blockquote markers; the closing
# line must carry the same prefix as the opening one.
FENCE_RE = re.compile(
    r"^(?P<prefix>(?:[ \t]*>)*[ \t]*)(?P<fence>`{3,})[^\n`]*\n.*?\n(?P=prefix)(?P=fence)[ \t]*$",
    re.M | re.S,
)

_EMPTY_MARKER_RES = (
    re.compile(r"(?:^|(?<=\s))\*\*[ \t]*\*\*(?=\s|$)", re.M),
    re.compile(r"(?:^|(?<=\s))~~[ \t]*~~(?=\s|$)", re.M),
    re.compile(r"(?:^|(?<=\s))`[ \t]*`(?=\s|$)", re.M),
)

_EMPTY_TAG_RE = re.compile(
    r"<(span|u|s|sup|sub|mark|div)(?:\s[^<>]*)?>\s*</\1>",
    re.I,
)

_BLANK_RUN_RE = re.compile(r"\n(?:[ \t]*\n){2,}")


def outside_fences(text: str, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` to the text between fenced code blocks."""
    parts: list[str] = []
    position = 0
    for match in FENCE_RE.finditer(text):
        parts.append(transform(text[position:match.start()]))
        parts.append(match.group(0))
        position = match.end()
    parts.append(transform(text[position:]))
    return "".join(parts)


def collapse_blank_lines(text: str) -> str:
    """Runs of blank lines become one blank line; fenced code is kept."""
    return outside_fences(text, lambda segment: _BLANK_RUN_RE.sub("\n\n", segment))


def _clean_segment(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        text = _EMPTY_TAG_RE.sub("", text)
        for pattern in _EMPTY_MARKER_RES:
            text = pattern.sub("", text)
    return _BLANK_RUN_RE.sub("\n\n", text)


def cleanup_markdown(markdown: str) -> str:
    """
    Normalize serializer output.

    - empty ``** **``, ``~~~~`` and ``` `` ``` markers are removed
    - empty paired tags such as ``<span style="..."></span>`` are removed
    - three or more consecutive newlines collapse to exactly two
    - leading and trailing whitespace is trimmed
    """
    if not markdown:
        return ""
    return outside_fences(markdown, _clean_segment).strip()
