"""
@mention extraction.
"""

import re

MENTION_RE = re.compile(r"(?<![\w@])@(\w+)")


def parse_mentions(content: str | None) -> list[str]:
    """
    Usernames mentioned as ``@name``, without the ``@``.

    Each name appears once, in order of first mention. An ``@`` inside a
    word (e.g. an e-mail address) is not a mention.
    """
    if not content:
        return []
    seen: dict[str, None] = {}
    for match in MENTION_RE.finditer(content):
        seen.setdefault(match.group(1), None)
    return list(seen)
