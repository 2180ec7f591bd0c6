"""
Video embed recognition.

Only YouTube is recognized; the post renderer turns the
``[youtube]URL[/youtube]`` tag into a player.
"""

import re
from urllib.parse import parse_qs, urlparse

YOUTUBE_HOSTS = frozenset(
    {
        "youtube.com",
        "www.youtube.com",
        "m.youtube.com",
        "music.youtube.com",
        "youtube-nocookie.com",
        "www.youtube-nocookie.com",
        "youtu.be",
        "www.youtu.be",
    }
)

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_PATH_PREFIXES = ("/embed/", "/v/", "/shorts/", "/live/")


def youtube_video_id(url: str | None) -> str | None:
    """
    Extract the 11-character YouTube video ID from a URL.

    Returns:
        Video ID, or None when the URL is not a recognized video link
    """
    if not url:
        return None

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https"):
        return None
    host = (parsed.hostname or "").lower()
    if host not in YOUTUBE_HOSTS:
        return None

    candidate: str | None = None
    if host.endswith("youtu.be"):
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif parsed.path == "/watch":
        candidate = (parse_qs(parsed.query).get("v") or [None])[0]
    else:
        for prefix in _PATH_PREFIXES:
            if parsed.path.startswith(prefix):
                candidate = parsed.path[len(prefix):].split("/")[0]
                break

    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def embed_markup(url: str | None) -> str | None:
    """Composer markup embedding the video at ``url``, if it is one."""
    if youtube_video_id(url) is None:
        return None
    return f"[youtube]{url.strip()}[/youtube]"


def youtube_embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"
