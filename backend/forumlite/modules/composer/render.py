"""
Post rendering.

Turns the ForumLite markdown dialect into sanitized HTML for previews:
BBCode-like tags are expanded, markdown is rendered with markdown-it,
the result is cleaned with bleach, and a final BeautifulSoup pass adds
mention links, YouTube players and external-link attributes.
"""

import re

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag
from loguru import logger
from markdown_it import MarkdownIt

from forumlite.core.config import settings
from forumlite.modules.composer.cleanup import outside_fences
from forumlite.modules.composer.embeds import youtube_embed_url, youtube_video_id
from forumlite.modules.composer.mentions import MENTION_RE

ALLOWED_TAGS = [
    "a", "abbr", "b", "blockquote", "br", "code", "del", "div", "em", "h1",
    "h2", "h3", "h4", "h5", "h6", "hr", "i", "img", "li", "mark", "ol", "p",
    "pre", "s", "span", "strong", "sub", "sup", "table", "tbody", "td", "th",
    "thead", "tr", "u", "ul",
]

ALLOWED_CSS_PROPERTIES = [
    "color",
    "background-color",
    "font-size",
    "font-weight",
    "font-style",
    "text-decoration",
    "vertical-align",
    "text-align",
]

ALLOWED_PROTOCOLS = ["http", "https", "mailto", "data"]

# [size=N] values to relative font sizes.
BBCODE_SIZES = {
    "1": "0.75em",
    "2": "0.875em",
    "3": "1em",
    "4": "1.125em",
    "5": "1.5em",
    "6": "2em",
    "7": "2.5em",
}

_BBCODE_RE = re.compile(
    r"\[(u|s|sup|sub|glow|shadow|spoiler|highlight|color|size|align)(?:=([^\]]+))?\]"
    r"([\s\S]*?)\[/\1\]",
    re.I,
)
_YOUTUBE_TAG_RE = re.compile(r"\[youtube\]\s*(.+?)\s*\[/youtube\]", re.I)
_CSS_VALUE_RE = re.compile(r"^[#\w\s.,%()-]+$")
_ALIGN_VALUES = {"left", "center", "right", "justify"}
_TEXT_TOKEN_RE = re.compile(f"{_YOUTUBE_TAG_RE.pattern}|{MENTION_RE.pattern}", re.I)

_IFRAME_ATTRS = {
    "width": "100%",
    "height": "100%",
    "title": "YouTube video player",
    "frameborder": "0",
    "allow": "accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture; web-share",
    "allowfullscreen": "",
    "sandbox": "allow-forms allow-scripts allow-popups allow-same-origin",
}


def _filter_attributes(tag: str, name: str, value: str) -> bool:
    if name in ("class", "title"):
        return True
    if tag == "a":
        return name == "href" and not value.strip().lower().startswith("data:")
    if tag == "img":
        if name == "src":
            src = value.strip().lower()
            return not src.startswith("data:") or src.startswith("data:image/")
        return name == "alt"
    if tag in ("span", "div", "p", "td", "th"):
        return name == "style"
    return False


def _css_value(value: str | None) -> str | None:
    if value and _CSS_VALUE_RE.match(value.strip()):
        return value.strip()
    return None


def _expand_bbcode_tag(match: re.Match) -> str:
    tag, value, content = match.group(1).lower(), match.group(2), match.group(3)

    if tag in ("u", "s", "sup", "sub"):
        return f"<{tag}>{content}</{tag}>"
    if tag == "glow":
        return f'<span class="text-glow">{content}</span>'
    if tag == "shadow":
        return f'<span class="text-shadow">{content}</span>'
    if tag == "spoiler":
        return f'<span class="spoiler"><span class="spoiler-content">{content}</span></span>'
    if tag == "align":
        align = (value or "").strip().lower()
        if align in _ALIGN_VALUES:
            return f'<div style="text-align: {align};">{content}</div>'
        return f"<div>{content}</div>"

    style = None
    if tag == "highlight" and _css_value(value):
        style = f"background-color: {_css_value(value)};"
    elif tag == "color" and _css_value(value):
        style = f"color: {_css_value(value)};"
    elif tag == "size" and value and value.strip() in BBCODE_SIZES:
        style = f"font-size: {BBCODE_SIZES[value.strip()]};"

    if style:
        return f'<span style="{style}">{content}</span>'
    return f"<span>{content}</span>"


def expand_bbcode(text: str) -> str:
    """Expand BBCode-like formatting tags outside fenced code blocks."""

    def expand(segment: str) -> str:
        previous = None
        while previous != segment:
            previous = segment
            segment = _BBCODE_RE.sub(_expand_bbcode_tag, segment)
        return segment

    return outside_fences(text, expand)


class PostRenderer:
    """
    Markdown dialect to safe HTML.

    Usage:
        html = PostRenderer().render("**hello** @alice")
    """

    def __init__(self, profile_path: str | None = None) -> None:
        self.profile_path = profile_path or settings.composer_user_profile_path
        self.md = MarkdownIt("commonmark", {"breaks": True, "html": True}).enable(
            ["table", "strikethrough"]
        )
        self.css_sanitizer = CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES)

    def render(self, markdown: str | None) -> str:
        if not markdown or not markdown.strip():
            return ""

        html = self.md.render(expand_bbcode(markdown))
        cleaned = bleach.clean(
            html,
            tags=ALLOWED_TAGS,
            attributes=_filter_attributes,
            protocols=ALLOWED_PROTOCOLS,
            css_sanitizer=self.css_sanitizer,
            strip=True,
        )
        return self._decorate(cleaned)

    def _decorate(self, html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")

        for paragraph in soup.find_all("p"):
            video_id = self._paragraph_video(paragraph)
            if video_id:
                paragraph.replace_with(self._embed(soup, video_id))

        for text in list(soup.find_all(string=True)):
            if text.find_parent(["a", "code", "pre"]) is not None:
                continue
            self._replace_text(soup, text)

        for link in soup.find_all("a", href=True):
            if link["href"].startswith(("http://", "https://")):
                link["target"] = "_blank"
                link["rel"] = "noopener noreferrer"

        return str(soup)

    @staticmethod
    def _paragraph_video(paragraph: Tag) -> str | None:
        children = [c for c in paragraph.contents if not (isinstance(c, NavigableString) and not c.strip())]
        if len(children) != 1:
            return None
        only = children[0]
        if isinstance(only, Tag) and only.name == "a":
            return youtube_video_id(only.get("href"))
        if isinstance(only, NavigableString):
            match = _YOUTUBE_TAG_RE.fullmatch(only.strip())
            if match:
                return youtube_video_id(match.group(1))
        return None

    def _embed(self, soup: BeautifulSoup, video_id: str) -> Tag:
        wrapper = soup.new_tag("div", attrs={"class": "video-embed"})
        iframe = soup.new_tag("iframe", attrs={**_IFRAME_ATTRS, "src": youtube_embed_url(video_id)})
        wrapper.append(iframe)
        return wrapper

    def _replace_text(self, soup: BeautifulSoup, text: NavigableString) -> None:
        value = str(text)
        if "@" not in value and "[youtube]" not in value.lower():
            return

        pieces: list = []
        position = 0
        for match in _TEXT_TOKEN_RE.finditer(value):
            if match.start() > position:
                pieces.append(NavigableString(value[position:match.start()]))

            if match.group(1) is not None:
                video_id = youtube_video_id(match.group(1))
                if video_id:
                    pieces.append(self._embed(soup, video_id))
                else:
                    pieces.append(NavigableString(match.group(0)))
            else:
                username = match.group(2)
                link = soup.new_tag(
                    "a", attrs={"href": f"{self.profile_path}/{username}", "class": "mention"}
                )
                link.string = f"@{username}"
                pieces.append(link)
            position = match.end()

        if not pieces:
            return
        if position < len(value):
            pieces.append(NavigableString(value[position:]))
        text.replace_with(*pieces)


_renderer: PostRenderer | None = None


def get_post_renderer() -> PostRenderer:
    """Get or create the shared renderer."""
    global _renderer
    if _renderer is None:
        _renderer = PostRenderer()
        logger.debug("Post renderer initialized")
    return _renderer


def render_post(markdown: str | None) -> str:
    """Render post markdown to sanitized HTML."""
    return get_post_renderer().render(markdown)
