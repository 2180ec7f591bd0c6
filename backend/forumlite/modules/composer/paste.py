"""
Paste transform.

Converts the HTML flavor of a clipboard payload to ForumLite markdown:
parse, serialize, clean up. The public entry point never raises; on any
failure the plain-text flavor is used verbatim.
"""

from dataclasses import dataclass

from loguru import logger

from forumlite.core.config import settings
from forumlite.modules.composer.cleanup import cleanup_markdown
from forumlite.modules.composer.editor import EditResult, splice
from forumlite.modules.composer.markdown import MarkdownSerializer
from forumlite.modules.composer.parser import HtmlTreeBuilder


@dataclass(frozen=True)
class PasteResult:
    """Outcome of a paste transform."""

    markdown: str
    used_fallback: bool


def html_to_markdown(html: str) -> str:
    """
    Convert HTML to cleaned-up markdown.

    Raises:
        PasteParseError: the HTML could not be parsed
    """
    nodes = HtmlTreeBuilder().parse(html)
    serializer = MarkdownSerializer(image_schemes=tuple(settings.composer_allowed_image_schemes))
    return cleanup_markdown(serializer.serialize(nodes))


def convert_paste(html: str | None, text: str | None = "") -> PasteResult:
    """
    Convert a clipboard payload, reporting whether the fallback was used.

    Args:
        html: HTML flavor of the clipboard (may be empty)
        text: Plain-text flavor of the clipboard

    Returns:
        Markdown to insert and the fallback flag
    """
    text = text or ""
    if not html or not html.strip():
        return PasteResult(markdown=text, used_fallback=bool(text))

    try:
        markdown = html_to_markdown(html)
    except Exception as e:
        logger.warning(f"Paste conversion failed, using plain text: {e!r}")
        return PasteResult(markdown=text, used_fallback=True)

    if not markdown and text.strip() and settings.composer_fallback_on_empty:
        logger.debug("Paste conversion produced no markdown, using plain text")
        return PasteResult(markdown=text, used_fallback=True)

    return PasteResult(markdown=markdown, used_fallback=False)


def transform_paste(html: str | None, text: str | None = "") -> str:
    """Markdown for a clipboard payload. Never raises."""
    return convert_paste(html, text).markdown


def paste_into(
    content: str,
    selection_start: int,
    selection_end: int,
    html: str | None,
    text: str | None = "",
) -> EditResult:
    """Replace the selection with the converted paste; cursor goes after it."""
    return splice(content, selection_start, selection_end, transform_paste(html, text))
