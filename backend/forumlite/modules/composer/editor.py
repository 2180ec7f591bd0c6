"""
Composer text-buffer operations.

Pure functions over ``(content, selection_start, selection_end)`` that
return the new content and the selection the editor should show.
"""

from dataclasses import dataclass

from forumlite.modules.composer.exceptions import ComposerError


@dataclass(frozen=True)
class EditResult:
    """New buffer content and selection after an edit."""

    content: str
    selection_start: int
    selection_end: int

    @property
    def cursor(self) -> int:
        return self.selection_end


@dataclass(frozen=True)
class InlineFormat:
    """Toolbar preset that wraps the selection."""

    before: str
    default_text: str
    after: str = ""
    is_block: bool = False
    replace_selection: bool = False


FORMATS: dict[str, InlineFormat] = {
    "bold": InlineFormat("**", "bold text", "**"),
    "italic": InlineFormat("*", "italic text", "*"),
    "underline": InlineFormat("<u>", "underlined text", "</u>"),
    "strikethrough": InlineFormat("~~", "strikethrough text", "~~"),
    "code": InlineFormat("`", "code", "`"),
    "code_block": InlineFormat("```\n", "code block", "\n```", is_block=True, replace_selection=True),
    "quote": InlineFormat("> ", "quoted text", "", is_block=True, replace_selection=True),
    "highlight": InlineFormat("<mark>", "highlighted text", "</mark>"),
    "superscript": InlineFormat("<sup>", "superscript", "</sup>"),
    "subscript": InlineFormat("<sub>", "subscript", "</sub>"),
    "glow": InlineFormat('<span class="text-glow">', "glowing text", "</span>"),
    "shadow": InlineFormat('<span class="text-shadow">', "shadowed text", "</span>"),
    "spoiler": InlineFormat(
        '<span class="spoiler"><span class="spoiler-content">', "spoiler content", "</span></span>"
    ),
}

ALIGNMENTS = ("left", "center", "right", "justify")

TABLE_TEMPLATE = (
    "\n| Header 1 | Header 2 |\n|---|---|\n| Cell 1.1 | Cell 1.2 |\n| Cell 2.1 | Cell 2.2 |\n"
)


def clamp_selection(content: str, start: int, end: int) -> tuple[int, int]:
    """Clamp a selection into the buffer and order its ends."""
    length = len(content)
    start = max(0, min(start, length))
    end = max(0, min(end, length))
    if end < start:
        start, end = end, start
    return start, end


def splice(content: str, start: int, end: int, text: str) -> EditResult:
    """Replace the selection with ``text``; cursor lands right after it."""
    start, end = clamp_selection(content, start, end)
    new_content = f"{content[:start]}{text}{content[end:]}"
    cursor = start + len(text)
    return EditResult(new_content, cursor, cursor)


def insert_text(
    content: str,
    start: int,
    end: int,
    before: str,
    default_text: str,
    after: str = "",
    is_block: bool = False,
    replace_selection: bool = False,
) -> EditResult:
    """
    Wrap the selection (or ``default_text``) with ``before``/``after``.

    Args:
        content: Current buffer
        start: Selection start
        end: Selection end
        before: Text inserted before the body
        default_text: Body used when nothing is selected or when
            ``replace_selection`` is set
        after: Text inserted after the body
        is_block: Put the insert on its own lines
        replace_selection: Always use ``default_text`` as the body

    Returns:
        Edit result with the body selected
    """
    start, end = clamp_selection(content, start, end)
    selected = content[start:end]
    body = selected if selected and not replace_selection else default_text

    prefix, suffix = before, after
    if is_block:
        if start > 0 and content[start - 1] != "\n":
            prefix = "\n" + prefix
        if end < len(content) and content[end] != "\n":
            suffix = suffix + "\n"

    new_content = f"{content[:start]}{prefix}{body}{suffix}{content[end:]}"
    body_start = start + len(prefix)
    return EditResult(new_content, body_start, body_start + len(body))


def insert_list(content: str, start: int, end: int, marker: str = "-") -> EditResult:
    """
    Turn the selected lines, or the current line, into list items.

    ``marker`` is a bullet (``-``, ``*``) or ``1.`` for a numbered list.
    """
    if marker not in ("-", "*", "+", "1."):
        raise ComposerError(f"Unsupported list marker: {marker!r}")

    start, end = clamp_selection(content, start, end)
    selected = content[start:end]
    numbered = marker == "1."

    prefix_newline = "\n" if start > 0 and content[start - 1] != "\n" else ""

    if selected:
        lines = selected.split("\n")
        items = [f"{i}. {line}" if numbered else f"{marker} {line}" for i, line in enumerate(lines, 1)]
        text = "\n".join(items)
        if prefix_newline and not selected.startswith("\n"):
            text = prefix_newline + text
        new_content = f"{content[:start]}{text}{content[end:]}"
        offset = 1 if text.startswith("\n") else 0
        return EditResult(new_content, start + offset, start + len(text))

    line_start = content.rfind("\n", 0, start) + 1
    item_prefix = "1. " if numbered else f"{marker} "
    new_content = f"{content[:line_start]}{item_prefix}{content[line_start:]}"
    cursor = line_start + len(item_prefix)
    return EditResult(new_content, cursor, cursor)


def insert_emoji(content: str, start: int, end: int, emoji: str) -> EditResult:
    return splice(content, start, end, emoji)


def apply_format(name: str, content: str, start: int, end: int) -> EditResult:
    """Apply a named toolbar preset from ``FORMATS``."""
    try:
        preset = FORMATS[name]
    except KeyError:
        raise ComposerError(f"Unknown format: {name}") from None
    return insert_text(
        content,
        start,
        end,
        preset.before,
        preset.default_text,
        preset.after,
        is_block=preset.is_block,
        replace_selection=preset.replace_selection,
    )


def insert_link(content: str, start: int, end: int, url: str) -> EditResult:
    start, end = clamp_selection(content, start, end)
    selected = content[start:end]
    return insert_text(
        content, start, end, "[", selected or "Link Text", f"]({url.strip()})",
        replace_selection=bool(selected),
    )


def insert_image(content: str, start: int, end: int, url: str) -> EditResult:
    start, end = clamp_selection(content, start, end)
    alt = content[start:end] or "Image Alt Text"
    return insert_text(
        content, start, end, "\n![", alt, f"]({url.strip()})\n",
        is_block=True, replace_selection=True,
    )


def insert_video(content: str, start: int, end: int, url: str) -> EditResult:
    return insert_text(
        content, start, end, "\n", url.strip(), "\n",
        is_block=True, replace_selection=True,
    )


def insert_table(content: str, start: int, end: int) -> EditResult:
    return insert_text(content, start, end, TABLE_TEMPLATE, "", "", is_block=True, replace_selection=True)


def align(content: str, start: int, end: int, alignment: str) -> EditResult:
    if alignment not in ALIGNMENTS:
        raise ComposerError(f"Unsupported alignment: {alignment}")
    return insert_text(
        content, start, end, f'<div style="text-align:{alignment};">\n', "aligned text", "\n</div>",
        is_block=True, replace_selection=True,
    )


def color(content: str, start: int, end: int, value: str) -> EditResult:
    return insert_text(content, start, end, f'<span style="color:{_css_value(value)};">', "colored text", "</span>")


def font_size(content: str, start: int, end: int, value: str) -> EditResult:
    return insert_text(content, start, end, f'<span style="font-size:{_css_value(value)};">', "sized text", "</span>")


def _css_value(value: str) -> str:
    value = value.strip()
    if not value or any(ch in value for ch in '"<>;{}'):
        raise ComposerError(f"Invalid style value: {value!r}")
    return value
