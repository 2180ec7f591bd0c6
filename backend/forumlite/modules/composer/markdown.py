"""
Node tree to markdown serializer.

Each tag maps to a rule method; unknown block-level tags render as a
paragraph-like block and unknown inline tags pass their children through.
Block rules surround their output with blank lines and leave it to
``cleanup_markdown`` to collapse the excess.
"""

import re
from typing import Callable

from forumlite.modules.composer.cleanup import collapse_blank_lines
from forumlite.modules.composer.embeds import embed_markup
from forumlite.modules.composer.nodes import ElementNode, Node

BLOCK_FALLBACK_TAGS = frozenset(
    {
        "ADDRESS", "ARTICLE", "ASIDE", "CENTER", "DETAILS", "DIALOG", "DD", "DL",
        "DT", "FIELDSET", "FIGCAPTION", "FIGURE", "FOOTER", "FORM", "HEADER",
        "HGROUP", "MAIN", "NAV", "SECTION", "SUMMARY",
    }
)

# Elements that start on their own line. Whitespace next to them is dropped.
BLOCK_TAGS = BLOCK_FALLBACK_TAGS | {
    "P", "DIV", "H1", "H2", "H3", "H4", "H5", "H6", "UL", "OL", "LI",
    "BLOCKQUOTE", "PRE", "HR", "BR", "TABLE", "THEAD", "TBODY", "TFOOT",
    "TR", "TD", "TH", "CAPTION", "BODY", "HTML",
}

_WHITESPACE_RE = re.compile(r"[ \t\n\r\f]+")
_LANGUAGE_RE = re.compile(r"(?:^|\s)(?:language|lang)-([\w+#-]+)")
_SAFE_STYLE_VALUE_RE = re.compile(r"^[#\w\s.,%()+-]+$")
_VERTICAL_ALIGN_TAGS = {"super": "sup", "sub": "sub"}
_TRANSPARENT = {"transparent", "rgba(0, 0, 0, 0)", "rgba(0,0,0,0)", "initial", "inherit"}


def collapse_whitespace(text: str) -> str:
    """HTML whitespace collapsing; non-breaking spaces survive as spaces."""
    return _WHITESPACE_RE.sub(" ", text).replace("\u00a0", " ")


def _wrap(content: str, opener: str, closer: str | None = None) -> str:
    """Wrap content in markers, keeping edge whitespace outside them."""
    closer = opener if closer is None else closer
    stripped = content.strip()
    if not stripped:
        return content
    leading = content[: len(content) - len(content.lstrip())]
    trailing = content[len(content.rstrip()):]
    return f"{leading}{opener}{stripped}{closer}{trailing}"


def _block(content: str) -> str:
    return f"\n\n{content}\n\n" if content else ""


def _display(node: ElementNode) -> str:
    return node.style.get("display", "").strip().lower()


def _is_block(node: Node | None) -> bool:
    if isinstance(node, ElementNode):
        return node.tag in BLOCK_TAGS or _display(node) == "block"
    return False


def _code_language(*elements: ElementNode | None) -> str:
    for element in elements:
        if element is None:
            continue
        match = _LANGUAGE_RE.search(element.attributes.get("class", ""))
        if match:
            return match.group(1)
    return ""


def _longest_run(text: str, char: str) -> int:
    runs = re.findall(f"{re.escape(char)}+", text)
    return max((len(r) for r in runs), default=0)


def _safe_style_value(value: str) -> str | None:
    value = value.strip()
    if value and _SAFE_STYLE_VALUE_RE.match(value):
        return value
    return None


def _is_bold_weight(weight: str | None) -> bool:
    if not weight:
        return False
    weight = weight.strip().lower()
    if weight in ("bold", "bolder"):
        return True
    return weight.isdigit() and int(weight) >= 700


def _is_light_weight(weight: str | None) -> bool:
    if not weight:
        return False
    weight = weight.strip().lower()
    if weight in ("normal", "lighter"):
        return True
    return weight.isdigit() and int(weight) < 700


class MarkdownSerializer:
    """
    Serialize simplified node trees to ForumLite markdown.

    Usage:
        md = MarkdownSerializer().serialize(parse_html(html))
    """

    def __init__(self, image_schemes: tuple[str, ...] = ("http", "https", "data")) -> None:
        self.image_schemes = image_schemes
        self._rules: dict[str, Callable[[ElementNode], str]] = {
            "H1": self._heading,
            "H2": self._heading,
            "H3": self._heading,
            "H4": self._heading,
            "H5": self._heading,
            "H6": self._heading,
            "P": self._paragraph,
            "STRONG": self._bold,
            "B": self._bold,
            "EM": self._italic,
            "I": self._italic,
            "U": self._underline,
            "INS": self._underline,
            "S": self._strike,
            "STRIKE": self._strike,
            "DEL": self._strike,
            "A": self._link,
            "IMG": self._image,
            "UL": self._list,
            "OL": self._list,
            "LI": self._list_item,
            "BLOCKQUOTE": self._blockquote,
            "PRE": self._preformatted,
            "CODE": self._code,
            "BR": lambda node: "\n",
            "HR": lambda node: "\n\n---\n\n",
            "TABLE": self._table,
            "TH": self._cell,
            "TD": self._cell,
            "SUP": self._passthrough,
            "SUB": self._passthrough,
            "MARK": self._passthrough,
            "SPAN": self._styled,
            "FONT": self._styled,
            "DIV": self._division,
        }

    def serialize(self, nodes: list[Node]) -> str:
        """Render top-level nodes. The result still needs cleanup."""
        return "".join(self._render_at(nodes, i, None) for i in range(len(nodes)))

    # ==================== Dispatch ====================

    def render(self, node: Node) -> str:
        if isinstance(node, str):
            return collapse_whitespace(node)

        if _display(node) == "none":
            return ""

        rule = self._rules.get(node.tag)
        if rule is not None:
            return rule(node)
        if node.tag in BLOCK_FALLBACK_TAGS or _display(node) == "block":
            return _block(self.children(node).strip())
        return self.children(node)

    def children(self, node: ElementNode) -> str:
        return "".join(self._render_at(node.children, i, node) for i in range(len(node.children)))

    def _render_at(self, nodes: list[Node], index: int, parent: ElementNode | None) -> str:
        """
        Render ``nodes[index]``.

        Text touching a block boundary loses its edge spaces; edges of an
        inline parent are kept so "a<b> b</b>" stays two words.
        """
        node = nodes[index]
        if not isinstance(node, str):
            return self.render(node)

        text = collapse_whitespace(node)
        edge_is_block = parent is None or _is_block(parent)
        previous = nodes[index - 1] if index > 0 else None
        following = nodes[index + 1] if index + 1 < len(nodes) else None
        if _is_block(previous) or (previous is None and edge_is_block):
            text = text.lstrip(" ")
        if _is_block(following) or (following is None and edge_is_block):
            text = text.rstrip(" ")
        return text

    def _inline_children(self, node: ElementNode) -> str:
        """Children rendered on a single line."""
        return collapse_whitespace(self.children(node)).strip()

    # ==================== Block rules ====================

    def _heading(self, node: ElementNode) -> str:
        content = self._inline_children(node)
        if not content:
            return ""
        level = int(node.tag[1])
        return _block(f"{'#' * level} {content}")

    def _paragraph(self, node: ElementNode) -> str:
        embed = self._sole_video_link(node)
        if embed is not None:
            return _block(embed)

        content = self.children(node).strip()
        if node.parent_tag == "LI":
            return f"{content}\n\n" if content else ""

        align = node.style.get("text-align", "").strip().lower()
        if content and align in ("center", "right", "justify"):
            return _block(f'<div style="text-align: {align};">\n{content}\n</div>')
        return _block(content)

    def _sole_video_link(self, node: ElementNode) -> str | None:
        if any(isinstance(c, str) and c.strip() for c in node.children):
            return None
        elements = node.element_children()
        if len(elements) != 1 or elements[0].tag != "A":
            return None
        return embed_markup(elements[0].attributes.get("href"))

    def _division(self, node: ElementNode) -> str:
        content = self.children(node).strip()
        align = node.style.get("text-align", "").strip().lower()
        if content and align and align not in ("left", "start", "initial", "inherit"):
            align = _safe_style_value(align)
            if align:
                return _block(f'<div style="text-align: {align};">\n{content}\n</div>')
        return _block(content)

    def _blockquote(self, node: ElementNode) -> str:
        content = collapse_blank_lines(self.children(node).strip())
        if not content:
            return ""
        lines = [f"> {line}" if line else ">" for line in content.split("\n")]
        return _block("\n".join(lines))

    def _preformatted(self, node: ElementNode) -> str:
        code = node.find_descendant("CODE")
        language = _code_language(code, node)
        content = node.text_content().replace("\u00a0", " ").strip("\n").rstrip()
        if not content:
            return ""
        fence = "`" * max(3, _longest_run(content, "`") + 1)
        return _block(f"{fence}{language}\n{content}\n{fence}")

    def _code(self, node: ElementNode) -> str:
        if node.has_ancestor("PRE"):
            return node.text_content()
        content = collapse_whitespace(node.text_content())
        if not content.strip():
            return content
        fence = "`" * (_longest_run(content, "`") + 1)
        if content.startswith("`") or content.endswith("`"):
            content = f" {content} "
        return f"{fence}{content}{fence}"

    # ==================== Lists ====================

    def _list(self, node: ElementNode) -> str:
        ordered = node.tag == "OL"
        try:
            counter = int(node.attributes.get("start", "1"))
        except ValueError:
            counter = 1

        lines: list[str] = []
        # Continuation indent of the most recent item.
        indent = " " * len(f"{counter}. " if ordered else "* ")
        for child in node.children:
            if isinstance(child, str):
                if not child.strip():
                    continue
                content = collapse_whitespace(child).strip()
            elif child.tag in ("UL", "OL"):
                # Nested list placed directly in a list: attach to previous item.
                nested = self._list(child).strip("\n")
                lines.extend(f"{indent}{line}" if line else "" for line in nested.split("\n"))
                continue
            elif child.tag == "LI":
                content = self._list_item(child)
            else:
                content = self.render(child).strip()

            marker = f"{counter}. " if ordered else "* "
            counter += 1
            indent = " " * len(marker)
            item_lines = content.split("\n") if content else [""]
            lines.append(f"{marker}{item_lines[0]}".rstrip())
            lines.extend(f"{indent}{line}" if line else "" for line in item_lines[1:])

        body = "\n".join(lines)
        if not body.strip():
            return ""
        if node.has_ancestor("LI"):
            return f"\n{body}\n"
        return _block(body)

    def _list_item(self, node: ElementNode) -> str:
        buffer = ""
        for index, child in enumerate(node.children):
            if isinstance(child, ElementNode) and child.tag in ("UL", "OL"):
                nested = self.render(child).strip("\n")
                if not nested:
                    continue
                head = buffer.rstrip()
                buffer = f"{head}\n{nested}\n" if head else f"{nested}\n"
            else:
                buffer += self._render_at(node.children, index, node)
        buffer = collapse_blank_lines(buffer)
        return buffer.strip()

    # ==================== Tables ====================

    def _table(self, node: ElementNode) -> str:
        header_row: ElementNode | None = None
        rows: list[ElementNode] = []

        for section in node.element_children():
            if section.tag == "THEAD":
                section_rows = section.element_children("TR")
                if section_rows and header_row is None:
                    header_row = section_rows[0]
                    rows.extend(section_rows[1:])
                else:
                    rows.extend(section_rows)
            elif section.tag in ("TBODY", "TFOOT"):
                rows.extend(section.element_children("TR"))
            elif section.tag == "TR":
                rows.append(section)

        if header_row is None and rows:
            header_row = rows.pop(0)
        if header_row is None:
            return ""

        header = self._row_cells(header_row)
        body = [cells for cells in (self._row_cells(r) for r in rows) if cells]
        if not header:
            if not body:
                return ""
            header, body = body[0], body[1:]

        width = max([len(header)] + [len(cells) for cells in body])
        lines = [self._format_row(header, width), self._format_row(["---"] * width, width)]
        lines.extend(self._format_row(cells, width) for cells in body)
        return _block("\n".join(lines))

    def _row_cells(self, row: ElementNode) -> list[str]:
        cells: list[str] = []
        for cell in row.element_children("TD", "TH"):
            cells.append(self._cell(cell).replace("|", "\\|"))
            try:
                span = int(cell.attributes.get("colspan", "1"))
            except ValueError:
                span = 1
            cells.extend([""] * (max(1, min(span, 64)) - 1))
        return cells

    @staticmethod
    def _format_row(cells: list[str], width: int) -> str:
        padded = cells + [""] * (width - len(cells))
        return "| " + " | ".join(padded) + " |"

    def _cell(self, node: ElementNode) -> str:
        return collapse_whitespace(self.children(node)).strip()

    # ==================== Inline rules ====================

    def _bold(self, node: ElementNode) -> str:
        content = self.children(node)
        if _is_light_weight(node.style.get("font-weight")):
            # Word processors wrap whole documents in <b style="font-weight:normal">.
            return content
        return _wrap(content, "**")

    def _italic(self, node: ElementNode) -> str:
        content = self.children(node)
        if node.style.get("font-style", "").strip().lower() == "normal":
            return content
        return _wrap(content, "*")

    def _underline(self, node: ElementNode) -> str:
        return _wrap(self.children(node), "<u>", "</u>")

    def _strike(self, node: ElementNode) -> str:
        return _wrap(self.children(node), "~~")

    def _passthrough(self, node: ElementNode) -> str:
        tag = node.tag.lower()
        return _wrap(self.children(node), f"<{tag}>", f"</{tag}>")

    def _link(self, node: ElementNode) -> str:
        content = self.children(node)
        href = (node.attributes.get("href") or "").strip()
        if not href or href.lower().startswith(("javascript:", "vbscript:")):
            return content
        text = collapse_whitespace(content).strip().replace("]", "\\]") or href
        href = href.replace(" ", "%20").replace(")", "%29")
        return f"[{text}]({href})"

    def _image(self, node: ElementNode) -> str:
        src = (node.attributes.get("src") or "").strip()
        if src.startswith("//"):
            src = f"https:{src}"
        if not self._image_allowed(src):
            return ""
        alt = collapse_whitespace(node.attributes.get("alt", "")).strip().replace("]", "\\]")
        return f"![{alt}]({src.replace(' ', '%20')})"

    def _image_allowed(self, src: str) -> bool:
        lowered = src.lower()
        for scheme in self.image_schemes:
            if scheme == "data":
                if lowered.startswith("data:image/"):
                    return True
            elif lowered.startswith(f"{scheme}://"):
                return True
        return False

    def _styled(self, node: ElementNode) -> str:
        content = self.children(node)
        style = node.style

        # Skip styles the first child already expresses.
        first_tag = None
        if node.children and isinstance(node.children[0], ElementNode):
            first_tag = node.children[0].tag

        decoration = style.get("text-decoration", "").lower()
        if "underline" in decoration and first_tag not in ("U", "INS"):
            content = _wrap(content, "<u>", "</u>")
        if "line-through" in decoration and first_tag not in ("S", "STRIKE", "DEL"):
            content = _wrap(content, "<s>", "</s>")
        if _is_bold_weight(style.get("font-weight")) and first_tag not in ("B", "STRONG"):
            content = _wrap(content, "**")
        if style.get("font-style", "").strip().lower() in ("italic", "oblique") and first_tag not in ("I", "EM"):
            content = _wrap(content, "*")

        vertical = style.get("vertical-align", "").strip().lower()
        tag = _VERTICAL_ALIGN_TAGS.get(vertical)
        if tag and first_tag not in ("SUP", "SUB"):
            content = _wrap(content, f"<{tag}>", f"</{tag}>")

        declarations: list[str] = []
        color = _safe_style_value(style.get("color", ""))
        if color:
            declarations.append(f"color: {color};")
        background = _safe_style_value(style.get("background-color", ""))
        if background and background.lower() not in _TRANSPARENT:
            declarations.append(f"background-color: {background};")
        size = _safe_style_value(style.get("font-size", ""))
        if size:
            declarations.append(f"font-size: {size};")

        if declarations and content.strip():
            return _wrap(content, f'<span style="{" ".join(declarations)}">', "</span>")
        return content

