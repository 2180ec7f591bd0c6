"""
Clipboard HTML parser.

Turns an HTML string into the simplified node tree consumed by the
markdown serializer. BeautifulSoup's ``html.parser`` backend is used so no
native parser is required.
"""

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
from loguru import logger

from forumlite.modules.composer.exceptions import PasteParseError
from forumlite.modules.composer.nodes import ElementNode, Node
from forumlite.modules.composer.styles import StyleSheet

# Elements removed together with their content.
DROPPED_TAGS = frozenset(
    {"style", "script", "head", "title", "meta", "link", "template", "noscript"}
)


def _attribute_value(value: str | list[str]) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


class HtmlTreeBuilder:
    """
    Builds ``ElementNode`` trees from a parsed document.

    Usage:
        nodes = HtmlTreeBuilder().parse("<p>Hello <b>world</b></p>")
    """

    def __init__(self, parser_backend: str = "html.parser") -> None:
        self.parser_backend = parser_backend
        self.stylesheet = StyleSheet()

    def parse(self, html: str) -> list[Node]:
        """
        Parse HTML into a list of top-level nodes.

        Raises:
            PasteParseError: the backend failed on the input
        """
        try:
            soup = BeautifulSoup(html, self.parser_backend)
        except Exception as e:
            raise PasteParseError(f"Failed to parse clipboard HTML: {e}") from e

        # Sheets apply to the whole document, so gather them first.
        for style_tag in soup.find_all("style"):
            self.stylesheet.add_css(style_tag.get_text())

        root = soup.body or soup
        nodes: list[Node] = []
        for child in root.children:
            node = self._convert(child)
            if node is not None:
                nodes.append(node)

        logger.debug(f"Parsed clipboard HTML into {len(nodes)} top-level nodes")
        return nodes

    def _convert(self, item: object) -> Node | None:
        if isinstance(item, PreformattedString):
            return None  # comments, doctypes, CDATA
        if isinstance(item, NavigableString):
            return str(item)
        if not isinstance(item, Tag):
            return None

        name = (item.name or "").lower()
        if name in DROPPED_TAGS:
            return None

        attributes = {
            key.lower(): _attribute_value(value)
            for key, value in item.attrs.items()
        }
        style = self.stylesheet.resolve(name, attributes)
        attributes.pop("style", None)

        element = ElementNode(tag=name, attributes=attributes, style=style)
        for child in item.children:
            node = self._convert(child)
            if node is not None:
                element.append(node)
        return element


def parse_html(html: str) -> list[Node]:
    """Parse clipboard HTML into simplified top-level nodes."""
    return HtmlTreeBuilder().parse(html)
