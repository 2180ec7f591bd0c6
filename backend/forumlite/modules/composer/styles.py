"""
CSS-lite declaration resolver.

Resolves the handful of presentational properties the markdown serializer
cares about from three sources: ``<style>`` sheets (simple selectors only),
legacy ``<font>`` attributes and the inline ``style`` attribute.
"""

import re
from dataclasses import dataclass, field

TRACKED_PROPERTIES = frozenset(
    {
        "color",
        "background-color",
        "font-size",
        "font-weight",
        "font-style",
        "text-decoration",
        "vertical-align",
        "text-align",
        "display",
    }
)

# Shorthands and longhands folded onto a tracked property.
PROPERTY_ALIASES = {
    "background": "background-color",
    "text-decoration-line": "text-decoration",
}

# Legacy <font size="1..7"> to pixels, matching common browser defaults.
FONT_SIZE_PX = {
    1: "10px",
    2: "13px",
    3: "16px",
    4: "18px",
    5: "24px",
    6: "32px",
    7: "48px",
}

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)
_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_AT_BLOCK_RE = re.compile(r"@[\w-]+[^{;]*(\{(?:[^{}]*\{[^{}]*\})*[^{}]*\}|;)", re.S)
_SIMPLE_SELECTOR_RE = re.compile(
    r"^(?P<tag>[a-zA-Z][a-zA-Z0-9]*|\*)?"
    r"(?P<rest>(?:[.#][a-zA-Z_-][\w-]*)*)$"
)
_COLOR_TOKEN_RE = re.compile(r"#[0-9a-fA-F]{3,8}|(?:rgba?|hsla?)\([^)]*\)|[a-zA-Z][a-zA-Z-]*")
_BACKGROUND_KEYWORDS = frozenset(
    {
        "none", "repeat", "no-repeat", "repeat-x", "repeat-y", "space", "round",
        "center", "top", "left", "right", "bottom", "fixed", "scroll", "local",
        "auto", "cover", "contain", "border-box", "padding-box", "content-box",
    }
)


def parse_declarations(text: str | None) -> dict[str, str]:
    """
    Parse ``prop: value; ...`` into tracked properties.

    Property names are lower-cased, ``!important`` is dropped and
    unknown or malformed declarations are skipped.
    """
    result: dict[str, str] = {}
    if not text:
        return result

    for chunk in text.split(";"):
        if ":" not in chunk:
            continue
        name, _, value = chunk.partition(":")
        name = name.strip().lower()
        value = re.sub(r"\s*!important\s*$", "", value.strip(), flags=re.I)
        if not name or not value:
            continue

        name = PROPERTY_ALIASES.get(name, name)
        if name not in TRACKED_PROPERTIES:
            continue
        if name == "background-color":
            # Keep only the color part of a "background" shorthand.
            value = _background_color(value)
            if not value:
                continue
        result[name] = value

    return result


def _background_color(value: str) -> str:
    if "url(" in value.lower():
        tokens = [t for t in value.split() if not t.lower().startswith("url(")]
        value = " ".join(tokens)
    # Shorthands list the color anywhere; take the first color-looking token.
    for token in _COLOR_TOKEN_RE.findall(value):
        if token.lower() not in _BACKGROUND_KEYWORDS:
            return token
    return ""


def font_size_from_attribute(size: str | None) -> str | None:
    """
    Map a legacy ``<font size>`` value to pixels.

    Absolute sizes are 1-7; relative ``+N``/``-N`` are taken from base 3
    and clamped to the same range.
    """
    size = (size or "").strip()
    if not size:
        return None
    try:
        if size[0] in "+-":
            level = 3 + int(size)
        else:
            level = int(size)
    except ValueError:
        return None
    level = max(1, min(7, level))
    return FONT_SIZE_PX[level]


@dataclass(frozen=True)
class Selector:
    """Simple selector: optional tag plus classes and id."""

    tag: str | None
    classes: tuple[str, ...] = ()
    element_id: str | None = None

    @property
    def specificity(self) -> tuple[int, int, int]:
        return (
            1 if self.element_id else 0,
            len(self.classes),
            1 if self.tag else 0,
        )

    def matches(self, tag: str, attributes: dict[str, str]) -> bool:
        if self.tag and self.tag != tag.upper():
            return False
        if self.element_id and attributes.get("id") != self.element_id:
            return False
        if self.classes:
            element_classes = set(attributes.get("class", "").split())
            if not set(self.classes) <= element_classes:
                return False
        return True

    @classmethod
    def parse(cls, text: str) -> "Selector | None":
        """Parse one simple selector, or None when it is not supported."""
        match = _SIMPLE_SELECTOR_RE.match(text.strip())
        if not match or not text.strip():
            return None

        tag = match.group("tag")
        tag = tag.upper() if tag and tag != "*" else None

        classes: list[str] = []
        element_id: str | None = None
        for part in re.findall(r"[.#][\w-]+", match.group("rest") or ""):
            if part[0] == ".":
                classes.append(part[1:])
            else:
                element_id = part[1:]

        return cls(tag=tag, classes=tuple(classes), element_id=element_id)


@dataclass
class StyleRule:
    selector: Selector
    declarations: dict[str, str]
    order: int


@dataclass
class StyleSheet:
    """Rules collected from ``<style>`` elements."""

    rules: list[StyleRule] = field(default_factory=list)

    @classmethod
    def from_css(cls, css: str) -> "StyleSheet":
        sheet = cls()
        sheet.add_css(css)
        return sheet

    def add_css(self, css: str) -> None:
        """Add rules from a CSS text. Unsupported selectors are ignored."""
        css = _COMMENT_RE.sub("", css or "")
        css = _AT_BLOCK_RE.sub("", css)

        for selector_text, body in _RULE_RE.findall(css):
            declarations = parse_declarations(body)
            if not declarations:
                continue
            for part in selector_text.split(","):
                selector = Selector.parse(part)
                if selector is None:
                    continue
                self.rules.append(
                    StyleRule(selector=selector, declarations=declarations, order=len(self.rules))
                )

    def resolve(self, tag: str, attributes: dict[str, str]) -> dict[str, str]:
        """
        Resolve tracked properties for an element.

        Legacy font attributes come first, then matched rules in ascending
        specificity (source order breaks ties), then the inline style.
        """
        resolved: dict[str, str] = {}

        if tag.upper() == "FONT":
            color = attributes.get("color")
            if color:
                resolved["color"] = color.strip()
            size = font_size_from_attribute(attributes.get("size"))
            if size:
                resolved["font-size"] = size

        matched = [r for r in self.rules if r.selector.matches(tag, attributes)]
        matched.sort(key=lambda r: (r.selector.specificity, r.order))
        for rule in matched:
            resolved.update(rule.declarations)

        resolved.update(parse_declarations(attributes.get("style")))
        return resolved
