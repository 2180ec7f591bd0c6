"""
Simplified HTML node tree.

Text leaves are plain ``str``. Elements own their children; the parent link
is a weak reference used only for context lookups ("am I inside an LI?").
"""

import weakref
from dataclasses import dataclass, field
from typing import Union


@dataclass(eq=False)
class ElementNode:
    """Element in the simplified tree."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    style: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    _parent: weakref.ReferenceType | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tag = self.tag.upper()
        for child in self.children:
            if isinstance(child, ElementNode):
                child._parent = weakref.ref(self)

    @property
    def parent(self) -> "ElementNode | None":
        """Parent element, if it is still alive."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def parent_tag(self) -> str | None:
        parent = self.parent
        return parent.tag if parent is not None else None

    def append(self, child: "Node") -> None:
        """Attach child and point its parent link here."""
        if isinstance(child, ElementNode):
            child._parent = weakref.ref(self)
        self.children.append(child)

    def element_children(self, *tags: str) -> list["ElementNode"]:
        """Element children, optionally filtered by tag."""
        wanted = {t.upper() for t in tags}
        return [
            c for c in self.children
            if isinstance(c, ElementNode) and (not wanted or c.tag in wanted)
        ]

    def find_child(self, *tags: str) -> "ElementNode | None":
        """First element child with one of the given tags."""
        found = self.element_children(*tags)
        return found[0] if found else None

    def find_descendant(self, *tags: str) -> "ElementNode | None":
        """First element in the subtree (depth-first) with one of the tags."""
        wanted = {t.upper() for t in tags}
        for child in self.element_children():
            if child.tag in wanted:
                return child
            found = child.find_descendant(*tags)
            if found is not None:
                return found
        return None

    def text_content(self) -> str:
        """Concatenated raw text of the subtree."""
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, ElementNode):
                if child.tag == "BR":
                    parts.append("\n")
                else:
                    parts.append(child.text_content())
            else:
                parts.append(child)
        return "".join(parts)

    def has_class(self, name: str) -> bool:
        return name in self.attributes.get("class", "").split()

    def has_ancestor(self, *tags: str) -> bool:
        """True when any ancestor has one of the given tags."""
        wanted = {t.upper() for t in tags}
        node = self.parent
        while node is not None:
            if node.tag in wanted:
                return True
            node = node.parent
        return False


Node = Union[ElementNode, str]
