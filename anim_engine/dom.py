"""Host adapter contract and an in-memory element tree.

The engine never touches elements directly. It goes through a
``StyleAdapter`` that can look up descendants and set/remove inline styles.
``VirtualDomAdapter`` implements the contract over ``VirtualElement`` trees,
which is enough to run animations headless or in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

import cssselect
from cssselect.parser import Class, CombinedSelector, Element, Hash


class StyleAdapter(Protocol):
    """Operations the engine needs from its host."""

    def set_style(self, element: Any, prop: str, value: str) -> None:
        ...

    def remove_style(self, element: Any, prop: str) -> None:
        ...

    def get_computed_style(self, element: Any) -> Mapping[str, str]:
        ...

    def query_selector_all(self, root: Any, selector: str) -> list[Any]:
        ...


class UnsupportedSelectorError(ValueError):
    """Raised for object selectors the virtual tree cannot match."""

    pass


@dataclass(eq=False)
class VirtualElement:
    """A minimal element: tag, id, classes, children and inline style."""

    tag: str = "div"
    id: str = ""
    classes: set[str] = field(default_factory=set)
    children: list["VirtualElement"] = field(default_factory=list)
    style: dict[str, str] = field(default_factory=dict)
    parent: Optional["VirtualElement"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.classes = set(self.classes)
        for child in self.children:
            child.parent = self

    def append(self, child: "VirtualElement") -> "VirtualElement":
        """Append a child and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def descendants(self):
        """Yield all descendants in document order."""
        for child in self.children:
            yield child
            yield from child.descendants()


# Styles a bare element reports when nothing is set inline.
DEFAULT_COMPUTED_STYLE: dict[str, str] = {
    "opacity": "1",
    "transform": "none",
    "color": "#000000",
    "background-color": "transparent",
    "display": "block",
}


class VirtualDomAdapter:
    """``StyleAdapter`` over ``VirtualElement`` trees.

    Object selectors are parsed with cssselect. Type, class and id selectors,
    compounds of them, and descendant/child combinators are supported.
    """

    def __init__(self, default_style: Optional[Mapping[str, str]] = None) -> None:
        self.default_style = dict(
            DEFAULT_COMPUTED_STYLE if default_style is None else default_style
        )
        self._selector_cache: dict[str, list[cssselect.Selector]] = {}

    def set_style(self, element: VirtualElement, prop: str, value: str) -> None:
        element.style[prop] = value

    def remove_style(self, element: VirtualElement, prop: str) -> None:
        element.style.pop(prop, None)

    def get_computed_style(self, element: VirtualElement) -> dict[str, str]:
        return {**self.default_style, **element.style}

    def query_selector_all(self, root: VirtualElement, selector: str) -> list[VirtualElement]:
        parsed = self._parse(selector)
        return [
            el
            for el in root.descendants()
            if any(self._matches(el, sel.parsed_tree, root) for sel in parsed)
        ]

    def _parse(self, selector: str) -> list[cssselect.Selector]:
        if selector not in self._selector_cache:
            try:
                self._selector_cache[selector] = cssselect.parse(selector)
            except cssselect.SelectorSyntaxError as e:
                raise UnsupportedSelectorError(f"Invalid selector '{selector}': {e}") from e
        return self._selector_cache[selector]

    def _matches(self, element: VirtualElement, tree: Any, root: VirtualElement) -> bool:
        if isinstance(tree, Element):
            return tree.element is None or element.tag.lower() == tree.element.lower()

        if isinstance(tree, Class):
            return tree.class_name in element.classes and self._matches(
                element, tree.selector, root
            )

        if isinstance(tree, Hash):
            return element.id == tree.id and self._matches(element, tree.selector, root)

        if isinstance(tree, CombinedSelector):
            if not self._matches(element, tree.subselector, root):
                return False
            if tree.combinator == " ":
                ancestor = element.parent
                while ancestor is not None and ancestor is not root:
                    if self._matches(ancestor, tree.selector, root):
                        return True
                    ancestor = ancestor.parent
                return False
            if tree.combinator == ">":
                parent = element.parent
                return (
                    parent is not None
                    and parent is not root
                    and self._matches(parent, tree.selector, root)
                )

        raise UnsupportedSelectorError(f"Unsupported selector part: {tree!r}")
