"""Tests for the virtual element tree and its style adapter."""

import pytest

from anim_engine.dom import (
    DEFAULT_COMPUTED_STYLE,
    UnsupportedSelectorError,
    VirtualDomAdapter,
    VirtualElement,
)


def _tree():
    circle = VirtualElement(classes={"circle", "shape"})
    label = VirtualElement(tag="span", id="label", classes={"text"})
    inner = VirtualElement(tag="span", classes={"text", "inner"})
    group = VirtualElement(tag="section", classes={"group"}, children=[inner])
    root = VirtualElement(id="layer-1", children=[circle, label, group])
    return root, circle, label, group, inner


class TestVirtualElement:
    def test_children_get_parent(self):
        root, circle, *_ = _tree()
        assert circle.parent is root

    def test_append(self):
        root = VirtualElement()
        child = root.append(VirtualElement(tag="p"))
        assert child.parent is root
        assert root.children == [child]

    def test_descendants_in_document_order(self):
        root, circle, label, group, inner = _tree()
        assert list(root.descendants()) == [circle, label, group, inner]


class TestQuerySelectorAll:
    def setup_method(self):
        self.adapter = VirtualDomAdapter()
        self.root, self.circle, self.label, self.group, self.inner = _tree()

    def test_class(self):
        assert self.adapter.query_selector_all(self.root, ".circle") == [self.circle]

    def test_multiple_matches(self):
        assert self.adapter.query_selector_all(self.root, ".text") == [self.label, self.inner]

    def test_tag(self):
        assert self.adapter.query_selector_all(self.root, "span") == [self.label, self.inner]

    def test_id(self):
        assert self.adapter.query_selector_all(self.root, "#label") == [self.label]

    def test_compound(self):
        assert self.adapter.query_selector_all(self.root, "span.inner") == [self.inner]

    def test_descendant(self):
        assert self.adapter.query_selector_all(self.root, ".group .text") == [self.inner]

    def test_child(self):
        assert self.adapter.query_selector_all(self.root, "section > span") == [self.inner]

    def test_root_is_not_a_candidate(self):
        assert self.adapter.query_selector_all(self.root, "#layer-1") == []

    def test_ancestors_scoped_to_root(self):
        assert self.adapter.query_selector_all(self.root, "#layer-1 .circle") == []

    def test_selector_group(self):
        result = self.adapter.query_selector_all(self.root, ".circle, #label")
        assert result == [self.circle, self.label]

    def test_no_match(self):
        assert self.adapter.query_selector_all(self.root, ".missing") == []

    def test_invalid_selector(self):
        with pytest.raises(UnsupportedSelectorError, match="Invalid selector"):
            self.adapter.query_selector_all(self.root, ".")

    def test_unsupported_selector(self):
        with pytest.raises(UnsupportedSelectorError):
            self.adapter.query_selector_all(self.root, "div:first-child")


class TestStyles:
    def test_set_and_remove(self):
        adapter = VirtualDomAdapter()
        el = VirtualElement()
        adapter.set_style(el, "opacity", "0.5")
        assert el.style == {"opacity": "0.5"}
        adapter.remove_style(el, "opacity")
        assert el.style == {}

    def test_remove_missing_is_noop(self):
        adapter = VirtualDomAdapter()
        el = VirtualElement()
        adapter.remove_style(el, "opacity")
        assert el.style == {}

    def test_computed_style_defaults(self):
        adapter = VirtualDomAdapter()
        el = VirtualElement(style={"opacity": "0.2"})
        computed = adapter.get_computed_style(el)
        assert computed["opacity"] == "0.2"
        assert computed["transform"] == DEFAULT_COMPUTED_STYLE["transform"]

    def test_custom_defaults(self):
        adapter = VirtualDomAdapter(default_style={"color": "#ff0000"})
        assert adapter.get_computed_style(VirtualElement()) == {"color": "#ff0000"}
