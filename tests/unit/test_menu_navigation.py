"""
Tests for navigation node building and normalization.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from menukit.components.menus._navigation import (
    NavigationBuilder,
    is_effectively_empty_group,
    normalize_navigation_nodes,
    select_translation,
)
from menukit.components.menus.models import NavigationNode
from menukit.domain.entities import MenuItem, MenuItemTranslation

EN = uuid4()
FR = uuid4()


def _node(position: int, type: str = "item", node_id: UUID | None = None, **kwargs) -> NavigationNode:
    return NavigationNode(id=node_id or uuid4(), position=position, type=type, **kwargs)


def _tr(item: MenuItem, locale: UUID, **kwargs) -> MenuItemTranslation:
    return MenuItemTranslation(menu_item_id=item.id, locale_id=locale, **kwargs)


class TestSelectTranslation:
    def test_exact_locale(self) -> None:
        item = MenuItem(menu_id=uuid4())
        en, fr = _tr(item, EN, label="Home"), _tr(item, FR, label="Accueil")
        assert select_translation([en, fr], FR) is fr

    def test_falls_back_to_first(self) -> None:
        item = MenuItem(menu_id=uuid4())
        en = _tr(item, EN, label="Home")
        assert select_translation([en], uuid4()) is en
        assert select_translation([en], None) is en
        assert select_translation([], EN) is None


class TestNormalizeNodes:
    def test_separators_trimmed_and_collapsed(self) -> None:
        nodes = [
            _node(0, "separator"),
            _node(1, label="A"),
            _node(2, "separator"),
            _node(3, "separator"),
            _node(4, label="B"),
            _node(5, "separator"),
        ]
        out = normalize_navigation_nodes(nodes)
        assert [n.type for n in out] == ["item", "separator", "item"]

    def test_only_separators_yields_nothing(self) -> None:
        assert normalize_navigation_nodes([_node(0, "separator"), _node(1, "separator")]) == []

    def test_empty_group_dropped(self) -> None:
        out = normalize_navigation_nodes([_node(0, "group", label="Docs"), _node(1, label="A")])
        assert [n.label for n in out] == ["A"]

    def test_group_with_title_kept(self) -> None:
        out = normalize_navigation_nodes([_node(0, "group", group_title="Docs")])
        assert len(out) == 1

    def test_group_emptied_by_child_normalization_is_dropped(self) -> None:
        group = _node(0, "group", children=[_node(0, "separator")])
        assert normalize_navigation_nodes([group]) == []

    def test_leaf_loses_collapsible_flags(self) -> None:
        (leaf,) = normalize_navigation_nodes([_node(0, collapsible=True, collapsed=True)])
        assert (leaf.collapsible, leaf.collapsed) == (False, False)

    def test_collapsed_requires_collapsible(self) -> None:
        parent = _node(0, collapsed=True, children=[_node(0, label="child")])
        (out,) = normalize_navigation_nodes([parent])
        assert out.collapsed is False

    def test_parent_keeps_flags(self) -> None:
        parent = _node(0, collapsible=True, collapsed=True, children=[_node(0, label="c")])
        (out,) = normalize_navigation_nodes([parent])
        assert (out.collapsible, out.collapsed) == (True, True)

    def test_position_ties_broken_by_id_bytes(self) -> None:
        low = UUID("00000000-0000-0000-0000-000000000001")
        high = UUID("ff000000-0000-0000-0000-000000000000")
        out = normalize_navigation_nodes([_node(0, node_id=high), _node(0, node_id=low)])
        assert [n.id for n in out] == [low, high]

    def test_empty_group_detection(self) -> None:
        assert is_effectively_empty_group(_node(0, "group", label="x"))
        assert not is_effectively_empty_group(_node(0, "group", icon="folder"))
        assert not is_effectively_empty_group(_node(0, "item"))


class TestNavigationBuilder:
    def _builder(self, locale: UUID | None = EN) -> NavigationBuilder:
        return NavigationBuilder(lambda item, tr: str(item.target.get("url", "")), locale)

    def test_item_label_and_url(self) -> None:
        item = MenuItem(menu_id=uuid4(), target={"type": "url", "url": "/docs"})
        item.translations = [_tr(item, EN, label="Docs"), _tr(item, FR, label="Documentation")]
        (node,) = self._builder(FR).build([item])
        assert node.label == "Documentation"
        assert node.url == "/docs"

    def test_item_label_falls_back_to_slug(self) -> None:
        item = MenuItem(menu_id=uuid4(), target={"type": "page", "slug": "about"})
        (node,) = self._builder().build([item])
        assert node.label == "about"

    def test_item_label_falls_back_to_id(self) -> None:
        item = MenuItem(menu_id=uuid4(), target={})
        (node,) = self._builder().build([item])
        assert node.label == str(item.id)

    def test_group_label_prefers_group_title(self) -> None:
        group = MenuItem(menu_id=uuid4(), type="group")
        group.translations = [_tr(group, EN, label="Label", group_title="Title")]
        child = MenuItem(menu_id=group.menu_id, target={"type": "url", "url": "/c"})
        child.translations = [_tr(child, EN, label="Child")]
        group.children = [child]
        (node,) = self._builder().build([group])
        assert node.label == "Title"
        assert node.url == ""
        assert [c.label for c in node.children] == ["Child"]

    def test_separator_has_no_label(self) -> None:
        first = MenuItem(menu_id=uuid4(), position=0, target={"type": "url", "url": "/a"})
        sep = MenuItem(menu_id=first.menu_id, position=1, type="separator")
        last = MenuItem(menu_id=first.menu_id, position=2, target={"type": "url", "url": "/b"})
        nodes = self._builder().build([first, sep, last])
        assert [n.type for n in nodes] == ["item", "separator", "item"]
        assert nodes[1].label == ""

    def test_to_dict_omits_empty_fields(self) -> None:
        item = MenuItem(menu_id=uuid4(), target={"type": "url", "url": "/x"})
        item.translations = [_tr(item, EN, label="X")]
        (node,) = self._builder().build([item])
        data = node.to_dict()
        assert data["label"] == "X"
        assert data["url"] == "/x"
        assert "children" not in data
        assert "icon" not in data
