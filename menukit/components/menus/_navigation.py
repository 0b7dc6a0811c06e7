"""
Navigation tree building and normalization.

Turns a hydrated item tree into render-ready ``NavigationNode`` objects for
one locale, then normalizes every sibling level:

- children are normalized first
- empty placeholder groups (no children, no presentational content) vanish
- collapsible/collapsed are cleared on leaves and separators
- siblings sort by position, ties broken on raw id bytes
- leading, repeated and trailing separators are dropped
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Sequence
from uuid import UUID

from menukit.domain.entities import MenuItem, MenuItemTranslation

from .models import NavigationNode

URLFunc = Callable[[MenuItem, MenuItemTranslation | None], str]


def select_translation(
    translations: Sequence[MenuItemTranslation],
    locale_id: UUID | None,
) -> MenuItemTranslation | None:
    """Exact locale match, else the first translation."""
    if locale_id is not None:
        for tr in translations:
            if tr.locale_id == locale_id:
                return tr
    return translations[0] if translations else None


def _group_label(label: str, label_key: str, group_title: str, group_title_key: str) -> str:
    for candidate in (group_title, group_title_key, label, label_key):
        if candidate:
            return candidate
    return ""


def _item_label(item: MenuItem, translation: MenuItemTranslation | None, label: str, label_key: str) -> str:
    if label:
        return label
    if label_key:
        return label_key
    slug = str(item.target.get("slug") or "").strip()
    if slug:
        return slug
    if translation is not None and translation.label:
        return translation.label
    target_type = item.target.get("type")
    if isinstance(target_type, str) and target_type:
        return target_type
    return str(item.id)


class NavigationBuilder:
    """Builds navigation nodes for one locale."""

    def __init__(self, url_for: URLFunc, locale_id: UUID | None = None) -> None:
        self._url_for = url_for
        self._locale_id = locale_id

    def build(self, roots: Iterable[MenuItem]) -> list[NavigationNode]:
        return normalize_navigation_nodes([self.build_node(item) for item in roots])

    def build_node(self, item: MenuItem) -> NavigationNode:
        node = NavigationNode(
            id=item.id,
            position=item.position,
            type=item.type or "item",
            target=copy.deepcopy(item.target),
            icon=item.icon.strip(),
            badge=copy.deepcopy(item.badge),
            permissions=list(item.permissions),
            classes=list(item.classes),
            styles=dict(item.styles),
            collapsible=item.collapsible,
            collapsed=item.collapsed,
            metadata=copy.deepcopy(item.metadata),
        )
        if node.type == "separator":
            node.collapsible = False
            node.collapsed = False
            return node

        translation = select_translation(item.translations, self._locale_id)
        label = label_key = group_title = group_title_key = ""
        if translation is not None:
            label = translation.label.strip()
            label_key = translation.label_key.strip()
            group_title = translation.group_title.strip()
            group_title_key = translation.group_title_key.strip()
            node.label_key = label_key
            node.group_title = group_title
            node.group_title_key = group_title_key

        if node.type == "group":
            node.label = _group_label(label, label_key, group_title, group_title_key)
        else:
            node.label = _item_label(item, translation, label, label_key)
            node.url = self._url_for(item, translation)

        node.children = [self.build_node(child) for child in item.children]
        return node


def is_effectively_empty_group(node: NavigationNode) -> bool:
    if node.type != "group":
        return False
    if node.group_title.strip() or node.group_title_key.strip():
        return False
    if node.url.strip() or node.icon.strip():
        return False
    if node.target or node.badge or node.permissions or node.classes:
        return False
    return not (node.styles or node.metadata)


def normalize_navigation_nodes(nodes: Iterable[NavigationNode]) -> list[NavigationNode]:
    candidates: list[NavigationNode] = []
    for node in nodes:
        if not node.type:
            node.type = "item"
        node.children = normalize_navigation_nodes(node.children)
        if node.type == "group" and not node.children and is_effectively_empty_group(node):
            continue

        if node.type == "separator" or not node.children:
            node.collapsible = False
            node.collapsed = False
        elif not node.collapsible:
            node.collapsed = False
        candidates.append(node)

    candidates.sort(key=lambda n: (n.position, n.id.bytes))

    normalized: list[NavigationNode] = []
    prev_separator = False
    for node in candidates:
        if node.type == "separator":
            if prev_separator or not normalized:
                continue
            prev_separator = True
        else:
            prev_separator = False
        normalized.append(node)

    while normalized and normalized[-1].type == "separator":
        normalized.pop()
    return normalized
