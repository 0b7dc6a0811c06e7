import random
from collections import Counter, defaultdict

import pytest

from menukit.components.menus import (
    AddMenuItemInput,
    BulkReorderMenuItemsInput,
    DeleteMenuItemInput,
    ItemOrder,
    MenuService,
    UpdateMenuItemInput,
)
from menukit.components.menus._hierarchy import has_cycle, parent_map
from menukit.components.menus.errors import MenuError
from tests.helpers import add_link


def _assert_dense(service: MenuService, menu_id):
    groups = defaultdict(list)
    for item in service.list_menu_items(menu_id):
        groups[item.parent_id].append(item.position)
    for positions in groups.values():
        assert sorted(positions) == list(range(len(positions)))


def _assert_unique_keys(service: MenuService, menu_id):
    keys = Counter(i.canonical_key for i in service.list_menu_items(menu_id) if i.canonical_key)
    assert all(count == 1 for count in keys.values())


def _assert_acyclic(service: MenuService, menu_id):
    assert not has_cycle(parent_map(service.list_menu_items(menu_id)))


def _assert_navigation_clean(nodes):
    if nodes:
        assert nodes[0].type != "separator"
        assert nodes[-1].type != "separator"
    for prev, cur in zip(nodes, nodes[1:]):
        assert not (prev.type == cur.type == "separator")
    for node in nodes:
        if node.type == "group":
            assert node.children or node.group_title or node.icon
        if not node.children:
            assert not node.collapsible and not node.collapsed
        _assert_navigation_clean(node.children)


def _random_edits(service: MenuService, menu_id, seed: int) -> None:
    rng = random.Random(seed)
    for step in range(60):
        items = service.list_menu_items(menu_id)
        action = rng.choice(["add", "add", "separator", "group", "move", "delete", "reorder"])
        try:
            if action == "add" or not items:
                parent = rng.choice(items).id if items and rng.random() < 0.4 else None
                add_link(service, menu_id, f"/p/{step}", f"P{step}", position=rng.randint(0, 6), parent_id=parent)
            elif action == "separator":
                service.add_menu_item(
                    AddMenuItemInput(menu_id=menu_id, type="separator", position=rng.randint(0, 6))
                )
            elif action == "group":
                service.add_menu_item(
                    AddMenuItemInput(
                        menu_id=menu_id,
                        type="group",
                        position=rng.randint(0, 6),
                        external_code=f"g{step}",
                        allow_missing_translations=True,
                    )
                )
            elif action == "move":
                item = rng.choice(items)
                target = rng.choice(items)
                service.update_menu_item(
                    UpdateMenuItemInput(item_id=item.id, parent_id=target.id, position=rng.randint(0, 4))
                )
            elif action == "delete":
                service.delete_menu_item(
                    DeleteMenuItemInput(item_id=rng.choice(items).id, cascade_children=rng.random() < 0.5)
                )
            else:
                shuffled = list(items)
                rng.shuffle(shuffled)
                service.bulk_reorder_menu_items(
                    BulkReorderMenuItemsInput(
                        menu_id=menu_id,
                        items=tuple(
                            ItemOrder(item_id=i.id, position=idx * 3, parent_id=i.parent_id)
                            for idx, i in enumerate(shuffled)
                        ),
                    )
                )
        except MenuError:
            # Rejected operations must leave the menu consistent too
            pass
        _assert_dense(service, menu_id)
        _assert_unique_keys(service, menu_id)
        _assert_acyclic(service, menu_id)


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_structure_invariants_hold_under_edits(service, menu, seed):
    _random_edits(service, menu.id, seed)
    _assert_navigation_clean(service.resolve_navigation("primary", "en"))


def test_translation_uniqueness_per_locale(service, menu, translation_repo):
    item = add_link(service, menu.id, "/a", "A")
    for _ in range(3):
        add_link(service, menu.id, "/a", "A again")
    locales = Counter(t.locale_id for t in translation_repo.list_by_item(item.id))
    assert all(count == 1 for count in locales.values())
