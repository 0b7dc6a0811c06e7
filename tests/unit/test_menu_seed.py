"""
Tests for path-addressed item operations and declarative seeding.
"""

from __future__ import annotations

from typing import Any

import pytest

from menukit.components.menus import (
    MenuItemTranslationInput,
    MenuPaths,
    MenuService,
    SeedMenuOptions,
    UpdateMenuItemByPathInput,
    UpsertMenuItemByPathInput,
    seed_menu,
)
from menukit.components.menus.errors import (
    MenuItemNotFoundError,
    MenuItemPathMismatchError,
    ParentInvalidError,
    ReorderMismatchError,
    SeedMenuError,
)
from tests.helpers import ACTOR, FR_ID, label


@pytest.fixture
def paths(service: MenuService) -> MenuPaths:
    return MenuPaths(service)


def _link(path: str, text: str, **kwargs: Any) -> UpsertMenuItemByPathInput:
    url = "/" + path.replace(".", "/")
    return UpsertMenuItemByPathInput(
        path=path,
        target={"type": "url", "url": url},
        translations=(label("en", text),),
        actor_id=ACTOR,
        **kwargs,
    )


def _order(paths: MenuPaths, menu_code: str, parent_path: str | None = None) -> list[str]:
    items = paths.list_items(menu_code)
    by_code = {i.external_code: i for i in items}
    parent_id = by_code[parent_path].id if parent_path else None
    siblings = sorted((i for i in items if i.parent_id == parent_id), key=lambda i: i.position)
    return [i.external_code for i in siblings]


@pytest.fixture
def nav(paths: MenuPaths) -> MenuPaths:
    for path, text in [("nav.a", "A"), ("nav.b", "B"), ("nav.c", "C")]:
        paths.upsert_item_by_path(_link(path, text))
    return paths


class TestPathItems:
    def test_upsert_creates_menu_and_appends(self, nav: MenuPaths) -> None:
        assert nav.service.get_menu_by_code("nav").code == "nav"
        assert _order(nav, "nav") == ["nav.a", "nav.b", "nav.c"]

    def test_upsert_is_idempotent(self, nav: MenuPaths) -> None:
        before = {i.external_code: i.id for i in nav.list_items("nav")}
        again = nav.upsert_item_by_path(_link("nav.b", "B"))
        assert again.id == before["nav.b"]
        assert len(nav.list_items("nav")) == 3

    def test_child_attaches_to_parent_path(self, nav: MenuPaths) -> None:
        child = nav.upsert_item_by_path(_link("nav.a.one", "One"))
        parent = nav.service.get_menu_item_by_external_code("nav", "nav.a")
        assert child.parent_id == parent.id

    def test_explicit_parent_path(self, nav: MenuPaths) -> None:
        moved = nav.upsert_item_by_path(_link("nav.extra", "Extra", parent_path="nav.b"))
        parent = nav.service.get_menu_item_by_external_code("nav", "nav.b")
        assert moved.parent_id == parent.id

    def test_missing_parent_rejected(self, paths: MenuPaths) -> None:
        with pytest.raises(ParentInvalidError):
            paths.upsert_item_by_path(_link("nav.ghost.child", "Child"))

    def test_update_moves_and_detaches(self, nav: MenuPaths) -> None:
        moved = nav.update_item_by_path(
            "nav", "nav.c", UpdateMenuItemByPathInput(parent_path="nav.a")
        )
        assert _order(nav, "nav", "nav.a") == ["nav.c"]

        back = nav.update_item_by_path(
            "nav", "nav.c", UpdateMenuItemByPathInput(parent_path="nav", position=0)
        )
        assert moved.parent_id is not None
        assert back.parent_id is None
        assert _order(nav, "nav") == ["nav.c", "nav.a", "nav.b"]

    def test_update_fields(self, nav: MenuPaths) -> None:
        updated = nav.update_item_by_path("nav", "nav.a", UpdateMenuItemByPathInput(icon="home"))
        assert updated.icon == "home"

    def test_delete(self, nav: MenuPaths) -> None:
        nav.delete_item_by_path("nav", "nav.b", ACTOR)
        assert _order(nav, "nav") == ["nav.a", "nav.c"]
        with pytest.raises(MenuItemNotFoundError):
            nav.delete_item_by_path("nav", "nav.b")

    def test_translation_by_path(self, nav: MenuPaths, translation_repo) -> None:
        nav.upsert_translation_by_path("nav", "nav.a", label("fr", "A fr"))
        item = nav.service.get_menu_item_by_external_code("nav", "nav.a")
        labels = {t.locale_id: t.label for t in translation_repo.list_by_item(item.id)}
        assert labels[FR_ID] == "A fr"

    def test_path_for_other_menu(self, nav: MenuPaths) -> None:
        with pytest.raises(MenuItemPathMismatchError):
            nav.delete_item_by_path("nav", "footer.a")


class TestMoves:
    def test_move_to_top_and_bottom(self, nav: MenuPaths) -> None:
        nav.move_to_top("nav", "nav.c")
        assert _order(nav, "nav") == ["nav.c", "nav.a", "nav.b"]
        nav.move_to_bottom("nav", "nav.c")
        assert _order(nav, "nav") == ["nav.a", "nav.b", "nav.c"]

    def test_move_before_and_after(self, nav: MenuPaths) -> None:
        nav.move_before("nav", "nav.c", "nav.a")
        assert _order(nav, "nav") == ["nav.c", "nav.a", "nav.b"]
        nav.move_after("nav", "nav.c", "nav.a")
        assert _order(nav, "nav") == ["nav.a", "nav.c", "nav.b"]

    def test_move_relative_to_self_is_noop(self, nav: MenuPaths) -> None:
        nav.move_after("nav", "nav.b", "nav.b")
        assert _order(nav, "nav") == ["nav.a", "nav.b", "nav.c"]

    def test_move_before_reparents(self, nav: MenuPaths) -> None:
        nav.upsert_item_by_path(_link("nav.a.one", "One"))
        nav.upsert_item_by_path(_link("nav.a.two", "Two"))
        nav.move_before("nav", "nav.c", "nav.a.two")
        assert _order(nav, "nav", "nav.a") == ["nav.a.one", "nav.c", "nav.a.two"]
        assert _order(nav, "nav") == ["nav.a", "nav.b"]

    def test_set_sibling_order(self, nav: MenuPaths) -> None:
        nav.set_sibling_order("nav", "nav", ["nav.b", "nav.c"])
        assert _order(nav, "nav") == ["nav.b", "nav.c", "nav.a"]

    def test_set_sibling_order_duplicate(self, nav: MenuPaths) -> None:
        with pytest.raises(ReorderMismatchError):
            nav.set_sibling_order("nav", "nav", ["nav.b", "nav.b"])

    def test_unknown_path(self, nav: MenuPaths) -> None:
        with pytest.raises(MenuItemNotFoundError):
            nav.move_to_top("nav", "nav.zzz")


# --- Seeding ---


def _admin_items(**overrides: Any) -> tuple[UpsertMenuItemByPathInput, ...]:
    return (
        UpsertMenuItemByPathInput(
            path="admin.content.pages",
            target={"type": "url", "url": "/admin/pages"},
            translations=(MenuItemTranslationInput(locale="", label="Pages"),),
            position=1,
        ),
        UpsertMenuItemByPathInput(
            path="admin.content.posts",
            target={"type": "url", "url": "/admin/posts"},
            translations=(MenuItemTranslationInput(locale="", label="Posts"),),
            position=0,
        ),
        UpsertMenuItemByPathInput(
            path="admin.settings",
            target={"type": "url", "url": "/admin/settings"},
            translations=(MenuItemTranslationInput(locale="", label="Settings"),),
        ),
    )


class TestSeedMenu:
    def test_scaffolds_parents_and_orders(self, paths: MenuPaths) -> None:
        seed_menu(
            paths,
            SeedMenuOptions(
                menu_code="admin",
                location="sidebar",
                locale="en",
                items=_admin_items(),
                auto_create_parents=True,
                ensure=True,
                actor_id=ACTOR,
            ),
        )

        assert _order(paths, "admin") == ["admin.content", "admin.settings"]
        assert _order(paths, "admin", "admin.content") == [
            "admin.content.posts",
            "admin.content.pages",
        ]
        content, settings = paths.service.resolve_navigation("admin", "en")
        assert content.type == "group"
        assert content.label == "Content"
        assert [c.label for c in content.children] == ["Posts", "Pages"]
        assert settings.url == "/admin/settings"
        assert paths.service.get_menu_by_location("sidebar").code == "admin"

    def test_reseed_is_stable(self, paths: MenuPaths) -> None:
        opts = SeedMenuOptions(
            menu_code="admin", locale="en", items=_admin_items(), auto_create_parents=True, ensure=True
        )
        seed_menu(paths, opts)
        first = {i.external_code: (i.id, i.position) for i in paths.list_items("admin")}
        seed_menu(paths, opts)
        assert {i.external_code: (i.id, i.position) for i in paths.list_items("admin")} == first

    def test_prune_removes_unlisted(self, paths: MenuPaths) -> None:
        seed_menu(
            paths,
            SeedMenuOptions(menu_code="admin", locale="en", items=_admin_items(), auto_create_parents=True),
        )
        pages, posts, settings = _admin_items()

        seed_menu(
            paths,
            SeedMenuOptions(
                menu_code="admin",
                locale="en",
                items=(posts, settings),
                auto_create_parents=True,
                prune=True,
            ),
        )

        codes = {i.external_code for i in paths.list_items("admin")}
        assert codes == {"admin.content", "admin.content.posts", "admin.settings"}
        assert _order(paths, "admin", "admin.content") == ["admin.content.posts"]

    def test_missing_parent_without_scaffolding(self, paths: MenuPaths) -> None:
        with pytest.raises(SeedMenuError):
            seed_menu(paths, SeedMenuOptions(menu_code="admin", locale="en", items=_admin_items()))

    def test_scaffolding_needs_locale(self, paths: MenuPaths) -> None:
        with pytest.raises(SeedMenuError):
            seed_menu(
                paths,
                SeedMenuOptions(menu_code="admin", items=(_link("admin.a.b", "B"),), auto_create_parents=True),
            )

    def test_translation_without_locale_needs_default(self, paths: MenuPaths) -> None:
        with pytest.raises(SeedMenuError):
            seed_menu(paths, SeedMenuOptions(menu_code="admin", items=_admin_items()[2:]))

    def test_duplicate_paths(self, paths: MenuPaths) -> None:
        with pytest.raises(SeedMenuError):
            seed_menu(
                paths,
                SeedMenuOptions(
                    menu_code="admin",
                    items=(_link("admin.a", "A"), _link("Admin/A", "A again")),
                ),
            )

    def test_foreign_path(self, paths: MenuPaths) -> None:
        with pytest.raises(MenuItemPathMismatchError):
            seed_menu(paths, SeedMenuOptions(menu_code="admin", items=(_link("footer.a", "A"),)))
