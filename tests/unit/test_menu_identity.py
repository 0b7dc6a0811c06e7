"""
Tests for canonical keys and deterministic identifiers.
"""

from __future__ import annotations

from uuid import NAMESPACE_URL, uuid4, uuid5

from menukit.components.menus._identity import (
    MENU_NAMESPACE,
    canonical_key_for_external_code,
    canonical_key_for_target,
    canonical_parent_ref,
    derive_canonical_key,
    derive_canonical_key_for_item,
    extract_group_key,
    menu_item_uuid,
    menu_uuid,
    normalize_external_code,
    parent_key,
)
from menukit.components.menus.models import MenuItemTranslationInput
from menukit.domain.entities import MenuItem, PendingParent, ResolvedParent, RootParent


class TestDeterministicIds:
    def test_namespace_is_stable(self) -> None:
        assert MENU_NAMESPACE == uuid5(NAMESPACE_URL, "menukit")

    def test_menu_uuid_from_code(self) -> None:
        assert menu_uuid("primary") == uuid5(MENU_NAMESPACE, "menu:primary")
        assert menu_uuid(" primary ") == menu_uuid("primary")

    def test_menu_item_uuid_depends_on_menu_and_key(self) -> None:
        menu_a, menu_b = uuid4(), uuid4()
        assert menu_item_uuid(menu_a, "url:/a") == menu_item_uuid(menu_a, "url:/a")
        assert menu_item_uuid(menu_a, "url:/a") != menu_item_uuid(menu_b, "url:/a")
        assert menu_item_uuid(menu_a, "url:/a") == uuid5(
            MENU_NAMESPACE, f"menu_item:{menu_a}:url:/a"
        )


class TestExternalCode:
    def test_normalized_lowercase(self) -> None:
        assert normalize_external_code("  Team.Docs ") == "team.docs"
        assert normalize_external_code(None) == ""

    def test_key_for_code(self) -> None:
        assert canonical_key_for_external_code("Team") == "code:team"
        assert canonical_key_for_external_code("   ") is None


class TestTargetKeys:
    def test_page_by_id_wins_over_slug(self) -> None:
        target = {"type": "page", "page_id": "p-1", "slug": "about"}
        assert canonical_key_for_target(target) == "page:id:p-1"

    def test_page_by_slug(self) -> None:
        assert canonical_key_for_target({"type": "page", "slug": "about"}) == "page:slug:about"

    def test_page_without_reference(self) -> None:
        assert canonical_key_for_target({"type": "page"}) is None

    def test_url_then_path(self) -> None:
        assert canonical_key_for_target({"type": "url", "url": " /docs "}) == "url:/docs"
        assert canonical_key_for_target({"type": "route", "path": "/x"}) == "path:/x"

    def test_empty_target(self) -> None:
        assert canonical_key_for_target({}) is None
        assert canonical_key_for_target(None) is None


class TestParentKeys:
    def test_parent_key_variants(self) -> None:
        parent_id = uuid4()
        assert parent_key(None) == "root"
        assert parent_key(RootParent()) == "root"
        assert parent_key(parent_id) == str(parent_id)
        assert parent_key(ResolvedParent(id=parent_id)) == str(parent_id)
        assert parent_key(PendingParent(ref="Team")) == "ref:team"

    def test_caller_parent_code_wins_over_root(self) -> None:
        assert canonical_parent_ref(RootParent(), " Team ") == "ref:team"

    def test_pending_ref_wins_over_parent_code(self) -> None:
        assert canonical_parent_ref(PendingParent(ref="Docs"), "team") == "ref:docs"


class TestDeriveKey:
    def test_group_key_prefers_group_title_key(self) -> None:
        translations = [
            MenuItemTranslationInput(locale="en", label="Docs", group_title_key="nav.docs"),
        ]
        assert extract_group_key(translations) == "nav.docs"
        assert (
            derive_canonical_key("group", {}, RootParent(), 0, translations)
            == "group:nav.docs:root"
        )

    def test_group_without_text(self) -> None:
        assert derive_canonical_key("group", {}, RootParent(), 0) == "group:root"

    def test_separator_key_includes_position(self) -> None:
        parent_id = uuid4()
        key = derive_canonical_key("separator", {}, ResolvedParent(id=parent_id), 3)
        assert key == f"separator:{parent_id}:3"

    def test_pending_group(self) -> None:
        translations = [MenuItemTranslationInput(locale="en", group_title="Team")]
        key = derive_canonical_key("group", {}, PendingParent(ref="Company"), 0, translations)
        assert key == "group:Team:ref:company"

    def test_item_key_from_target(self) -> None:
        key = derive_canonical_key("item", {"type": "url", "url": "/a"}, RootParent(), 5)
        assert key == "url:/a"

    def test_stored_item_external_code_wins(self) -> None:
        item = MenuItem(
            menu_id=uuid4(),
            external_code="primary.home",
            target={"type": "url", "url": "/"},
        )
        assert derive_canonical_key_for_item(item) == "code:primary.home"

    def test_stored_item_without_code(self) -> None:
        item = MenuItem(menu_id=uuid4(), target={"type": "url", "url": "/"})
        assert derive_canonical_key_for_item(item) == "url:/"
