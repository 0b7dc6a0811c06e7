"""
Tests for dot-path parsing and sanitizing.
"""

from __future__ import annotations

import pytest

from menukit.components.menus import (
    canonical_menu_code,
    humanize_path_segment,
    parse_menu_item_path,
    parse_menu_item_path_for_menu,
    sanitize_menu_item_segment,
)
from menukit.components.menus._paths import path_depth, sanitize_dot_path
from menukit.components.menus.errors import (
    MenuCodeRequiredError,
    MenuItemPathInvalidError,
    MenuItemPathMismatchError,
    MenuItemPathRequiredError,
)


class TestSanitize:
    def test_menu_code(self) -> None:
        assert canonical_menu_code("Site.Main Nav") == "site_main-nav"
        assert canonical_menu_code("  --admin--  ") == "admin"

    def test_segment(self) -> None:
        assert sanitize_menu_item_segment("  Hello, World! ") == "hello-world"
        assert sanitize_menu_item_segment("a.b") == "a-b"
        assert sanitize_menu_item_segment("???") == ""

    def test_dot_path_accepts_slashes(self) -> None:
        assert sanitize_dot_path("/Admin/Content Pages/") == "admin.content-pages"
        assert sanitize_dot_path("admin..x") == "admin.x"
        assert sanitize_dot_path("") == ""

    def test_depth(self) -> None:
        assert path_depth("admin.content.pages") == 3
        assert path_depth("") == 0

    @pytest.mark.parametrize(
        ("segment", "expected"),
        [("content_pages", "Content Pages"), ("api-keys", "Api Keys"), ("x", "X")],
    )
    def test_humanize(self, segment: str, expected: str) -> None:
        assert humanize_path_segment(segment) == expected


class TestParsePath:
    def test_nested(self) -> None:
        parsed = parse_menu_item_path("admin.content.pages")
        assert (parsed.menu_code, parsed.parent_path, parsed.key) == (
            "admin",
            "admin.content",
            "pages",
        )
        assert parsed.path == "admin.content.pages"

    def test_top_level_parent_is_menu(self) -> None:
        parsed = parse_menu_item_path("admin.pages")
        assert parsed.parent_path == "admin"

    def test_normalizes_case_and_separators(self) -> None:
        assert parse_menu_item_path("Admin/Content/Pages").path == "admin.content.pages"

    @pytest.mark.parametrize("path", ["", "   "])
    def test_required(self, path: str) -> None:
        with pytest.raises(MenuItemPathRequiredError):
            parse_menu_item_path(path)

    @pytest.mark.parametrize("path", ["admin", "...", "admin.???"])
    def test_invalid(self, path: str) -> None:
        with pytest.raises(MenuItemPathInvalidError):
            parse_menu_item_path(path)


class TestParseForMenu:
    def test_matching_menu(self) -> None:
        assert parse_menu_item_path_for_menu("Admin", "admin.users").key == "users"

    def test_other_menu(self) -> None:
        with pytest.raises(MenuItemPathMismatchError):
            parse_menu_item_path_for_menu("admin", "footer.legal")

    def test_menu_code_required(self) -> None:
        with pytest.raises(MenuCodeRequiredError):
            parse_menu_item_path_for_menu("  ", "admin.users")
