"""
Dot-path addressing for menu items.

A path such as ``admin.content.pages`` names the menu (``admin``), the
parent path (``admin.content``) and the item key (``pages``). Paths are
stored as the item's external code, so lookups by path are lookups by
external code. Slashes are accepted in place of dots.
"""

from __future__ import annotations

import re

from .errors import (
    MenuCodeRequiredError,
    MenuItemPathInvalidError,
    MenuItemPathMismatchError,
    MenuItemPathRequiredError,
)
from .models import MenuItemPath

_SEGMENT_PATTERN = re.compile(r"^[a-z0-9_-]+$")
_UNSAFE_RUN = re.compile(r"[^a-z0-9_-]+")


def _squash(value: str, keep_dots: bool) -> str:
    value = value.strip().lower()
    if keep_dots:
        value = value.replace(".", "_")
    return _UNSAFE_RUN.sub("-", value).strip("-_")


def canonical_menu_code(code: str) -> str:
    """Lowercase the code; dots become underscores, other runs a dash."""
    return _squash(code or "", keep_dots=True)


def sanitize_menu_item_segment(segment: str) -> str:
    """Turn arbitrary text into a path segment ("" when nothing is left)."""
    return _squash(segment or "", keep_dots=False)


def sanitize_dot_path(raw: str) -> str:
    normalized = (raw or "").strip().replace("/", ".").strip(".")
    if not normalized:
        return ""
    segments = [sanitize_menu_item_segment(part) for part in normalized.split(".")]
    return ".".join(seg for seg in segments if seg)


def path_depth(path: str) -> int:
    path = path.strip()
    return len(path.split(".")) if path else 0


def parse_menu_item_path(path: str) -> MenuItemPath:
    """Parse ``<menu>.<segment>...``; at least one item segment is required."""
    if not (path or "").strip():
        raise MenuItemPathRequiredError()

    canonical = sanitize_dot_path(path)
    parts = canonical.split(".") if canonical else []
    if len(parts) < 2 or not all(_SEGMENT_PATTERN.match(p) for p in parts):
        raise MenuItemPathInvalidError(f"invalid menu item path {path!r}")

    menu_code = parts[0]
    parent_path = menu_code if len(parts) == 2 else ".".join(parts[:-1])
    return MenuItemPath(
        path=canonical,
        menu_code=menu_code,
        parent_path=parent_path,
        key=parts[-1],
    )


def parse_menu_item_path_for_menu(menu_code: str, path: str) -> MenuItemPath:
    """Parse ``path`` and check it belongs to ``menu_code``."""
    code = canonical_menu_code(menu_code)
    if not code:
        raise MenuCodeRequiredError()
    parsed = parse_menu_item_path(path)
    if parsed.menu_code != code:
        raise MenuItemPathMismatchError(f"path {parsed.path!r} does not belong to menu {code!r}")
    return parsed


def humanize_path_segment(segment: str) -> str:
    """``content_pages`` -> ``Content Pages``."""
    words = segment.strip().replace("_", " ").replace("-", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)
