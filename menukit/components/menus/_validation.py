"""
Input normalization and semantic checks for menus and menu items.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from menukit.domain.entities import MENU_ITEM_TYPES

from ._urls import extract_page_id, extract_slug, lookup_page
from .errors import (
    MenuCodeInvalidError,
    MenuCodeRequiredError,
    MenuItemCollapsedWithoutCollapsibleError,
    MenuItemCollapsibleWithoutChildrenError,
    MenuItemGroupFieldsError,
    MenuItemSeparatorFieldsError,
    MenuItemTargetMissingError,
    MenuItemTranslationTextRequiredError,
    MenuItemTypeInvalidError,
    PageSlugRequiredError,
)
from .models import MenuItemTranslationInput
from .ports import PageRepoPort

MENU_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


# --- Menus ---


def validate_menu_code(code: str) -> str:
    """Return the trimmed code or raise."""
    code = (code or "").strip()
    if not code:
        raise MenuCodeRequiredError()
    if not MENU_CODE_PATTERN.match(code):
        raise MenuCodeInvalidError(f"menu code {code!r} must match [A-Za-z0-9_-]+")
    return code


# --- Item types ---


def normalize_item_type(raw: str | None) -> str:
    """Lowercase the type; empty means ``item``."""
    item_type = (raw or "").strip().lower()
    if not item_type:
        return "item"
    if item_type not in MENU_ITEM_TYPES:
        raise MenuItemTypeInvalidError(f"unknown menu item type {raw!r}")
    return item_type


# --- Targets ---


def sanitize_target(raw: Mapping[str, Any] | None, pages: PageRepoPort | None) -> dict[str, Any]:
    """Normalize an ``item`` target; page targets are checked against ``pages``."""
    if not raw:
        raise MenuItemTargetMissingError()
    target = copy.deepcopy(dict(raw))
    target_type = str(target.get("type") or "").strip().lower()
    if not target_type:
        raise MenuItemTargetMissingError("menu item target requires a type")
    target["type"] = target_type

    if target_type == "page":
        return _sanitize_page_target(target, pages)

    if "url" in target:
        url = str(target["url"] or "").strip()
        if url:
            target["url"] = url
        else:
            del target["url"]
    return target


def _sanitize_page_target(target: dict[str, Any], pages: PageRepoPort | None) -> dict[str, Any]:
    slug = extract_slug(target)
    page_id = extract_page_id(target)
    target.pop("slug", None)
    target.pop("page_id", None)

    if not slug and page_id is None:
        raise PageSlugRequiredError()

    if pages is not None:
        page = lookup_page(pages, page_id, slug)
        page_id = page.id
        slug = slug or page.slug.strip()

    if page_id is not None:
        target["page_id"] = str(page_id)
    if slug:
        target["slug"] = slug
    return target


def normalize_target_for_type(
    item_type: str,
    raw: Mapping[str, Any] | None,
    pages: PageRepoPort | None,
) -> dict[str, Any]:
    if item_type == "item":
        return sanitize_target(raw, pages)
    if raw:
        if item_type == "group":
            raise MenuItemGroupFieldsError("group items cannot have a target")
        raise MenuItemSeparatorFieldsError("separators cannot have a target")
    return {}


# --- Translations ---


@dataclass(frozen=True)
class NormalizedTranslation:
    locale: str
    label: str
    label_key: str
    group_title: str
    group_title_key: str
    url_override: str | None


def normalize_translation_input(item_type: str, inp: MenuItemTranslationInput) -> NormalizedTranslation:
    """Trim fields and enforce per-type text requirements."""
    label = inp.label.strip()
    label_key = inp.label_key.strip()
    group_title = inp.group_title.strip()
    group_title_key = inp.group_title_key.strip()
    url_override = (inp.url_override or "").strip() or None

    if item_type == "separator":
        if label or label_key or group_title or group_title_key:
            raise MenuItemSeparatorFieldsError("separators cannot carry labels")
    elif item_type == "group":
        if not (label or label_key or group_title or group_title_key):
            raise MenuItemTranslationTextRequiredError()
    elif not (label or label_key):
        raise MenuItemTranslationTextRequiredError()

    if not label:
        if item_type == "group":
            label = group_title or group_title_key
        label = label or label_key

    return NormalizedTranslation(
        locale=inp.locale.strip(),
        label=label,
        label_key=label_key,
        group_title=group_title,
        group_title_key=group_title_key,
        url_override=url_override,
    )


# --- Semantics ---


def validate_item_semantics(
    item_type: str,
    *,
    target: Mapping[str, Any] | None = None,
    icon: str = "",
    badge: Mapping[str, Any] | None = None,
    translation_count: int = 0,
    collapsible: bool = False,
    collapsed: bool = False,
    has_children: bool = False,
    allow_collapsible_without_children: bool = False,
) -> None:
    if item_type == "separator":
        if target or icon or badge or translation_count:
            raise MenuItemSeparatorFieldsError()
        if collapsible or collapsed:
            raise MenuItemCollapsibleWithoutChildrenError("separators cannot be collapsible")
    elif item_type == "group":
        if target or icon or badge:
            raise MenuItemGroupFieldsError()

    if collapsed and not collapsible:
        raise MenuItemCollapsedWithoutCollapsibleError()
    if collapsible and not has_children and not allow_collapsible_without_children:
        raise MenuItemCollapsibleWithoutChildrenError()
