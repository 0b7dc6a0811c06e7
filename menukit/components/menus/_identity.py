"""
Canonical identity for menu items.

A canonical key is a derived string that identifies "the same" item across
repeated bootstrap/import runs, so ensure-style calls stay idempotent.

Key rules:
- external code: ``code:<lowercased code>`` (overrides every derived key)
- item -> page by id: ``page:id:<id>``; by slug: ``page:slug:<slug>``
- item -> generic target: ``url:<url>`` or ``path:<path>``
- group: ``group:<group key>:<parent key>`` (``group:<parent key>`` without a key)
- separator: ``separator:<parent key>:<position>``

The parent key is ``root``, the parent id, or ``ref:<lowercased ref>`` while
the parent is still pending.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol
from uuid import NAMESPACE_URL, UUID, uuid5

from menukit.domain.entities import MenuItem, ParentLink, PendingParent, ResolvedParent

MENU_NAMESPACE = uuid5(NAMESPACE_URL, "menukit")


class _TranslationText(Protocol):
    label: str
    label_key: str
    group_title: str
    group_title_key: str


# --- Deterministic identifiers ---


def deterministic_uuid(key: str) -> UUID:
    """Stable UUID derived from a key (same key, same id, every run)."""
    return uuid5(MENU_NAMESPACE, key.strip())


def menu_uuid(code: str) -> UUID:
    return deterministic_uuid("menu:" + code.strip())


def menu_item_uuid(menu_id: UUID, canonical_key: str) -> UUID:
    return deterministic_uuid(f"menu_item:{menu_id}:{canonical_key}")


# --- Normalization helpers ---


def normalize_external_code(value: str | None) -> str:
    return (value or "").strip().lower()


def canonical_key_for_external_code(code: str | None) -> str | None:
    normalized = normalize_external_code(code)
    if not normalized:
        return None
    return "code:" + normalized


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parent_key(parent: ParentLink | UUID | None) -> str:
    """Key used for sibling grouping and canonical keys."""
    if isinstance(parent, UUID):
        return str(parent)
    if isinstance(parent, ResolvedParent):
        return str(parent.id)
    if isinstance(parent, PendingParent):
        return "ref:" + parent.ref.strip().lower()
    return "root"


def canonical_parent_ref(parent: ParentLink, parent_code: str = "") -> str:
    """Parent part of a group/separator key; a caller's parent code wins."""
    if isinstance(parent, PendingParent) and parent.ref.strip():
        return "ref:" + parent.ref.strip().lower()
    if parent_code.strip():
        return "ref:" + parent_code.strip().lower()
    return parent_key(parent)


def extract_group_key(translations: Iterable[_TranslationText]) -> str:
    for tr in translations:
        for value in (tr.group_title_key, tr.label_key, tr.group_title, tr.label):
            if value and value.strip():
                return value.strip()
    return ""


# --- Derivation ---


def canonical_key_for_target(target: Mapping[str, Any] | None) -> str | None:
    """Key for an ``item`` from its target payload."""
    if not target:
        return None
    if _text(target.get("type")) == "page":
        page_id = _text(target.get("page_id"))
        if page_id:
            return "page:id:" + page_id
        slug = _text(target.get("slug"))
        if slug:
            return "page:slug:" + slug
        return None
    url = _text(target.get("url"))
    if url:
        return "url:" + url
    path = _text(target.get("path"))
    if path:
        return "path:" + path
    return None


def derive_canonical_key(
    item_type: str,
    target: Mapping[str, Any] | None,
    parent: ParentLink,
    position: int,
    translations: Iterable[_TranslationText] = (),
    parent_code: str = "",
) -> str | None:
    """Type-specific key, without external code or caller overrides."""
    if item_type == "item":
        return canonical_key_for_target(target)

    ref = canonical_parent_ref(parent, parent_code)
    if item_type == "group":
        group_key = extract_group_key(translations)
        if group_key:
            return f"group:{group_key}:{ref}"
        return f"group:{ref}"
    if item_type == "separator":
        return f"separator:{ref}:{position}"
    return None


def derive_canonical_key_for_item(item: MenuItem) -> str | None:
    """Recompute the key of a stored item after it changed."""
    by_code = canonical_key_for_external_code(item.external_code)
    if by_code:
        return by_code
    return derive_canonical_key(
        item.type,
        item.target,
        item.parent,
        item.position,
        item.translations,
    )
