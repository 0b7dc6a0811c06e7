"""
Menus component port definitions.

Repositories raise ``NotFoundError(resource, key)`` for missing records and
``ConflictError`` for uniqueness violations. Optional store capabilities are
declared as separate runtime-checkable protocols; the service queries them
with ``isinstance`` and falls back to generic behaviour when absent.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import UUID

from menukit.domain.entities import (
    Locale,
    Menu,
    MenuItem,
    MenuItemTranslation,
    MenuUsageBinding,
    Page,
)

if TYPE_CHECKING:
    from .models import ActivityEvent, AddMenuItemInput, AuditEvent, ResolveRequest


class MenuRepoPort(Protocol):
    """Repository interface for menus."""

    def create(self, menu: Menu) -> Menu:
        """Persist a new menu."""
        ...

    def get_by_id(self, menu_id: UUID) -> Menu:
        """Get menu by ID."""
        ...

    def get_by_code(self, code: str) -> Menu:
        """Get menu by unique code."""
        ...

    def get_by_location(self, location: str) -> Menu:
        """Get the menu bound to a location slot."""
        ...

    def list_all(self) -> list[Menu]:
        """List all menus."""
        ...

    def update(self, menu: Menu) -> Menu:
        """Update an existing menu."""
        ...

    def delete(self, menu_id: UUID) -> None:
        """Delete a menu."""
        ...


class MenuItemRepoPort(Protocol):
    """Repository interface for menu items."""

    def create(self, item: MenuItem) -> MenuItem:
        """Persist a new item."""
        ...

    def get_by_id(self, item_id: UUID) -> MenuItem:
        """Get item by ID."""
        ...

    def get_by_canonical_key(self, menu_id: UUID, key: str) -> MenuItem:
        """Get item by canonical key within a menu."""
        ...

    def get_by_external_code(self, menu_id: UUID, code: str) -> MenuItem:
        """Get item by external code within a menu."""
        ...

    def list_by_menu(self, menu_id: UUID) -> list[MenuItem]:
        """List every item of a menu (flat)."""
        ...

    def list_children(self, parent_id: UUID) -> list[MenuItem]:
        """List direct children of an item."""
        ...

    def update(self, item: MenuItem) -> MenuItem:
        """Update an existing item."""
        ...

    def delete(self, item_id: UUID) -> None:
        """Delete an item."""
        ...

    def bulk_update_hierarchy(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        """Persist parent/position of many items in one call."""
        ...

    def bulk_update_parent_links(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        """Persist parent links (resolved or pending) of many items."""
        ...


class MenuItemTranslationRepoPort(Protocol):
    """Repository interface for item translations."""

    def create(self, translation: MenuItemTranslation) -> MenuItemTranslation:
        """Persist a translation; raises ConflictError on duplicate (item, locale)."""
        ...

    def get_by_item_and_locale(self, item_id: UUID, locale_id: UUID) -> MenuItemTranslation:
        """Get translation of an item for a locale."""
        ...

    def list_by_item(self, item_id: UUID) -> list[MenuItemTranslation]:
        """List translations of an item."""
        ...

    def update(self, translation: MenuItemTranslation) -> MenuItemTranslation:
        """Update a translation."""
        ...

    def delete(self, translation_id: UUID) -> None:
        """Delete a translation."""
        ...


class LocaleRepoPort(Protocol):
    """Resolves locale codes."""

    def get_by_code(self, code: str) -> Locale:
        """Get locale by code."""
        ...


class PageRepoPort(Protocol):
    """Page lookups used for target validation and URL fallback."""

    def get_by_id(self, page_id: UUID) -> Page:
        """Get page by ID."""
        ...

    def get_by_slug(self, slug: str) -> Page:
        """Get page by slug."""
        ...


class MenuUsageResolverPort(Protocol):
    """Reports theme/location bindings of a menu."""

    def resolve_menu_usage(self, menu_id: UUID) -> list[MenuUsageBinding]:
        """Return active bindings for the menu."""
        ...


class URLResolverPort(Protocol):
    """Pluggable item to URL strategy."""

    def resolve(self, request: ResolveRequest) -> str:
        """Return the URL for an item, or an empty string."""
        ...


class ActivityEmitterPort(Protocol):
    """Activity sink for menu changes."""

    def enabled(self) -> bool:
        """Whether events should be built at all."""
        ...

    def emit(self, event: ActivityEvent) -> None:
        """Record an activity event."""
        ...


class AuditRecorderPort(Protocol):
    """Audit sink for destructive operations."""

    def record(self, event: AuditEvent) -> None:
        """Record an audit event."""
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


# --- Optional store capabilities ---


@runtime_checkable
class MenuContentsResetterPort(Protocol):
    """Store capability: drop all items and translations of a menu at once."""

    def reset_menu_contents(self, menu_id: UUID) -> tuple[int, int]:
        """Delete contents; returns (items_deleted, translations_deleted)."""
        ...


@runtime_checkable
class CacheInvalidatorPort(Protocol):
    """Store capability: drop any cached reads."""

    def invalidate_cache(self) -> None:
        """Invalidate cached data."""
        ...


# --- Pluggable identity strategies ---

IDGenerator = Callable[["AddMenuItemInput"], UUID]
MenuIDDeriver = Callable[[str], UUID]
RecordIDGenerator = Callable[[], UUID]
ParentResolver = Callable[[str, "AddMenuItemInput"], "UUID | None"]
