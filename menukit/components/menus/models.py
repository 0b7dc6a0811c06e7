"""
Menus component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from menukit.domain.entities import Menu, MenuItem, MenuItemTranslation

# --- Error record ---


@dataclass(frozen=True)
class MenuErrorInfo:
    """Error record returned by the component entry points."""

    code: str
    message: str
    field: str | None = None


# --- Menu inputs ---


@dataclass(frozen=True)
class CreateMenuInput:
    """Input for creating a menu."""

    code: str
    location: str = ""
    description: str | None = None
    created_by: UUID | None = None
    id: UUID | None = None


@dataclass(frozen=True)
class UpsertMenuInput:
    """Input for creating or updating a menu by code."""

    code: str
    location: str = ""
    description: str | None = None
    actor_id: UUID | None = None


@dataclass(frozen=True)
class DeleteMenuRequest:
    """Input for deleting a menu and everything in it."""

    menu_id: UUID
    deleted_by: UUID | None = None
    force: bool = False


# --- Item inputs ---


@dataclass(frozen=True)
class MenuItemTranslationInput:
    """Localized label payload supplied with an item."""

    locale: str
    label: str = ""
    label_key: str = ""
    group_title: str = ""
    group_title_key: str = ""
    url_override: str | None = None


@dataclass(frozen=True)
class AddMenuItemInput:
    """Input for adding an item to a menu."""

    menu_id: UUID
    position: int = 0
    id: UUID | None = None
    parent_id: UUID | None = None
    parent_code: str = ""
    external_code: str = ""
    canonical_key: str | None = None
    type: str = ""
    target: dict[str, Any] = field(default_factory=dict)
    icon: str = ""
    badge: dict[str, Any] = field(default_factory=dict)
    permissions: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()
    styles: dict[str, str] = field(default_factory=dict)
    collapsible: bool = False
    collapsed: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    created_by: UUID | None = None
    translations: tuple[MenuItemTranslationInput, ...] = ()
    allow_missing_translations: bool = False


@dataclass(frozen=True)
class UpsertMenuItemInput:
    """Input for idempotently ensuring an item exists.

    The menu is addressed by id or code (created on demand). A ``None``
    position appends the item after its current siblings.
    """

    menu_id: UUID | None = None
    menu_code: str = ""
    position: int | None = None
    id: UUID | None = None
    parent_id: UUID | None = None
    parent_code: str = ""
    external_code: str = ""
    canonical_key: str | None = None
    type: str = ""
    target: dict[str, Any] = field(default_factory=dict)
    icon: str = ""
    badge: dict[str, Any] = field(default_factory=dict)
    permissions: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()
    styles: dict[str, str] = field(default_factory=dict)
    collapsible: bool = False
    collapsed: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    actor_id: UUID | None = None
    translations: tuple[MenuItemTranslationInput, ...] = ()
    allow_missing_translations: bool = False


@dataclass(frozen=True)
class UpdateMenuItemInput:
    """Input for updating an item. ``None`` leaves a field unchanged."""

    item_id: UUID
    updated_by: UUID | None = None
    type: str | None = None
    target: dict[str, Any] | None = None
    icon: str | None = None
    badge: dict[str, Any] | None = None
    permissions: tuple[str, ...] | None = None
    classes: tuple[str, ...] | None = None
    styles: dict[str, str] | None = None
    collapsible: bool | None = None
    collapsed: bool | None = None
    metadata: dict[str, Any] | None = None
    external_code: str | None = None
    position: int | None = None
    parent_id: UUID | None = None
    detach_parent: bool = False


@dataclass(frozen=True)
class DeleteMenuItemInput:
    """Input for deleting an item."""

    item_id: UUID
    deleted_by: UUID | None = None
    cascade_children: bool = False


@dataclass(frozen=True)
class AddMenuItemTranslationInput:
    """Input for attaching (or upserting) one locale on an item."""

    item_id: UUID
    locale: str
    label: str = ""
    label_key: str = ""
    group_title: str = ""
    group_title_key: str = ""
    url_override: str | None = None
    actor_id: UUID | None = None


@dataclass(frozen=True)
class ItemOrder:
    """Desired parent/position for one item in a bulk reorder."""

    item_id: UUID
    position: int
    parent_id: UUID | None = None


@dataclass(frozen=True)
class BulkReorderMenuItemsInput:
    """Full parent/position assignment for every item in a menu."""

    menu_id: UUID
    items: tuple[ItemOrder, ...]
    updated_by: UUID | None = None


@dataclass(frozen=True)
class ReconcileMenuInput:
    """Input for resolving pending parent references."""

    menu_id: UUID
    updated_by: UUID | None = None


@dataclass(frozen=True)
class ResolveNavigationInput:
    """Input for rendering a menu for one locale."""

    menu_code: str = ""
    locale: str = ""
    location: str = ""


# --- Results ---


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a reconciliation pass."""

    resolved: int
    remaining: int


@dataclass(frozen=True)
class ResolveRequest:
    """Everything a URL resolver may need to turn an item into a URL."""

    item: MenuItem
    translation: MenuItemTranslation | None
    locale: str
    locale_id: UUID | None


@dataclass
class NavigationNode:
    """Render-ready, locale-resolved projection of a menu item."""

    id: UUID
    position: int
    type: str
    label: str = ""
    label_key: str = ""
    group_title: str = ""
    group_title_key: str = ""
    url: str = ""
    target: dict[str, Any] = field(default_factory=dict)
    icon: str = ""
    badge: dict[str, Any] = field(default_factory=dict)
    permissions: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    styles: dict[str, str] = field(default_factory=dict)
    collapsible: bool = False
    collapsed: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    children: list[NavigationNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for templates/JSON, omitting empty optional fields."""
        data: dict[str, Any] = {
            "id": str(self.id),
            "position": self.position,
            "type": self.type,
        }
        optional = {
            "label": self.label,
            "label_key": self.label_key,
            "group_title": self.group_title,
            "group_title_key": self.group_title_key,
            "url": self.url,
            "target": self.target,
            "icon": self.icon,
            "badge": self.badge,
            "permissions": self.permissions,
            "classes": self.classes,
            "styles": self.styles,
            "metadata": self.metadata,
        }
        data.update({k: v for k, v in optional.items() if v})
        if self.collapsible:
            data["collapsible"] = True
        if self.collapsed:
            data["collapsed"] = True
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


# --- Events ---


@dataclass(frozen=True)
class ActivityEvent:
    """Fire-and-forget domain event describing a menu change."""

    verb: str
    actor_id: UUID | None
    object_type: str
    object_id: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditEvent:
    """Audit trail entry for destructive menu operations."""

    entity_type: str
    entity_id: str
    action: str
    occurred_at: datetime
    actor_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


# --- Path addressing / seeding ---


@dataclass(frozen=True)
class MenuItemPath:
    """Parsed dot-path such as ``admin.content.pages``."""

    path: str
    menu_code: str
    parent_path: str
    key: str


@dataclass(frozen=True)
class UpsertMenuItemByPathInput:
    """Input for ensuring an item exists at a dot-path."""

    path: str
    parent_path: str = ""
    type: str = ""
    target: dict[str, Any] = field(default_factory=dict)
    icon: str = ""
    badge: dict[str, Any] = field(default_factory=dict)
    permissions: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()
    styles: dict[str, str] = field(default_factory=dict)
    collapsible: bool = False
    collapsed: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    position: int | None = None
    translations: tuple[MenuItemTranslationInput, ...] = ()
    allow_missing_translations: bool = False
    actor_id: UUID | None = None


@dataclass(frozen=True)
class UpdateMenuItemByPathInput:
    """Field changes for the item at a dot-path; None leaves a field alone."""

    parent_path: str | None = None
    type: str | None = None
    target: dict[str, Any] | None = None
    icon: str | None = None
    badge: dict[str, Any] | None = None
    permissions: tuple[str, ...] | None = None
    classes: tuple[str, ...] | None = None
    styles: dict[str, str] | None = None
    collapsible: bool | None = None
    collapsed: bool | None = None
    metadata: dict[str, Any] | None = None
    position: int | None = None
    actor_id: UUID | None = None


@dataclass(frozen=True)
class SeedMenuOptions:
    """Declarative description of a whole menu."""

    menu_code: str
    items: tuple[UpsertMenuItemByPathInput, ...] = ()
    location: str = ""
    description: str | None = None
    locale: str = ""
    actor_id: UUID | None = None
    auto_create_parents: bool = False
    ensure: bool = False
    prune: bool = False


# --- Output models ---


@dataclass(frozen=True)
class MenuOutput:
    """Output for menu operations."""

    menu: Menu | None = None
    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MenuItemOutput:
    """Output for single-item operations."""

    item: MenuItem | None = None
    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MenuItemListOutput:
    """Output for operations returning many items."""

    items: tuple[MenuItem, ...] = ()
    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class TranslationOutput:
    """Output for translation operations."""

    translation: MenuItemTranslation | None = None
    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ReconcileOutput:
    """Output for reconciliation."""

    result: ReconcileResult | None = None
    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class NavigationOutput:
    """Output for navigation resolution."""

    nodes: tuple[NavigationNode, ...] = ()
    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DeleteOutput:
    """Output for delete operations."""

    errors: list[MenuErrorInfo] = field(default_factory=list)
    success: bool = True
