from datetime import UTC, datetime
from typing import Annotated, Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Enums / Literals ---
MenuItemType = Literal["item", "group", "separator"]

MENU_ITEM_TYPES: tuple[str, ...] = ("item", "group", "separator")

# --- Parent link ---


class RootParent(BaseModel):
    """Item sits at the top level of its menu."""

    kind: Literal["root"] = "root"


class ResolvedParent(BaseModel):
    """Item is attached to an existing parent item."""

    kind: Literal["resolved"] = "resolved"
    id: UUID


class PendingParent(BaseModel):
    """Parent is referenced by code/key but does not exist yet."""

    kind: Literal["pending"] = "pending"
    ref: str


ParentLink = Annotated[
    RootParent | ResolvedParent | PendingParent,
    Field(discriminator="kind"),
]


def parent_link(parent_id: UUID | None = None, parent_ref: str | None = None) -> ParentLink:
    """Build a parent link from the two nullable storage columns."""
    if parent_id is not None:
        return ResolvedParent(id=parent_id)
    if parent_ref:
        return PendingParent(ref=parent_ref)
    return RootParent()


# --- Locales & Pages ---

class Locale(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    code: str
    display_name: str = ""
    is_active: bool = True
    is_default: bool = False


class PageTranslation(BaseModel):
    locale_id: UUID
    path: str = ""
    title: str = ""


class Page(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    slug: str
    translations: list[PageTranslation] = Field(default_factory=list)


# --- Menus ---

class MenuItemTranslation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    menu_item_id: UUID
    locale_id: UUID
    label: str = ""
    label_key: str = ""
    group_title: str = ""
    group_title_key: str = ""
    url_override: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class MenuItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    menu_id: UUID
    parent: ParentLink = Field(default_factory=RootParent)
    external_code: str = ""
    canonical_key: str | None = None
    position: int = 0
    type: MenuItemType = "item"
    target: dict[str, Any] = Field(default_factory=dict)
    icon: str = ""
    badge: dict[str, Any] = Field(default_factory=dict)
    permissions: list[str] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list)
    styles: dict[str, str] = Field(default_factory=dict)
    collapsible: bool = False
    collapsed: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_by: UUID | None = None
    updated_by: UUID | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    # Hydrated on read, never persisted with the item row
    children: list["MenuItem"] = Field(default_factory=list)
    translations: list[MenuItemTranslation] = Field(default_factory=list)

    @property
    def parent_id(self) -> UUID | None:
        if isinstance(self.parent, ResolvedParent):
            return self.parent.id
        return None

    @property
    def parent_ref(self) -> str | None:
        if isinstance(self.parent, PendingParent):
            return self.parent.ref
        return None

    @property
    def is_pending(self) -> bool:
        return isinstance(self.parent, PendingParent)


MenuItem.model_rebuild()


class Menu(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    code: str
    location: str = ""
    description: str | None = None
    created_by: UUID | None = None
    updated_by: UUID | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    # Hydrated root items (with children), populated by the service
    items: list[MenuItem] = Field(default_factory=list)


class MenuUsageBinding(BaseModel):
    """A theme/location slot that currently renders a menu."""

    theme_id: UUID | None = None
    theme_name: str = ""
    location_code: str = ""
