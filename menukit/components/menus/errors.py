"""
Menus component error taxonomy.

Every error carries a stable ``code`` so the shell layer can turn it into a
``MenuErrorInfo`` record without string matching on messages.

Families:
- Not-found: resource absent (stores raise the generic ``NotFoundError``)
- Validation: malformed input rejected before any write
- Conflict: uniqueness violations (menu code, translation locale)
- Structural: parent/hierarchy problems
- Guard rail: menu still bound to a theme location
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from menukit.domain.entities import MenuUsageBinding


class MenuError(Exception):
    """Base class for all menu errors."""

    code = "menu_error"
    field: str | None = None

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        if field is not None:
            self.field = field
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return self.code.replace("_", " ")


# --- Not found ---


class NotFoundError(MenuError):
    """Raised when a stored record does not exist."""

    code = "not_found"

    def __init__(self, resource: str, key: Any) -> None:
        self.resource = resource
        self.key = key
        super().__init__(f"{resource} not found: {key}")


class MenuNotFoundError(NotFoundError):
    code = "menu_not_found"

    def __init__(self, key: Any) -> None:
        super().__init__("menu", key)


class MenuItemNotFoundError(NotFoundError):
    code = "menu_item_not_found"

    def __init__(self, key: Any) -> None:
        super().__init__("menu_item", key)


class TranslationNotFoundError(NotFoundError):
    code = "menu_item_translation_not_found"

    def __init__(self, key: Any) -> None:
        super().__init__("menu_item_translation", key)


class PageNotFoundError(NotFoundError):
    code = "page_not_found"

    def __init__(self, key: Any) -> None:
        super().__init__("page", key)


class UnknownLocaleError(NotFoundError):
    code = "unknown_locale"

    def __init__(self, key: Any) -> None:
        super().__init__("locale", key)


# --- Validation ---


class MenuValidationError(MenuError):
    """Base class for rejected input."""

    code = "validation_error"


class MenuCodeRequiredError(MenuValidationError):
    code = "menu_code_required"
    field = "code"


class MenuCodeInvalidError(MenuValidationError):
    code = "menu_code_invalid"
    field = "code"


class MenuItemTypeInvalidError(MenuValidationError):
    code = "menu_item_type_invalid"
    field = "type"


class MenuItemTargetMissingError(MenuValidationError):
    code = "menu_item_target_missing"
    field = "target"


class MenuItemTargetInvalidError(MenuValidationError):
    code = "menu_item_target_invalid"
    field = "target"


class MenuItemPositionError(MenuValidationError):
    code = "menu_item_position_invalid"
    field = "position"


class MenuItemTranslationsRequiredError(MenuValidationError):
    code = "menu_item_translations_required"
    field = "translations"


class MenuItemTranslationTextRequiredError(MenuValidationError):
    code = "menu_item_translation_text_required"
    field = "translations"


class MenuItemSeparatorFieldsError(MenuValidationError):
    code = "menu_item_separator_fields"


class MenuItemGroupFieldsError(MenuValidationError):
    code = "menu_item_group_fields"


class MenuItemCollapsibleWithoutChildrenError(MenuValidationError):
    code = "menu_item_collapsible_without_children"
    field = "collapsible"


class MenuItemCollapsedWithoutCollapsibleError(MenuValidationError):
    code = "menu_item_collapsed_without_collapsible"
    field = "collapsed"


class PageSlugRequiredError(MenuValidationError):
    code = "page_slug_required"
    field = "target"


class ReorderMismatchError(MenuValidationError):
    code = "menu_item_reorder_mismatch"
    field = "items"


class MenuItemPathRequiredError(MenuValidationError):
    code = "menu_item_path_required"
    field = "path"


class MenuItemPathInvalidError(MenuValidationError):
    code = "menu_item_path_invalid"
    field = "path"


class MenuItemPathMismatchError(MenuValidationError):
    code = "menu_item_path_mismatch"
    field = "path"


class SeedMenuError(MenuValidationError):
    """Seed description is inconsistent (duplicates, missing parents, locale)."""

    code = "menu_seed_invalid"
    field = "items"


# --- Conflict ---


class ConflictError(MenuError):
    """Raised by stores when a uniqueness constraint is violated."""

    code = "conflict"


class MenuCodeExistsError(ConflictError):
    code = "menu_code_exists"
    field = "code"


class TranslationExistsError(ConflictError):
    code = "menu_item_translation_exists"
    field = "translations"


class DuplicateTranslationLocaleError(ConflictError):
    code = "menu_item_duplicate_locale"
    field = "translations"


# --- Structural ---


class MenuStructureError(MenuError):
    """Base class for hierarchy problems."""

    code = "menu_structure_error"


class ParentInvalidError(MenuStructureError):
    code = "menu_item_parent_invalid"
    field = "parent_id"


class ParentUnsupportedError(MenuStructureError):
    code = "menu_item_parent_unsupported"
    field = "parent_id"


class HierarchyCycleError(MenuStructureError):
    code = "menu_item_cycle"
    field = "parent_id"


class MenuItemHasChildrenError(MenuStructureError):
    code = "menu_item_has_children"


# --- Guard rail ---


class MenuInUseError(MenuError):
    """Raised when a menu is still bound to theme locations."""

    code = "menu_in_use"

    def __init__(self, menu_id: UUID, bindings: Sequence[MenuUsageBinding]) -> None:
        self.menu_id = menu_id
        self.bindings = list(bindings)
        locations = ", ".join(
            f"{b.theme_name or b.theme_id}:{b.location_code}" for b in self.bindings
        )
        super().__init__(f"menu {menu_id} is in use by {locations}")
