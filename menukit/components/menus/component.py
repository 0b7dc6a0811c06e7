"""
Menus component - menu hierarchy management and navigation resolution.

Entry points wrap ``MenuService`` calls and turn ``MenuError`` exceptions
into ``MenuErrorInfo`` records, so callers get an output object with
``success``/``errors`` instead of an exception.

Invariants:
- Sibling positions are dense (0..n-1) after every write
- Canonical keys are unique per menu
- At most one translation per (item, locale)
- The parent graph is acyclic
"""

from __future__ import annotations

import logging
from typing import Any

from menukit.rules.loader import config_from_rules
from menukit.rules.models import MenuRules

from ._impl import MenuService, MenuServiceConfig
from .errors import MenuError
from .models import (
    AddMenuItemInput,
    AddMenuItemTranslationInput,
    BulkReorderMenuItemsInput,
    CreateMenuInput,
    DeleteMenuItemInput,
    DeleteMenuRequest,
    DeleteOutput,
    MenuErrorInfo,
    MenuItemListOutput,
    MenuItemOutput,
    MenuOutput,
    NavigationOutput,
    ReconcileMenuInput,
    ReconcileOutput,
    ResolveNavigationInput,
    TranslationOutput,
    UpdateMenuItemInput,
    UpsertMenuInput,
    UpsertMenuItemInput,
)
from .ports import LocaleRepoPort, MenuItemRepoPort, MenuItemTranslationRepoPort, MenuRepoPort

logger = logging.getLogger(__name__)


def _convert_error(error: MenuError) -> MenuErrorInfo:
    """Convert a raised menu error to an output record."""
    return MenuErrorInfo(code=error.code, message=str(error), field=error.field)


def _failed(error: MenuError) -> list[MenuErrorInfo]:
    logger.debug("Menu operation rejected: %s", error.code)
    return [_convert_error(error)]


def _build_config(rules: MenuRules | None) -> MenuServiceConfig:
    """Build service config from rules."""
    if rules is None:
        return MenuServiceConfig()
    return config_from_rules(rules)


def build_service(
    menus: MenuRepoPort,
    items: MenuItemRepoPort,
    translations: MenuItemTranslationRepoPort,
    locales: LocaleRepoPort,
    *,
    rules: MenuRules | None = None,
    **collaborators: Any,
) -> MenuService:
    """Create a menu service configured from rules."""
    return MenuService(
        menus,
        items,
        translations,
        locales,
        config=_build_config(rules),
        **collaborators,
    )


# --- Component Entry Points ---


def run_create_menu(inp: CreateMenuInput, *, service: MenuService) -> MenuOutput:
    """
    Create a new menu.

    Args:
        inp: Menu code, location and description.
        service: Menu service.

    Returns:
        MenuOutput with the created menu or errors.
    """
    try:
        menu = service.create_menu(inp)
    except MenuError as e:
        return MenuOutput(errors=_failed(e), success=False)
    return MenuOutput(menu=menu)


def run_upsert_menu(inp: UpsertMenuInput, *, service: MenuService) -> MenuOutput:
    try:
        menu = service.upsert_menu(inp)
    except MenuError as e:
        return MenuOutput(errors=_failed(e), success=False)
    return MenuOutput(menu=menu)


def run_delete_menu(inp: DeleteMenuRequest, *, service: MenuService) -> DeleteOutput:
    try:
        service.delete_menu(inp)
    except MenuError as e:
        return DeleteOutput(errors=_failed(e), success=False)
    return DeleteOutput()


def run_add_item(inp: AddMenuItemInput, *, service: MenuService) -> MenuItemOutput:
    """
    Add an item to a menu.

    When an item with the same canonical key already exists, only its
    missing locales are added and the existing item is returned.
    """
    try:
        item = service.add_menu_item(inp)
    except MenuError as e:
        return MenuItemOutput(errors=_failed(e), success=False)
    return MenuItemOutput(item=item)


def run_upsert_item(inp: UpsertMenuItemInput, *, service: MenuService) -> MenuItemOutput:
    try:
        item = service.upsert_menu_item(inp)
    except MenuError as e:
        return MenuItemOutput(errors=_failed(e), success=False)
    return MenuItemOutput(item=item)


def run_update_item(inp: UpdateMenuItemInput, *, service: MenuService) -> MenuItemOutput:
    try:
        item = service.update_menu_item(inp)
    except MenuError as e:
        return MenuItemOutput(errors=_failed(e), success=False)
    return MenuItemOutput(item=item)


def run_delete_item(inp: DeleteMenuItemInput, *, service: MenuService) -> DeleteOutput:
    try:
        service.delete_menu_item(inp)
    except MenuError as e:
        return DeleteOutput(errors=_failed(e), success=False)
    return DeleteOutput()


def run_add_translation(inp: AddMenuItemTranslationInput, *, service: MenuService) -> TranslationOutput:
    try:
        translation = service.add_menu_item_translation(inp)
    except MenuError as e:
        return TranslationOutput(errors=_failed(e), success=False)
    return TranslationOutput(translation=translation)


def run_reorder(inp: BulkReorderMenuItemsInput, *, service: MenuService) -> MenuItemListOutput:
    """
    Apply a complete parent/position layout to a menu.

    Returns:
        MenuItemListOutput with every item in its new place, or errors
        (nothing is written when validation fails).
    """
    try:
        items = service.bulk_reorder_menu_items(inp)
    except MenuError as e:
        return MenuItemListOutput(errors=_failed(e), success=False)
    return MenuItemListOutput(items=tuple(items))


def run_reconcile(inp: ReconcileMenuInput, *, service: MenuService) -> ReconcileOutput:
    try:
        result = service.reconcile_menu(inp)
    except MenuError as e:
        return ReconcileOutput(errors=_failed(e), success=False)
    return ReconcileOutput(result=result)


def run_resolve_navigation(inp: ResolveNavigationInput, *, service: MenuService) -> NavigationOutput:
    """Resolve navigation by menu code, or by location when no code is given."""
    try:
        if inp.menu_code.strip() or not inp.location.strip():
            nodes = service.resolve_navigation(inp.menu_code, inp.locale)
        else:
            nodes = service.resolve_navigation_by_location(inp.location, inp.locale)
    except MenuError as e:
        return NavigationOutput(errors=_failed(e), success=False)
    return NavigationOutput(nodes=tuple(nodes))


def run(inp: Any, *, service: MenuService) -> Any:
    """
    Main entry point for the menus component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, CreateMenuInput):
        return run_create_menu(inp, service=service)
    elif isinstance(inp, UpsertMenuInput):
        return run_upsert_menu(inp, service=service)
    elif isinstance(inp, DeleteMenuRequest):
        return run_delete_menu(inp, service=service)
    elif isinstance(inp, AddMenuItemInput):
        return run_add_item(inp, service=service)
    elif isinstance(inp, UpsertMenuItemInput):
        return run_upsert_item(inp, service=service)
    elif isinstance(inp, UpdateMenuItemInput):
        return run_update_item(inp, service=service)
    elif isinstance(inp, DeleteMenuItemInput):
        return run_delete_item(inp, service=service)
    elif isinstance(inp, AddMenuItemTranslationInput):
        return run_add_translation(inp, service=service)
    elif isinstance(inp, BulkReorderMenuItemsInput):
        return run_reorder(inp, service=service)
    elif isinstance(inp, ReconcileMenuInput):
        return run_reconcile(inp, service=service)
    elif isinstance(inp, ResolveNavigationInput):
        return run_resolve_navigation(inp, service=service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
