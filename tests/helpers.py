"""Shared constants and builders for menu tests."""

from typing import Any
from uuid import UUID

from menukit.components.menus import AddMenuItemInput, MenuItemTranslationInput, MenuService
from menukit.domain.entities import MenuItem

EN_ID = UUID("00000000-0000-0000-0000-0000000000e1")
FR_ID = UUID("00000000-0000-0000-0000-0000000000f1")
ACTOR = UUID("00000000-0000-0000-0000-00000000a001")


def label(locale: str, text: str) -> MenuItemTranslationInput:
    return MenuItemTranslationInput(locale=locale, label=text)


def add_link(
    service: MenuService,
    menu_id: UUID,
    url: str,
    text: str,
    position: int = 0,
    **kwargs: Any,
) -> MenuItem:
    """Add a URL item with an English label."""
    return service.add_menu_item(
        AddMenuItemInput(
            menu_id=menu_id,
            position=position,
            target={"type": "url", "url": url},
            translations=(label("en", text),),
            created_by=ACTOR,
            **kwargs,
        )
    )
