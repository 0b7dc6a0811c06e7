"""
In-memory repositories for testing/dev.

Every repository guards its state with a lock and hands out deep copies, so
callers may mutate returned records freely. Uniqueness rules mirror the SQL
schema: menu code, (menu, canonical key) and (item, locale) are unique and
violations raise ``ConflictError``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from uuid import UUID

from menukit.components.menus.errors import ConflictError, NotFoundError
from menukit.domain.entities import (
    Locale,
    Menu,
    MenuItem,
    MenuItemTranslation,
    MenuUsageBinding,
    Page,
)


def _store_item(item: MenuItem) -> MenuItem:
    return item.model_copy(deep=True, update={"children": [], "translations": []})


class InMemoryMenuRepo:
    """In-memory menu repository."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._menus: dict[UUID, Menu] = {}

    def _check_code(self, menu: Menu) -> None:
        for other in self._menus.values():
            if other.id != menu.id and other.code == menu.code:
                raise ConflictError(f"menu code {menu.code!r} already exists")

    def create(self, menu: Menu) -> Menu:
        with self._lock:
            if menu.id in self._menus:
                raise ConflictError(f"menu {menu.id} already exists")
            self._check_code(menu)
            self._menus[menu.id] = menu.model_copy(deep=True, update={"items": []})
            return self._menus[menu.id].model_copy(deep=True)

    def get_by_id(self, menu_id: UUID) -> Menu:
        with self._lock:
            menu = self._menus.get(menu_id)
            if menu is None:
                raise NotFoundError("menu", menu_id)
            return menu.model_copy(deep=True)

    def get_by_code(self, code: str) -> Menu:
        with self._lock:
            for menu in self._menus.values():
                if menu.code == code:
                    return menu.model_copy(deep=True)
        raise NotFoundError("menu", code)

    def get_by_location(self, location: str) -> Menu:
        with self._lock:
            for menu in self._menus.values():
                if location and menu.location == location:
                    return menu.model_copy(deep=True)
        raise NotFoundError("menu", location)

    def list_all(self) -> list[Menu]:
        with self._lock:
            return [m.model_copy(deep=True) for m in self._menus.values()]

    def update(self, menu: Menu) -> Menu:
        with self._lock:
            if menu.id not in self._menus:
                raise NotFoundError("menu", menu.id)
            self._check_code(menu)
            self._menus[menu.id] = menu.model_copy(deep=True, update={"items": []})
            return self._menus[menu.id].model_copy(deep=True)

    def delete(self, menu_id: UUID) -> None:
        with self._lock:
            if self._menus.pop(menu_id, None) is None:
                raise NotFoundError("menu", menu_id)


class InMemoryMenuItemTranslationRepo:
    """In-memory translation repository; (item, locale) is unique."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._translations: dict[UUID, MenuItemTranslation] = {}

    def create(self, translation: MenuItemTranslation) -> MenuItemTranslation:
        with self._lock:
            for other in self._translations.values():
                if (
                    other.menu_item_id == translation.menu_item_id
                    and other.locale_id == translation.locale_id
                ):
                    raise ConflictError(
                        f"translation for item {translation.menu_item_id} "
                        f"and locale {translation.locale_id} already exists"
                    )
            self._translations[translation.id] = translation.model_copy(deep=True)
            return translation.model_copy(deep=True)

    def get_by_item_and_locale(self, item_id: UUID, locale_id: UUID) -> MenuItemTranslation:
        with self._lock:
            for tr in self._translations.values():
                if tr.menu_item_id == item_id and tr.locale_id == locale_id:
                    return tr.model_copy(deep=True)
        raise NotFoundError("menu_item_translation", f"{item_id}:{locale_id}")

    def list_by_item(self, item_id: UUID) -> list[MenuItemTranslation]:
        with self._lock:
            return [
                tr.model_copy(deep=True)
                for tr in self._translations.values()
                if tr.menu_item_id == item_id
            ]

    def update(self, translation: MenuItemTranslation) -> MenuItemTranslation:
        with self._lock:
            if translation.id not in self._translations:
                raise NotFoundError("menu_item_translation", translation.id)
            self._translations[translation.id] = translation.model_copy(deep=True)
            return translation.model_copy(deep=True)

    def delete(self, translation_id: UUID) -> None:
        with self._lock:
            if self._translations.pop(translation_id, None) is None:
                raise NotFoundError("menu_item_translation", translation_id)

    def delete_for_items(self, item_ids: Iterable[UUID]) -> int:
        """Drop every translation of the given items; returns the count."""
        wanted = set(item_ids)
        with self._lock:
            doomed = [t.id for t in self._translations.values() if t.menu_item_id in wanted]
            for translation_id in doomed:
                del self._translations[translation_id]
            return len(doomed)


class InMemoryMenuItemRepo:
    """In-memory item repository.

    When given the translation repository it also supports resetting a
    menu's contents in one call.
    """

    def __init__(self, translations: InMemoryMenuItemTranslationRepo | None = None) -> None:
        self._lock = threading.Lock()
        self._items: dict[UUID, MenuItem] = {}
        self._translations = translations

    def _check_canonical_key(self, item: MenuItem) -> None:
        if not item.canonical_key:
            return
        for other in self._items.values():
            if (
                other.id != item.id
                and other.menu_id == item.menu_id
                and other.canonical_key == item.canonical_key
            ):
                raise ConflictError(
                    f"canonical key {item.canonical_key!r} already used in menu {item.menu_id}"
                )

    def create(self, item: MenuItem) -> MenuItem:
        with self._lock:
            if item.id in self._items:
                raise ConflictError(f"menu item {item.id} already exists")
            self._check_canonical_key(item)
            self._items[item.id] = _store_item(item)
            return _store_item(item)

    def get_by_id(self, item_id: UUID) -> MenuItem:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise NotFoundError("menu_item", item_id)
            return _store_item(item)

    def get_by_canonical_key(self, menu_id: UUID, key: str) -> MenuItem:
        with self._lock:
            for item in self._items.values():
                if item.menu_id == menu_id and item.canonical_key == key:
                    return _store_item(item)
        raise NotFoundError("menu_item", key)

    def get_by_external_code(self, menu_id: UUID, code: str) -> MenuItem:
        code = code.strip().lower()
        with self._lock:
            for item in self._items.values():
                if item.menu_id == menu_id and code and item.external_code.lower() == code:
                    return _store_item(item)
        raise NotFoundError("menu_item", code)

    def list_by_menu(self, menu_id: UUID) -> list[MenuItem]:
        with self._lock:
            return [_store_item(i) for i in self._items.values() if i.menu_id == menu_id]

    def list_children(self, parent_id: UUID) -> list[MenuItem]:
        with self._lock:
            return [_store_item(i) for i in self._items.values() if i.parent_id == parent_id]

    def update(self, item: MenuItem) -> MenuItem:
        with self._lock:
            if item.id not in self._items:
                raise NotFoundError("menu_item", item.id)
            self._check_canonical_key(item)
            self._items[item.id] = _store_item(item)
            return _store_item(item)

    def delete(self, item_id: UUID) -> None:
        with self._lock:
            if self._items.pop(item_id, None) is None:
                raise NotFoundError("menu_item", item_id)

    def _bulk_apply(self, items: Sequence[MenuItem], with_position: bool) -> list[MenuItem]:
        with self._lock:
            for item in items:
                if item.id not in self._items:
                    raise NotFoundError("menu_item", item.id)
            out: list[MenuItem] = []
            for item in items:
                update = {
                    "parent": item.parent.model_copy(),
                    "updated_by": item.updated_by,
                    "updated_at": item.updated_at,
                }
                if with_position:
                    update["position"] = item.position
                stored = self._items[item.id].model_copy(update=update)
                self._items[item.id] = stored
                out.append(_store_item(stored))
            return out

    def bulk_update_hierarchy(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        return self._bulk_apply(items, with_position=True)

    def bulk_update_parent_links(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        return self._bulk_apply(items, with_position=False)

    def reset_menu_contents(self, menu_id: UUID) -> tuple[int, int]:
        with self._lock:
            doomed = [i.id for i in self._items.values() if i.menu_id == menu_id]
            for item_id in doomed:
                del self._items[item_id]
        translations_deleted = 0
        if self._translations is not None:
            translations_deleted = self._translations.delete_for_items(doomed)
        return len(doomed), translations_deleted


class InMemoryLocaleRepo:
    """In-memory locale lookup."""

    def __init__(self, locales: Iterable[Locale] = ()) -> None:
        self._locales = {loc.code.lower(): loc for loc in locales}

    def add(self, locale: Locale) -> Locale:
        self._locales[locale.code.lower()] = locale
        return locale

    def get_by_code(self, code: str) -> Locale:
        locale = self._locales.get(code.strip().lower())
        if locale is None:
            raise NotFoundError("locale", code)
        return locale


class InMemoryPageRepo:
    """In-memory page lookup."""

    def __init__(self, pages: Iterable[Page] = ()) -> None:
        self._pages = {page.id: page for page in pages}

    def add(self, page: Page) -> Page:
        self._pages[page.id] = page
        return page

    def get_by_id(self, page_id: UUID) -> Page:
        page = self._pages.get(page_id)
        if page is None:
            raise NotFoundError("page", page_id)
        return page

    def get_by_slug(self, slug: str) -> Page:
        for page in self._pages.values():
            if page.slug == slug:
                return page
        raise NotFoundError("page", slug)


class StaticMenuUsageResolver:
    """Usage resolver backed by a fixed menu -> bindings mapping."""

    def __init__(self, bindings: dict[UUID, list[MenuUsageBinding]] | None = None) -> None:
        self._bindings = dict(bindings or {})

    def bind(self, menu_id: UUID, binding: MenuUsageBinding) -> None:
        self._bindings.setdefault(menu_id, []).append(binding)

    def resolve_menu_usage(self, menu_id: UUID) -> list[MenuUsageBinding]:
        return list(self._bindings.get(menu_id, []))
