import json
import sqlite3
from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from menukit.components.menus.errors import ConflictError, NotFoundError
from menukit.domain.entities import (
    Locale,
    Menu,
    MenuItem,
    MenuItemTranslation,
    Page,
    PageTranslation,
    parent_link,
)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _uuid(value: str | None) -> UUID | None:
    return UUID(value) if value else None


def _str(value: UUID | None) -> str | None:
    return str(value) if value else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _write(self, sql: str, params: tuple[Any, ...], conflict: str) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError(f"{conflict}: {e}") from e
        finally:
            conn.close()

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params).fetchone()
        finally:
            conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()


# --- Menus ---


def _row_to_menu(row: dict[str, Any]) -> Menu:
    return Menu(
        id=UUID(row["id"]),
        code=row["code"],
        location=row["location"] or "",
        description=row["description"],
        created_by=_uuid(row["created_by"]),
        updated_by=_uuid(row["updated_by"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SQLiteMenuRepo(_SQLiteRepo):
    def create(self, menu: Menu) -> Menu:
        self._write(
            """
            INSERT INTO menus (
                id, code, location, description,
                created_by, updated_by, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(menu.id),
                menu.code,
                menu.location,
                menu.description,
                _str(menu.created_by),
                _str(menu.updated_by),
                menu.created_at.isoformat(),
                menu.updated_at.isoformat(),
            ),
            conflict=f"menu {menu.code!r}",
        )
        return menu.model_copy(update={"items": []})

    def get_by_id(self, menu_id: UUID) -> Menu:
        row = self._fetch_one("SELECT * FROM menus WHERE id = ?", (str(menu_id),))
        if not row:
            raise NotFoundError("menu", menu_id)
        return _row_to_menu(row)

    def get_by_code(self, code: str) -> Menu:
        row = self._fetch_one("SELECT * FROM menus WHERE code = ?", (code,))
        if not row:
            raise NotFoundError("menu", code)
        return _row_to_menu(row)

    def get_by_location(self, location: str) -> Menu:
        row = self._fetch_one(
            "SELECT * FROM menus WHERE location = ? AND location != '' ORDER BY created_at LIMIT 1",
            (location,),
        )
        if not row:
            raise NotFoundError("menu", location)
        return _row_to_menu(row)

    def list_all(self) -> list[Menu]:
        return [_row_to_menu(r) for r in self._fetch_all("SELECT * FROM menus ORDER BY code")]

    def update(self, menu: Menu) -> Menu:
        count = self._write(
            """
            UPDATE menus SET code = ?, location = ?, description = ?,
                updated_by = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                menu.code,
                menu.location,
                menu.description,
                _str(menu.updated_by),
                menu.updated_at.isoformat(),
                str(menu.id),
            ),
            conflict=f"menu {menu.code!r}",
        )
        if count == 0:
            raise NotFoundError("menu", menu.id)
        return menu.model_copy(update={"items": []})

    def delete(self, menu_id: UUID) -> None:
        count = self._write("DELETE FROM menus WHERE id = ?", (str(menu_id),), conflict="menu")
        if count == 0:
            raise NotFoundError("menu", menu_id)


# --- Menu items ---

_ITEM_COLUMNS = (
    "id, menu_id, parent_id, parent_ref, external_code, canonical_key, position, type, "
    "target_json, icon, badge_json, permissions_json, classes_json, styles_json, "
    "collapsible, collapsed, metadata_json, created_by, updated_by, created_at, updated_at"
)


def _row_to_item(row: dict[str, Any]) -> MenuItem:
    return MenuItem(
        id=UUID(row["id"]),
        menu_id=UUID(row["menu_id"]),
        parent=parent_link(_uuid(row["parent_id"]), row["parent_ref"]),
        external_code=row["external_code"] or "",
        canonical_key=row["canonical_key"],
        position=row["position"],
        type=row["type"],
        target=json.loads(row["target_json"] or "{}"),
        icon=row["icon"] or "",
        badge=json.loads(row["badge_json"] or "{}"),
        permissions=json.loads(row["permissions_json"] or "[]"),
        classes=json.loads(row["classes_json"] or "[]"),
        styles=json.loads(row["styles_json"] or "{}"),
        collapsible=bool(row["collapsible"]),
        collapsed=bool(row["collapsed"]),
        metadata=json.loads(row["metadata_json"] or "{}"),
        created_by=_uuid(row["created_by"]),
        updated_by=_uuid(row["updated_by"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _item_params(item: MenuItem) -> tuple[Any, ...]:
    return (
        str(item.id),
        str(item.menu_id),
        _str(item.parent_id),
        item.parent_ref,
        item.external_code,
        item.canonical_key,
        item.position,
        item.type,
        json.dumps(item.target),
        item.icon,
        json.dumps(item.badge),
        json.dumps(item.permissions),
        json.dumps(item.classes),
        json.dumps(item.styles),
        int(item.collapsible),
        int(item.collapsed),
        json.dumps(item.metadata),
        _str(item.created_by),
        _str(item.updated_by),
        item.created_at.isoformat(),
        item.updated_at.isoformat(),
    )


class SQLiteMenuItemRepo(_SQLiteRepo):
    def create(self, item: MenuItem) -> MenuItem:
        self._write(
            f"INSERT INTO menu_items ({_ITEM_COLUMNS}) VALUES ({', '.join('?' * 21)})",
            _item_params(item),
            conflict=f"menu item {item.canonical_key or item.id}",
        )
        return item.model_copy(update={"children": [], "translations": []})

    def get_by_id(self, item_id: UUID) -> MenuItem:
        row = self._fetch_one("SELECT * FROM menu_items WHERE id = ?", (str(item_id),))
        if not row:
            raise NotFoundError("menu_item", item_id)
        return _row_to_item(row)

    def get_by_canonical_key(self, menu_id: UUID, key: str) -> MenuItem:
        row = self._fetch_one(
            "SELECT * FROM menu_items WHERE menu_id = ? AND canonical_key = ?",
            (str(menu_id), key),
        )
        if not row:
            raise NotFoundError("menu_item", key)
        return _row_to_item(row)

    def get_by_external_code(self, menu_id: UUID, code: str) -> MenuItem:
        row = self._fetch_one(
            "SELECT * FROM menu_items WHERE menu_id = ? AND lower(external_code) = ? "
            "AND external_code != '' LIMIT 1",
            (str(menu_id), code.strip().lower()),
        )
        if not row:
            raise NotFoundError("menu_item", code)
        return _row_to_item(row)

    def list_by_menu(self, menu_id: UUID) -> list[MenuItem]:
        rows = self._fetch_all(
            "SELECT * FROM menu_items WHERE menu_id = ? ORDER BY position, created_at",
            (str(menu_id),),
        )
        return [_row_to_item(r) for r in rows]

    def list_children(self, parent_id: UUID) -> list[MenuItem]:
        rows = self._fetch_all(
            "SELECT * FROM menu_items WHERE parent_id = ? ORDER BY position, created_at",
            (str(parent_id),),
        )
        return [_row_to_item(r) for r in rows]

    def update(self, item: MenuItem) -> MenuItem:
        params = _item_params(item)
        count = self._write(
            """
            UPDATE menu_items SET
                menu_id = ?, parent_id = ?, parent_ref = ?, external_code = ?,
                canonical_key = ?, position = ?, type = ?, target_json = ?, icon = ?,
                badge_json = ?, permissions_json = ?, classes_json = ?, styles_json = ?,
                collapsible = ?, collapsed = ?, metadata_json = ?,
                updated_by = ?, updated_at = ?
            WHERE id = ?
            """,
            (*params[1:17], params[18], params[20], params[0]),
            conflict=f"menu item {item.canonical_key or item.id}",
        )
        if count == 0:
            raise NotFoundError("menu_item", item.id)
        return item.model_copy(update={"children": []})

    def delete(self, item_id: UUID) -> None:
        count = self._write("DELETE FROM menu_items WHERE id = ?", (str(item_id),), conflict="menu item")
        if count == 0:
            raise NotFoundError("menu_item", item_id)

    def _bulk(self, sql: str, rows: list[tuple[Any, ...]], items: Sequence[MenuItem]) -> list[MenuItem]:
        conn = self._get_conn()
        try:
            for params, item in zip(rows, items, strict=True):
                if conn.execute(sql, params).rowcount == 0:
                    raise NotFoundError("menu_item", item.id)
            conn.commit()
            return [i.model_copy(update={"children": []}) for i in items]
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def bulk_update_hierarchy(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        return self._bulk(
            "UPDATE menu_items SET parent_id = ?, parent_ref = ?, position = ?, "
            "updated_by = ?, updated_at = ? WHERE id = ?",
            [
                (
                    _str(i.parent_id),
                    i.parent_ref,
                    i.position,
                    _str(i.updated_by),
                    i.updated_at.isoformat(),
                    str(i.id),
                )
                for i in items
            ],
            items,
        )

    def bulk_update_parent_links(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        return self._bulk(
            "UPDATE menu_items SET parent_id = ?, parent_ref = ?, "
            "updated_by = ?, updated_at = ? WHERE id = ?",
            [
                (_str(i.parent_id), i.parent_ref, _str(i.updated_by), i.updated_at.isoformat(), str(i.id))
                for i in items
            ],
            items,
        )

    def reset_menu_contents(self, menu_id: UUID) -> tuple[int, int]:
        conn = self._get_conn()
        try:
            translations = conn.execute(
                "DELETE FROM menu_item_translations WHERE menu_item_id IN "
                "(SELECT id FROM menu_items WHERE menu_id = ?)",
                (str(menu_id),),
            ).rowcount
            items = conn.execute(
                "SELECT COUNT(*) AS n FROM menu_items WHERE menu_id = ?", (str(menu_id),)
            ).fetchone()["n"]
            # Children cascade through the parent_id foreign key
            conn.execute("DELETE FROM menu_items WHERE menu_id = ?", (str(menu_id),))
            conn.commit()
            return items, translations
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


# --- Translations ---


def _row_to_translation(row: dict[str, Any]) -> MenuItemTranslation:
    return MenuItemTranslation(
        id=UUID(row["id"]),
        menu_item_id=UUID(row["menu_item_id"]),
        locale_id=UUID(row["locale_id"]),
        label=row["label"] or "",
        label_key=row["label_key"] or "",
        group_title=row["group_title"] or "",
        group_title_key=row["group_title_key"] or "",
        url_override=row["url_override"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SQLiteMenuItemTranslationRepo(_SQLiteRepo):
    def create(self, translation: MenuItemTranslation) -> MenuItemTranslation:
        self._write(
            """
            INSERT INTO menu_item_translations (
                id, menu_item_id, locale_id, label, label_key,
                group_title, group_title_key, url_override, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(translation.id),
                str(translation.menu_item_id),
                str(translation.locale_id),
                translation.label,
                translation.label_key,
                translation.group_title,
                translation.group_title_key,
                translation.url_override,
                translation.created_at.isoformat(),
                translation.updated_at.isoformat(),
            ),
            conflict=f"translation {translation.menu_item_id}:{translation.locale_id}",
        )
        return translation

    def get_by_item_and_locale(self, item_id: UUID, locale_id: UUID) -> MenuItemTranslation:
        row = self._fetch_one(
            "SELECT * FROM menu_item_translations WHERE menu_item_id = ? AND locale_id = ?",
            (str(item_id), str(locale_id)),
        )
        if not row:
            raise NotFoundError("menu_item_translation", f"{item_id}:{locale_id}")
        return _row_to_translation(row)

    def list_by_item(self, item_id: UUID) -> list[MenuItemTranslation]:
        rows = self._fetch_all(
            "SELECT * FROM menu_item_translations WHERE menu_item_id = ? ORDER BY created_at, id",
            (str(item_id),),
        )
        return [_row_to_translation(r) for r in rows]

    def update(self, translation: MenuItemTranslation) -> MenuItemTranslation:
        count = self._write(
            """
            UPDATE menu_item_translations SET label = ?, label_key = ?, group_title = ?,
                group_title_key = ?, url_override = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                translation.label,
                translation.label_key,
                translation.group_title,
                translation.group_title_key,
                translation.url_override,
                translation.updated_at.isoformat(),
                str(translation.id),
            ),
            conflict="translation",
        )
        if count == 0:
            raise NotFoundError("menu_item_translation", translation.id)
        return translation

    def delete(self, translation_id: UUID) -> None:
        count = self._write(
            "DELETE FROM menu_item_translations WHERE id = ?", (str(translation_id),), conflict="translation"
        )
        if count == 0:
            raise NotFoundError("menu_item_translation", translation_id)


# --- Locales & pages ---


class SQLiteLocaleRepo(_SQLiteRepo):
    def save(self, locale: Locale) -> Locale:
        self._write(
            """
            INSERT INTO locales (id, code, display_name, is_active, is_default)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                code=excluded.code,
                display_name=excluded.display_name,
                is_active=excluded.is_active,
                is_default=excluded.is_default
            """,
            (str(locale.id), locale.code, locale.display_name, int(locale.is_active), int(locale.is_default)),
            conflict=f"locale {locale.code!r}",
        )
        return locale

    def get_by_code(self, code: str) -> Locale:
        row = self._fetch_one("SELECT * FROM locales WHERE lower(code) = ?", (code.strip().lower(),))
        if not row:
            raise NotFoundError("locale", code)
        return Locale(
            id=UUID(row["id"]),
            code=row["code"],
            display_name=row["display_name"],
            is_active=bool(row["is_active"]),
            is_default=bool(row["is_default"]),
        )


class SQLitePageRepo(_SQLiteRepo):
    def save(self, page: Page) -> Page:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO pages (id, slug) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET slug=excluded.slug",
                (str(page.id), page.slug),
            )
            conn.execute("DELETE FROM page_translations WHERE page_id = ?", (str(page.id),))
            for tr in page.translations:
                conn.execute(
                    "INSERT INTO page_translations (page_id, locale_id, path, title) VALUES (?, ?, ?, ?)",
                    (str(page.id), str(tr.locale_id), tr.path, tr.title),
                )
            conn.commit()
            return page
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError(f"page {page.slug!r}: {e}") from e
        finally:
            conn.close()

    def _load(self, row: dict[str, Any] | None, key: Any) -> Page:
        if not row:
            raise NotFoundError("page", key)
        translations = self._fetch_all(
            "SELECT * FROM page_translations WHERE page_id = ?", (row["id"],)
        )
        return Page(
            id=UUID(row["id"]),
            slug=row["slug"],
            translations=[
                PageTranslation(locale_id=UUID(t["locale_id"]), path=t["path"], title=t["title"])
                for t in translations
            ],
        )

    def get_by_id(self, page_id: UUID) -> Page:
        return self._load(self._fetch_one("SELECT * FROM pages WHERE id = ?", (str(page_id),)), page_id)

    def get_by_slug(self, slug: str) -> Page:
        return self._load(self._fetch_one("SELECT * FROM pages WHERE slug = ?", (slug,)), slug)
