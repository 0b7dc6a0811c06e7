"""
Path-addressed menu operations and declarative seeding.

``MenuPaths`` wraps a ``MenuService`` and addresses items by dot-path.
Every sibling move is computed on a flat snapshot of the menu and then
applied in one ``bulk_reorder_menu_items`` call, so structural checks
(cycles, separator parents) run exactly as for a manual reorder.

``seed_menu`` converges a menu onto a list of path items: parents before
children, optional group scaffolding for missing parents, optional
sibling ordering from the seed and optional pruning of unlisted items.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from collections.abc import Callable, Sequence
from uuid import UUID

from menukit.domain.entities import MenuItem, ResolvedParent, RootParent

from ._impl import MenuService
from ._paths import (
    canonical_menu_code,
    humanize_path_segment,
    parse_menu_item_path,
    parse_menu_item_path_for_menu,
    path_depth,
)
from .errors import (
    MenuCodeRequiredError,
    MenuItemNotFoundError,
    MenuItemPathRequiredError,
    MenuValidationError,
    ReorderMismatchError,
    SeedMenuError,
)
from .models import (
    AddMenuItemTranslationInput,
    BulkReorderMenuItemsInput,
    DeleteMenuItemInput,
    ItemOrder,
    MenuItemTranslationInput,
    ReconcileMenuInput,
    ReconcileResult,
    SeedMenuOptions,
    UpdateMenuItemByPathInput,
    UpdateMenuItemInput,
    UpsertMenuInput,
    UpsertMenuItemByPathInput,
    UpsertMenuItemInput,
)

logger = logging.getLogger(__name__)

ByPath = dict[str, MenuItem]
Mutation = Callable[[list[MenuItem], ByPath], None]


# --- Sibling helpers ---


def _set_parent(item: MenuItem, parent_id: UUID | None) -> None:
    item.parent = ResolvedParent(id=parent_id) if parent_id else RootParent()


def _collect_siblings(items: Sequence[MenuItem], parent_id: UUID | None) -> list[MenuItem]:
    siblings = [i for i in items if i.parent_id == parent_id]
    return sorted(siblings, key=lambda i: (i.position, i.external_code))


def _apply_positions(parent_id: UUID | None, ordered: Sequence[MenuItem]) -> None:
    for idx, sibling in enumerate(ordered):
        _set_parent(sibling, parent_id)
        sibling.position = idx


def _move_to_index(items: Sequence[MenuItem], moving: MenuItem, parent_id: UUID | None, index: int) -> None:
    rest = [s for s in _collect_siblings(items, parent_id) if s.id != moving.id]
    index = max(0, min(index, len(rest)))
    _apply_positions(parent_id, [*rest[:index], moving, *rest[index:]])


def _apply_sibling_order(items: Sequence[MenuItem], parent_id: UUID | None, desired: Sequence[MenuItem]) -> None:
    wanted = {item.id for item in desired}
    rest = [s for s in _collect_siblings(items, parent_id) if s.id not in wanted]
    _apply_positions(parent_id, [*desired, *rest])


def _normalize_positions(items: Sequence[MenuItem]) -> None:
    groups: dict[UUID | None, list[MenuItem]] = {}
    for item in items:
        groups.setdefault(item.parent_id, []).append(item)
    for siblings in groups.values():
        ordered = sorted(siblings, key=lambda i: (i.position, i.external_code))
        for idx, sibling in enumerate(ordered):
            sibling.position = idx


class MenuPaths:
    """Dot-path facade over a menu service."""

    def __init__(self, service: MenuService) -> None:
        self._service = service

    @property
    def service(self) -> MenuService:
        return self._service

    # --- Lookups ---

    def _item_at(self, menu_code: str, path: str) -> MenuItem:
        parsed = parse_menu_item_path_for_menu(menu_code, path)
        return self._service.get_menu_item_by_external_code(parsed.menu_code, parsed.path)

    def _parent_id_for(self, menu_code: str, parent_path: str, by_path: ByPath | None = None) -> UUID | None:
        trimmed = parent_path.strip()
        if not trimmed or trimmed == canonical_menu_code(menu_code):
            return None
        parsed = parse_menu_item_path_for_menu(menu_code, trimmed)
        if by_path is not None:
            parent = by_path.get(parsed.path)
            if parent is None:
                raise MenuItemNotFoundError(parsed.path)
            return parent.id
        return self._service.get_menu_item_by_external_code(parsed.menu_code, parsed.path).id

    def list_items(self, menu_code: str) -> list[MenuItem]:
        """Flat item list of a menu, ordered by parent then position."""
        menu = self._service.get_menu_by_code(canonical_menu_code(menu_code))
        return self._service.list_menu_items(menu.id)

    # --- Item operations ---

    def upsert_item_by_path(self, inp: UpsertMenuItemByPathInput) -> MenuItem:
        """Ensure an item exists at ``inp.path``; its menu is created on demand."""
        parsed = parse_menu_item_path(inp.path)

        parent_code = ""
        parent_path = inp.parent_path.strip()
        if parent_path:
            if parent_path != parsed.menu_code:
                parent_code = parse_menu_item_path_for_menu(parsed.menu_code, parent_path).path
        elif parsed.parent_path != parsed.menu_code:
            parent_code = parsed.parent_path

        return self._service.upsert_menu_item(
            UpsertMenuItemInput(
                menu_code=parsed.menu_code,
                external_code=parsed.path,
                parent_code=parent_code,
                position=inp.position,
                type=inp.type,
                target=inp.target,
                icon=inp.icon,
                badge=inp.badge,
                permissions=inp.permissions,
                classes=inp.classes,
                styles=inp.styles,
                collapsible=inp.collapsible,
                collapsed=inp.collapsed,
                metadata=inp.metadata,
                actor_id=inp.actor_id,
                translations=inp.translations,
                allow_missing_translations=inp.allow_missing_translations,
            )
        )

    def update_item_by_path(self, menu_code: str, path: str, inp: UpdateMenuItemByPathInput) -> MenuItem:
        item = self._item_at(menu_code, path)

        parent_id: UUID | None = None
        detach = False
        if inp.parent_path is not None:
            parent_id = self._parent_id_for(menu_code, inp.parent_path)
            detach = parent_id is None

        return self._service.update_menu_item(
            UpdateMenuItemInput(
                item_id=item.id,
                updated_by=inp.actor_id,
                type=inp.type,
                target=inp.target,
                icon=inp.icon,
                badge=inp.badge,
                permissions=inp.permissions,
                classes=inp.classes,
                styles=inp.styles,
                collapsible=inp.collapsible,
                collapsed=inp.collapsed,
                metadata=inp.metadata,
                position=inp.position,
                parent_id=parent_id,
                detach_parent=detach,
            )
        )

    def delete_item_by_path(
        self,
        menu_code: str,
        path: str,
        actor_id: UUID | None = None,
        cascade_children: bool = False,
    ) -> None:
        item = self._item_at(menu_code, path)
        self._service.delete_menu_item(
            DeleteMenuItemInput(item_id=item.id, deleted_by=actor_id, cascade_children=cascade_children)
        )

    def upsert_translation_by_path(
        self,
        menu_code: str,
        path: str,
        inp: MenuItemTranslationInput,
        actor_id: UUID | None = None,
    ) -> None:
        item = self._item_at(menu_code, path)
        self._service.upsert_menu_item_translation(
            AddMenuItemTranslationInput(
                item_id=item.id,
                locale=inp.locale,
                label=inp.label,
                label_key=inp.label_key,
                group_title=inp.group_title,
                group_title_key=inp.group_title_key,
                url_override=inp.url_override,
                actor_id=actor_id,
            )
        )

    def reconcile(self, menu_code: str, actor_id: UUID | None = None) -> ReconcileResult:
        menu = self._service.get_menu_by_code(canonical_menu_code(menu_code))
        return self._service.reconcile_menu(ReconcileMenuInput(menu_id=menu.id, updated_by=actor_id))

    # --- Ordering ---

    def _reorder(self, menu_code: str, actor_id: UUID | None, mutate: Mutation) -> None:
        code = canonical_menu_code(menu_code)
        menu = self._service.get_menu_by_code(code)
        self._service.reconcile_menu(ReconcileMenuInput(menu_id=menu.id, updated_by=actor_id))

        items = self._service.list_menu_items(menu.id)
        by_path = {item.external_code: item for item in items if item.external_code}
        mutate(items, by_path)
        _normalize_positions(items)

        self._service.bulk_reorder_menu_items(
            BulkReorderMenuItemsInput(
                menu_id=menu.id,
                items=tuple(
                    ItemOrder(item_id=i.id, position=i.position, parent_id=i.parent_id) for i in items
                ),
                updated_by=actor_id,
            )
        )

    def _lookup(self, menu_code: str, path: str, by_path: ByPath) -> MenuItem:
        parsed = parse_menu_item_path_for_menu(menu_code, path)
        item = by_path.get(parsed.path)
        if item is None:
            raise MenuItemNotFoundError(parsed.path)
        return item

    def set_sibling_order(
        self,
        menu_code: str,
        parent_path: str,
        sibling_paths: Sequence[str],
        actor_id: UUID | None = None,
    ) -> None:
        """Order the listed items first under ``parent_path``; others follow."""

        def mutate(items: list[MenuItem], by_path: ByPath) -> None:
            parent_id = self._parent_id_for(menu_code, parent_path, by_path)
            desired: list[MenuItem] = []
            for raw in sibling_paths:
                item = self._lookup(menu_code, raw, by_path)
                if any(d.id == item.id for d in desired):
                    raise ReorderMismatchError(f"duplicate sibling path {item.external_code!r}")
                _set_parent(item, parent_id)
                desired.append(item)
            _apply_sibling_order(items, parent_id, desired)

        self._reorder(menu_code, actor_id, mutate)

    def move_to_top(self, menu_code: str, path: str, actor_id: UUID | None = None) -> None:
        def mutate(items: list[MenuItem], by_path: ByPath) -> None:
            item = self._lookup(menu_code, path, by_path)
            _move_to_index(items, item, item.parent_id, 0)

        self._reorder(menu_code, actor_id, mutate)

    def move_to_bottom(self, menu_code: str, path: str, actor_id: UUID | None = None) -> None:
        def mutate(items: list[MenuItem], by_path: ByPath) -> None:
            item = self._lookup(menu_code, path, by_path)
            _move_to_index(items, item, item.parent_id, sys.maxsize)

        self._reorder(menu_code, actor_id, mutate)

    def move_before(self, menu_code: str, path: str, anchor_path: str, actor_id: UUID | None = None) -> None:
        self._move_relative(menu_code, path, anchor_path, actor_id, before=True)

    def move_after(self, menu_code: str, path: str, anchor_path: str, actor_id: UUID | None = None) -> None:
        self._move_relative(menu_code, path, anchor_path, actor_id, before=False)

    def _move_relative(
        self,
        menu_code: str,
        path: str,
        anchor_path: str,
        actor_id: UUID | None,
        before: bool,
    ) -> None:
        def mutate(items: list[MenuItem], by_path: ByPath) -> None:
            item = self._lookup(menu_code, path, by_path)
            anchor = self._lookup(menu_code, anchor_path, by_path)
            if item.id == anchor.id:
                return
            parent_id = anchor.parent_id
            _set_parent(item, parent_id)
            rest = [s for s in _collect_siblings(items, parent_id) if s.id != item.id]
            index = next(idx for idx, s in enumerate(rest) if s.id == anchor.id)
            _move_to_index(items, item, parent_id, index if before else index + 1)

        self._reorder(menu_code, actor_id, mutate)


# --- Seeding ---


def _with_default_locale(item: UpsertMenuItemByPathInput, locale: str) -> UpsertMenuItemByPathInput:
    if not item.translations:
        return item
    filled = []
    for tr in item.translations:
        if not tr.locale.strip():
            if not locale:
                raise SeedMenuError(f"default locale is required for item {item.path!r}")
            tr = dataclasses.replace(tr, locale=locale)
        filled.append(tr)
    return dataclasses.replace(item, translations=tuple(filled))


def _ordering_position(item: UpsertMenuItemByPathInput) -> int:
    return sys.maxsize if item.position is None else item.position


def seed_menu(paths: MenuPaths, opts: SeedMenuOptions) -> None:
    """Upsert a menu and its items from a declarative description."""
    menu_code = canonical_menu_code(opts.menu_code)
    if not menu_code:
        raise MenuCodeRequiredError()
    service = paths.service
    service.upsert_menu(
        UpsertMenuInput(
            code=menu_code,
            location=opts.location,
            description=opts.description,
            actor_id=opts.actor_id,
        )
    )
    locale = opts.locale.strip()

    desired: dict[str, UpsertMenuItemByPathInput] = {}
    for item in opts.items:
        if not item.path.strip():
            raise MenuItemPathRequiredError()
        parsed = parse_menu_item_path_for_menu(menu_code, item.path)
        if parsed.path in desired:
            raise SeedMenuError(f"duplicate seed menu item path {parsed.path!r}")
        desired[parsed.path] = dataclasses.replace(
            _with_default_locale(item, locale), path=parsed.path, actor_id=opts.actor_id
        )

    if opts.auto_create_parents:
        if not locale:
            raise SeedMenuError("a default locale is required to create parent groups")
        for path in list(desired):
            parts = path.split(".")
            for depth in range(2, len(parts)):
                parent_path = ".".join(parts[:depth])
                if parent_path in desired:
                    continue
                logger.debug("Scaffolding group %s for seed item %s", parent_path, path)
                desired[parent_path] = UpsertMenuItemByPathInput(
                    path=parent_path,
                    type="group",
                    translations=(
                        MenuItemTranslationInput(
                            locale=locale, group_title=humanize_path_segment(parts[depth - 1])
                        ),
                    ),
                    actor_id=opts.actor_id,
                )
    else:
        for path in desired:
            parent_path = parse_menu_item_path(path).parent_path
            if parent_path != menu_code and parent_path not in desired:
                raise SeedMenuError(f"seed item {path!r} references missing parent {parent_path!r}")

    for path in sorted(desired, key=lambda p: (path_depth(p), p)):
        paths.upsert_item_by_path(desired[path])

    if opts.ensure or opts.prune:
        paths.reconcile(menu_code, opts.actor_id)

        children: dict[str, list[UpsertMenuItemByPathInput]] = {}
        for path, item in desired.items():
            children.setdefault(parse_menu_item_path(path).parent_path, []).append(item)
        for parent_path in sorted(children, key=lambda p: (path_depth(p), p)):
            ordered = sorted(children[parent_path], key=lambda i: (_ordering_position(i), i.path))
            paths.set_sibling_order(menu_code, parent_path, [i.path for i in ordered], opts.actor_id)

    if opts.prune:
        stale = []
        for item in paths.list_items(menu_code):
            if not item.external_code:
                continue
            try:
                parsed = parse_menu_item_path_for_menu(menu_code, item.external_code)
            except MenuValidationError:
                continue
            if parsed.path not in desired:
                stale.append(parsed.path)

        for path in sorted(stale, key=lambda p: (-path_depth(p), p)):
            logger.debug("Pruning menu item %s from %s", path, menu_code)
            paths.delete_item_by_path(menu_code, path, opts.actor_id, cascade_children=True)
