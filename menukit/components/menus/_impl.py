"""
MenuService - menu hierarchy management and navigation resolution.

Orchestrates identity derivation, sibling ordering, deferred parent
reconciliation and navigation building over injected repositories. The
service holds no mutable state of its own; correctness under concurrent
writers is delegated to the stores (e.g. translation uniqueness).

Key behaviors:
- Adding an item whose canonical key already exists merges new locales only
- Inserts shift later siblings; deletes compact the remaining ones
- Bulk reorders are fully validated (cardinality, parents, cycles) first
- Forgiving bootstrap stores unknown parents as pending references
- Navigation degrades gracefully: unknown locales and URL failures are tolerated
- Activity/audit sink failures are logged, never raised
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from menukit.adapters.events import NoopActivityEmitter, NoopAuditRecorder
from menukit.domain.entities import (
    Locale,
    Menu,
    MenuItem,
    MenuItemTranslation,
    ParentLink,
    PendingParent,
    ResolvedParent,
    RootParent,
)

from ._hierarchy import (
    build_hierarchy,
    clamp_index,
    compact,
    has_cycle,
    item_sibling_key,
    parent_map,
    reposition,
    shift_for_insert,
    sibling_key,
)
from ._identity import (
    canonical_key_for_external_code,
    derive_canonical_key,
    derive_canonical_key_for_item,
    menu_item_uuid,
    menu_uuid,
    normalize_external_code,
)
from ._navigation import NavigationBuilder
from ._reconcile import plan_reconciliation
from ._urls import DefaultURLResolver
from ._validation import (
    NormalizedTranslation,
    normalize_item_type,
    normalize_target_for_type,
    normalize_translation_input,
    sanitize_target,
    validate_item_semantics,
    validate_menu_code,
)
from .errors import (
    ConflictError,
    DuplicateTranslationLocaleError,
    HierarchyCycleError,
    MenuCodeExistsError,
    MenuCodeRequiredError,
    MenuInUseError,
    MenuItemCollapsedWithoutCollapsibleError,
    MenuItemHasChildrenError,
    MenuItemNotFoundError,
    MenuItemPositionError,
    MenuItemSeparatorFieldsError,
    MenuItemTranslationsRequiredError,
    MenuNotFoundError,
    NotFoundError,
    ParentInvalidError,
    ParentUnsupportedError,
    ReorderMismatchError,
    TranslationExistsError,
    UnknownLocaleError,
)
from .models import (
    ActivityEvent,
    AddMenuItemInput,
    AddMenuItemTranslationInput,
    AuditEvent,
    BulkReorderMenuItemsInput,
    CreateMenuInput,
    DeleteMenuItemInput,
    DeleteMenuRequest,
    MenuItemTranslationInput,
    NavigationNode,
    ReconcileMenuInput,
    ReconcileResult,
    ResolveRequest,
    UpdateMenuItemInput,
    UpsertMenuInput,
    UpsertMenuItemInput,
)
from .ports import (
    ActivityEmitterPort,
    AuditRecorderPort,
    CacheInvalidatorPort,
    IDGenerator,
    LocaleRepoPort,
    MenuContentsResetterPort,
    MenuIDDeriver,
    MenuItemRepoPort,
    MenuItemTranslationRepoPort,
    MenuRepoPort,
    MenuUsageResolverPort,
    PageRepoPort,
    ParentResolver,
    RecordIDGenerator,
    TimePort,
    URLResolverPort,
)

logger = logging.getLogger(__name__)

# Position used by upserts that should land after every existing sibling
APPEND_POSITION = sys.maxsize

# --- Configuration ---


@dataclass(frozen=True)
class MenuServiceConfig:
    """Menu service configuration from rules."""

    require_translations: bool = True
    translations_enabled: bool = True

    # Forgiving bootstrap: unknown parents become pending references
    forgiving_bootstrap: bool = False

    # None follows forgiving_bootstrap
    reconcile_on_add: bool | None = None
    reconcile_on_resolve: bool | None = None
    deterministic_ids: bool | None = None
    allow_collapsible_without_children: bool | None = None

    def _follow(self, value: bool | None) -> bool:
        return self.forgiving_bootstrap if value is None else value

    @property
    def translations_required(self) -> bool:
        return self.translations_enabled and self.require_translations

    @property
    def should_reconcile_on_add(self) -> bool:
        return self._follow(self.reconcile_on_add)

    @property
    def should_reconcile_on_resolve(self) -> bool:
        return self._follow(self.reconcile_on_resolve)

    @property
    def use_deterministic_ids(self) -> bool:
        return self._follow(self.deterministic_ids)

    @property
    def tolerate_collapsible_without_children(self) -> bool:
        return self._follow(self.allow_collapsible_without_children)


DEFAULT_CONFIG = MenuServiceConfig()


PreparedTranslation = tuple[NormalizedTranslation, Locale]


class MenuService:
    """
    Menu service.

    Manages menus, their item trees and localized labels, and renders
    navigation trees for presentation.
    """

    def __init__(
        self,
        menus: MenuRepoPort,
        items: MenuItemRepoPort,
        translations: MenuItemTranslationRepoPort,
        locales: LocaleRepoPort,
        *,
        config: MenuServiceConfig | None = None,
        pages: PageRepoPort | None = None,
        usage_resolver: MenuUsageResolverPort | None = None,
        url_resolver: URLResolverPort | None = None,
        parent_resolver: ParentResolver | None = None,
        activity: ActivityEmitterPort | None = None,
        audit: AuditRecorderPort | None = None,
        time_port: TimePort | None = None,
        id_generator: IDGenerator | None = None,
        record_ids: RecordIDGenerator | None = None,
        menu_id_deriver: MenuIDDeriver | None = None,
    ) -> None:
        self._menus = menus
        self._items = items
        self._translations = translations
        self._locales = locales
        self._config = config or DEFAULT_CONFIG
        self._pages = pages
        self._usage = usage_resolver
        self._url_resolver = url_resolver
        self._default_urls = DefaultURLResolver(pages)
        self._parent_resolver = parent_resolver
        self._activity = activity or NoopActivityEmitter()
        self._audit = audit or NoopAuditRecorder()
        self._time_port = time_port
        self._id_generator = id_generator
        self._record_ids = record_ids or uuid4
        self._menu_id_deriver = menu_id_deriver

    @property
    def config(self) -> MenuServiceConfig:
        return self._config

    # --- Infrastructure helpers ---

    def _now(self) -> datetime:
        if self._time_port:
            return self._time_port.now_utc()
        from menukit.adapters.clock import SystemClock

        return SystemClock().now_utc()

    def _emit(
        self,
        actor: UUID | None,
        verb: str,
        object_type: str,
        object_id: UUID,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            if not self._activity.enabled():
                return
            self._activity.emit(
                ActivityEvent(
                    verb=verb,
                    actor_id=actor,
                    object_type=object_type,
                    object_id=str(object_id),
                    metadata=metadata or {},
                )
            )
        except Exception:
            logger.warning(
                "Activity emit failed for %s %s %s", verb, object_type, object_id, exc_info=True
            )

    def _record_audit(self, event: AuditEvent) -> None:
        try:
            self._audit.record(event)
        except Exception:
            logger.warning(
                "Audit record failed for %s %s", event.action, event.entity_id, exc_info=True
            )

    # --- Lookups ---

    def _load_menu(self, menu_id: UUID) -> Menu:
        try:
            return self._menus.get_by_id(menu_id)
        except NotFoundError as e:
            raise MenuNotFoundError(menu_id) from e

    def _load_menu_by_code(self, code: str) -> Menu:
        code = code.strip()
        if not code:
            raise MenuCodeRequiredError()
        try:
            return self._menus.get_by_code(code)
        except NotFoundError as e:
            raise MenuNotFoundError(code) from e

    def _load_item(self, item_id: UUID) -> MenuItem:
        try:
            return self._items.get_by_id(item_id)
        except NotFoundError as e:
            raise MenuItemNotFoundError(item_id) from e

    def _find_by_canonical_key(self, menu_id: UUID, key: str) -> MenuItem | None:
        try:
            return self._items.get_by_canonical_key(menu_id, key)
        except NotFoundError:
            return None

    def _find_by_external_code(self, menu_id: UUID, code: str) -> MenuItem | None:
        try:
            return self._items.get_by_external_code(menu_id, code)
        except NotFoundError:
            return None

    def _lookup_locale(self, code: str) -> Locale:
        code = code.strip()
        if not code:
            raise UnknownLocaleError(code)
        try:
            return self._locales.get_by_code(code)
        except NotFoundError as e:
            raise UnknownLocaleError(code) from e

    def _fetch_siblings(self, menu_id: UUID, parent_id: UUID | None) -> list[MenuItem]:
        if parent_id is not None:
            return [c for c in self._items.list_children(parent_id) if c.menu_id == menu_id]
        return [i for i in self._items.list_by_menu(menu_id) if i.parent_id is None]

    def _hydrate(self, menu: Menu) -> Menu:
        items = self._items.list_by_menu(menu.id)
        for item in items:
            item.translations = self._translations.list_by_item(item.id)
        menu.items = build_hierarchy(items)
        return menu

    # --- Menus ---

    def _menu_id_for(self, code: str, explicit: UUID | None = None) -> UUID:
        if explicit is not None:
            return explicit
        if self._menu_id_deriver is not None:
            return self._menu_id_deriver(code)
        if self._config.use_deterministic_ids:
            return menu_uuid(code)
        return self._record_ids()

    def _new_menu(self, code: str, inp: CreateMenuInput) -> Menu:
        now = self._now()
        return Menu(
            id=self._menu_id_for(code, inp.id),
            code=code,
            location=inp.location.strip(),
            description=inp.description,
            created_by=inp.created_by,
            updated_by=inp.created_by,
            created_at=now,
            updated_at=now,
        )

    def create_menu(self, inp: CreateMenuInput) -> Menu:
        """Create a menu; the code must be unique."""
        code = validate_menu_code(inp.code)
        try:
            self._menus.get_by_code(code)
        except NotFoundError:
            pass
        else:
            raise MenuCodeExistsError(f"menu code {code!r} already exists")

        try:
            created = self._menus.create(self._new_menu(code, inp))
        except ConflictError as e:
            raise MenuCodeExistsError(f"menu code {code!r} already exists") from e
        self._emit(inp.created_by, "create", "menu", created.id, {"code": created.code})
        return created

    def get_or_create_menu(self, inp: CreateMenuInput) -> Menu:
        """Return the menu for ``inp.code``, creating it when missing."""
        code = validate_menu_code(inp.code)
        try:
            existing = self._menus.get_by_code(code)
        except NotFoundError:
            existing = None

        if existing is not None:
            location = inp.location.strip()
            if location and existing.location != location:
                existing.location = location
                existing.description = inp.description
                existing.updated_by = inp.created_by
                existing.updated_at = self._now()
                existing = self._menus.update(existing)
            return existing

        try:
            created = self._menus.create(self._new_menu(code, inp))
        except ConflictError:
            # Lost a concurrent create; the winner is the menu to use
            logger.debug("Menu %s created concurrently, returning existing record", code)
            return self._load_menu_by_code(code)
        self._emit(inp.created_by, "create", "menu", created.id, {"code": created.code})
        return created

    def upsert_menu(self, inp: UpsertMenuInput) -> Menu:
        """Create a menu or update its description/location."""
        code = validate_menu_code(inp.code)
        try:
            existing = self._menus.get_by_code(code)
        except NotFoundError:
            return self.create_menu(
                CreateMenuInput(
                    code=code,
                    location=inp.location,
                    description=inp.description,
                    created_by=inp.actor_id,
                )
            )

        existing.description = inp.description
        if inp.location.strip():
            existing.location = inp.location.strip()
        existing.updated_by = inp.actor_id
        existing.updated_at = self._now()
        updated = self._menus.update(existing)
        self._emit(inp.actor_id, "update", "menu", updated.id, {"code": updated.code})
        return updated

    def get_menu(self, menu_id: UUID) -> Menu:
        """Get a menu with its hydrated item tree."""
        return self._hydrate(self._load_menu(menu_id))

    def get_menu_by_code(self, code: str) -> Menu:
        return self._hydrate(self._load_menu_by_code(code))

    def get_menu_by_location(self, location: str) -> Menu:
        location = location.strip()
        try:
            menu = self._menus.get_by_location(location)
        except NotFoundError as e:
            raise MenuNotFoundError(location) from e
        return self._hydrate(menu)

    def list_menu_items(self, menu_id: UUID) -> list[MenuItem]:
        """Flat list of a menu's items ordered by sibling group and position."""
        self._load_menu(menu_id)
        items = self._items.list_by_menu(menu_id)
        return sorted(items, key=lambda i: (item_sibling_key(i), i.position, i.created_at))

    def _ensure_deletion_allowed(self, menu_id: UUID, force: bool) -> None:
        if force or self._usage is None:
            return
        bindings = self._usage.resolve_menu_usage(menu_id)
        if bindings:
            raise MenuInUseError(menu_id, bindings)

    def delete_menu(self, req: DeleteMenuRequest) -> None:
        """Delete a menu with all items, unless it is still bound somewhere."""
        menu = self._load_menu(req.menu_id)
        self._ensure_deletion_allowed(menu.id, req.force)

        for item in self._items.list_by_menu(menu.id):
            if item.parent_id is None:
                self._delete_item_recursive(item, cascade=True)

        # Anything left is unreachable from the roots (broken hierarchy)
        for item in self._items.list_by_menu(menu.id):
            try:
                self._delete_item_recursive(item, cascade=True)
            except MenuItemNotFoundError:
                continue

        self._menus.delete(menu.id)
        self.invalidate_cache()
        self._emit(req.deleted_by, "delete", "menu", menu.id, {"code": menu.code})

    def _reset_contents(self, menu_id: UUID) -> tuple[int, int]:
        if isinstance(self._items, MenuContentsResetterPort):
            return self._items.reset_menu_contents(menu_id)

        items = self._items.list_by_menu(menu_id)
        translations_deleted = 0
        for item in items:
            for tr in self._translations.list_by_item(item.id):
                self._translations.delete(tr.id)
                translations_deleted += 1

        items_deleted = 0
        for item in items:
            try:
                self._items.delete(item.id)
            except NotFoundError:
                continue
            items_deleted += 1
        return items_deleted, translations_deleted

    def _reset_audit(
        self,
        menu: Menu,
        actor_id: UUID | None,
        force: bool,
        counts: tuple[int, int] | None = None,
        error: Exception | None = None,
    ) -> None:
        metadata: dict[str, Any] = {
            "actor": str(actor_id) if actor_id else "",
            "code": menu.code,
            "menu_id": str(menu.id),
            "force": force,
            "strategy": "contents_only",
        }
        action = "menu_reset"
        if counts is not None:
            metadata["items_deleted"], metadata["translations_deleted"] = counts
        if error is not None:
            action = "menu_reset_failed"
            if isinstance(error, MenuInUseError):
                action = "menu_reset_blocked"
                metadata["bindings"] = len(error.bindings)
            metadata["error"] = str(error)
        self._record_audit(
            AuditEvent(
                entity_type="menu",
                entity_id=str(menu.id),
                action=action,
                occurred_at=self._now(),
                actor_id=actor_id,
                metadata=metadata,
            )
        )

    def reset_menu_by_code(
        self,
        code: str,
        actor_id: UUID | None = None,
        force: bool = False,
    ) -> tuple[int, int]:
        """Remove every item and translation of a menu but keep the menu.

        Returns (items_deleted, translations_deleted).
        """
        menu = self._load_menu_by_code(code)
        try:
            self._ensure_deletion_allowed(menu.id, force)
            counts = self._reset_contents(menu.id)
        except Exception as e:
            self._reset_audit(menu, actor_id, force, error=e)
            raise

        self.invalidate_cache()
        self._emit(
            actor_id,
            "reset",
            "menu",
            menu.id,
            {
                "code": menu.code,
                "force": force,
                "items_deleted": counts[0],
                "translations_deleted": counts[1],
            },
        )
        self._reset_audit(menu, actor_id, force, counts=counts)
        return counts

    # --- Items ---

    def _translations_required(self, item_type: str, inp: AddMenuItemInput) -> bool:
        return (
            item_type != "separator"
            and self._config.translations_required
            and not inp.translations
            and not inp.allow_missing_translations
        )

    def _resolve_parent(self, menu_id: UUID, inp: AddMenuItemInput) -> ParentLink:
        if inp.parent_id is not None:
            return ResolvedParent(id=inp.parent_id)
        ref = inp.parent_code.strip()
        if not ref:
            return RootParent()
        try:
            return ResolvedParent(id=UUID(ref))
        except ValueError:
            pass

        code = normalize_external_code(ref)
        parent = self._find_by_external_code(menu_id, code) if code else None
        if parent is None:
            parent = self._find_by_canonical_key(menu_id, ref)
        if parent is not None:
            return ResolvedParent(id=parent.id)

        if self._parent_resolver is not None:
            resolved = self._parent_resolver(ref, inp)
            if resolved is not None:
                return ResolvedParent(id=resolved)

        if self._config.forgiving_bootstrap:
            return PendingParent(ref=ref)
        raise ParentInvalidError(f"parent {ref!r} not found in menu {menu_id}")

    def _check_parent(self, menu_id: UUID, parent_id: UUID) -> MenuItem:
        try:
            parent = self._items.get_by_id(parent_id)
        except NotFoundError as e:
            raise ParentInvalidError(f"parent {parent_id} not found") from e
        if parent.menu_id != menu_id:
            raise ParentInvalidError(f"parent {parent_id} belongs to another menu")
        if parent.type == "separator":
            raise ParentUnsupportedError(f"separator {parent_id} cannot have children")
        return parent

    def _prepare_translations(
        self,
        item_type: str,
        inputs: Sequence[MenuItemTranslationInput],
    ) -> list[PreparedTranslation]:
        """Normalize and resolve locales before anything is written."""
        prepared: list[PreparedTranslation] = []
        seen: set[str] = set()
        for inp in inputs:
            normalized = normalize_translation_input(item_type, inp)
            if not normalized.locale:
                raise UnknownLocaleError(normalized.locale)
            if normalized.locale.lower() in seen:
                raise DuplicateTranslationLocaleError(
                    f"locale {normalized.locale!r} supplied twice"
                )
            seen.add(normalized.locale.lower())
            prepared.append((normalized, self._lookup_locale(normalized.locale)))
        return prepared

    def _new_translation(
        self,
        item_id: UUID,
        normalized: NormalizedTranslation,
        locale: Locale,
    ) -> MenuItemTranslation:
        now = self._now()
        return MenuItemTranslation(
            id=self._record_ids(),
            menu_item_id=item_id,
            locale_id=locale.id,
            label=normalized.label,
            label_key=normalized.label_key,
            group_title=normalized.group_title,
            group_title_key=normalized.group_title_key,
            url_override=normalized.url_override,
            created_at=now,
            updated_at=now,
        )

    def _create_translation(
        self,
        item_id: UUID,
        normalized: NormalizedTranslation,
        locale: Locale,
    ) -> MenuItemTranslation:
        try:
            self._translations.get_by_item_and_locale(item_id, locale.id)
        except NotFoundError:
            pass
        else:
            raise TranslationExistsError(f"item {item_id} already has locale {locale.code!r}")

        try:
            return self._translations.create(self._new_translation(item_id, normalized, locale))
        except ConflictError as e:
            raise TranslationExistsError(
                f"item {item_id} already has locale {locale.code!r}"
            ) from e

    def _merge_translations(
        self,
        existing: MenuItem,
        prepared: Sequence[PreparedTranslation],
    ) -> MenuItem:
        current = self._translations.list_by_item(existing.id)
        seen = {tr.locale_id for tr in current}
        for normalized, locale in prepared:
            if locale.id in seen:
                continue
            try:
                current.append(
                    self._translations.create(self._new_translation(existing.id, normalized, locale))
                )
            except ConflictError:
                logger.debug(
                    "Locale %s for item %s created concurrently, keeping stored value",
                    locale.code,
                    existing.id,
                )
                continue
            seen.add(locale.id)
        existing.translations = current
        return existing

    def _pick_item_id(self, menu_id: UUID, inp: AddMenuItemInput, canonical_key: str | None) -> UUID:
        if inp.id is not None:
            return inp.id
        if self._id_generator is not None:
            generated = self._id_generator(inp)
            if generated is not None:
                return generated
        if self._config.use_deterministic_ids and canonical_key:
            return menu_item_uuid(menu_id, canonical_key)
        return self._record_ids()

    def add_menu_item(self, inp: AddMenuItemInput) -> MenuItem:
        """Add an item, or merge translations into its canonical twin."""
        menu = self._load_menu(inp.menu_id)
        item_type = normalize_item_type(inp.type)

        if self._translations_required(item_type, inp):
            raise MenuItemTranslationsRequiredError()
        if item_type == "separator" and inp.translations:
            raise MenuItemSeparatorFieldsError("separators cannot carry translations")
        if inp.position < 0:
            raise MenuItemPositionError()

        target = normalize_target_for_type(item_type, inp.target, self._pages)
        parent = self._resolve_parent(menu.id, inp)
        if isinstance(parent, ResolvedParent):
            self._check_parent(menu.id, parent.id)

        external_code = normalize_external_code(inp.external_code)
        canonical_key = derive_canonical_key(
            item_type, target, parent, inp.position, inp.translations, inp.parent_code
        )
        canonical_key = canonical_key_for_external_code(external_code) or canonical_key
        if inp.canonical_key and inp.canonical_key.strip():
            canonical_key = inp.canonical_key.strip()

        prepared = self._prepare_translations(item_type, inp.translations)

        if canonical_key:
            existing = self._find_by_canonical_key(menu.id, canonical_key)
            if existing is not None:
                logger.debug("Menu item %s matched canonical key %s", existing.id, canonical_key)
                return self._merge_translations(existing, prepared)

        icon = inp.icon.strip()
        validate_item_semantics(
            item_type,
            target=target,
            icon=icon,
            badge=inp.badge,
            translation_count=len(inp.translations),
            collapsible=inp.collapsible,
            collapsed=inp.collapsed,
            allow_collapsible_without_children=self._config.tolerate_collapsible_without_children,
        )

        normalized_input = dataclasses.replace(
            inp,
            type=item_type,
            target=target,
            parent_id=parent.id if isinstance(parent, ResolvedParent) else None,
            external_code=external_code,
            canonical_key=canonical_key,
        )
        item_id = self._pick_item_id(menu.id, normalized_input, canonical_key)

        now = self._now()
        siblings = self._fetch_siblings(menu.id, normalized_input.parent_id)
        insert_at = clamp_index(inp.position, len(siblings))
        for sibling in shift_for_insert(siblings, insert_at):
            sibling.updated_by = inp.created_by
            sibling.updated_at = now
            self._items.update(sibling)

        item = MenuItem(
            id=item_id,
            menu_id=menu.id,
            parent=parent,
            external_code=external_code,
            canonical_key=canonical_key,
            position=insert_at,
            type=item_type,
            target=target,
            icon=icon,
            badge=dict(inp.badge),
            permissions=list(inp.permissions),
            classes=list(inp.classes),
            styles=dict(inp.styles),
            collapsible=item_type != "separator" and inp.collapsible,
            collapsed=item_type != "separator" and inp.collapsible and inp.collapsed,
            metadata=dict(inp.metadata),
            created_by=inp.created_by,
            updated_by=inp.created_by,
            created_at=now,
            updated_at=now,
        )
        created = self._items.create(item)
        created.translations = [
            self._create_translation(created.id, normalized, locale)
            for normalized, locale in prepared
        ]

        self._emit(
            inp.created_by,
            "create",
            "menu_item",
            created.id,
            {
                "menu_id": str(menu.id),
                "menu_code": menu.code,
                "position": created.position,
                "parent_id": str(created.parent_id) if created.parent_id else None,
                "locales": [normalized.locale for normalized, _ in prepared],
            },
        )

        if self._config.should_reconcile_on_add:
            self.reconcile_menu(ReconcileMenuInput(menu_id=menu.id, updated_by=inp.created_by))
        return created

    def upsert_menu_item(self, inp: UpsertMenuItemInput) -> MenuItem:
        """Ensure an item exists; the menu is looked up or created by code."""
        if inp.menu_id is not None:
            menu = self._load_menu(inp.menu_id)
        else:
            if not inp.menu_code.strip():
                raise MenuCodeRequiredError()
            menu = self.get_or_create_menu(
                CreateMenuInput(code=inp.menu_code, created_by=inp.actor_id)
            )

        return self.add_menu_item(
            AddMenuItemInput(
                menu_id=menu.id,
                position=APPEND_POSITION if inp.position is None else inp.position,
                id=inp.id,
                parent_id=inp.parent_id,
                parent_code=inp.parent_code,
                external_code=inp.external_code,
                canonical_key=inp.canonical_key,
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
                created_by=inp.actor_id,
                translations=inp.translations,
                allow_missing_translations=inp.allow_missing_translations,
            )
        )

    def update_menu_item(self, inp: UpdateMenuItemInput) -> MenuItem:
        """Update fields, parent and/or position of an item."""
        item = self._load_item(inp.item_id)
        original_parent = item.parent_id
        original_position = item.position
        original_type = item.type or "item"
        original_target = dict(item.target)
        original_external = item.external_code
        item_type = normalize_item_type(inp.type) if inp.type is not None else original_type

        if inp.collapsed and inp.collapsible is False:
            raise MenuItemCollapsedWithoutCollapsibleError()
        if inp.position is not None and inp.position < 0:
            raise MenuItemPositionError()

        item.translations = self._translations.list_by_item(item.id)

        if inp.target is not None:
            item.target = normalize_target_for_type(item_type, inp.target, self._pages)
        elif item_type != original_type:
            if item_type == "item":
                item.target = sanitize_target(item.target, self._pages)
            else:
                item.target = {}

        if inp.icon is not None:
            item.icon = inp.icon.strip()
        elif item_type in ("group", "separator"):
            item.icon = ""
        if inp.badge is not None:
            item.badge = dict(inp.badge)
        elif item_type in ("group", "separator"):
            item.badge = {}
        if inp.permissions is not None:
            item.permissions = list(inp.permissions)
        if inp.classes is not None:
            item.classes = list(inp.classes)
        if inp.styles is not None:
            item.styles = dict(inp.styles)
        if inp.metadata is not None:
            item.metadata = dict(inp.metadata)
        if inp.collapsible is not None:
            item.collapsible = inp.collapsible
        if inp.collapsed is not None:
            item.collapsed = inp.collapsed
        if inp.external_code is not None:
            item.external_code = normalize_external_code(inp.external_code)

        new_parent = original_parent
        if inp.detach_parent:
            new_parent = None
        elif inp.parent_id is not None:
            new_parent = inp.parent_id
        parent_changed = new_parent != original_parent or (
            item.is_pending and (inp.detach_parent or inp.parent_id is not None)
        )
        if parent_changed and new_parent is not None:
            if new_parent == item.id:
                raise HierarchyCycleError(f"menu item {item.id} cannot be its own parent")
            self._check_parent(item.menu_id, new_parent)
            parents = parent_map(self._items.list_by_menu(item.menu_id))
            parents[item.id] = new_parent
            if has_cycle(parents):
                raise HierarchyCycleError(f"moving {item.id} under {new_parent} creates a cycle")

        has_children = False
        if item_type == "separator" or item.collapsible:
            has_children = bool(self._items.list_children(item.id))
            if item_type == "separator" and has_children:
                raise MenuItemSeparatorFieldsError("separators cannot have children")
        if item_type == "separator":
            item.collapsible = False
            item.collapsed = False
        validate_item_semantics(
            item_type,
            target=item.target,
            icon=item.icon,
            badge=item.badge,
            translation_count=len(item.translations),
            collapsible=item.collapsible,
            collapsed=item.collapsed,
            has_children=has_children,
            allow_collapsible_without_children=self._config.tolerate_collapsible_without_children,
        )

        now = self._now()
        moved: list[MenuItem] = []
        if parent_changed:
            old_siblings = [
                s for s in self._fetch_siblings(item.menu_id, original_parent) if s.id != item.id
            ]
            moved.extend(compact(old_siblings))
            new_siblings = self._fetch_siblings(item.menu_id, new_parent)
            desired = inp.position if inp.position is not None else len(new_siblings)
            item.parent = ResolvedParent(id=new_parent) if new_parent else RootParent()
            _, shifted = reposition(new_siblings, item, desired)
            moved.extend(shifted)
        elif inp.position is not None:
            siblings = self._fetch_siblings(item.menu_id, item.parent_id)
            _, moved = reposition(siblings, item, inp.position)

        item.type = item_type
        if (
            item_type != original_type
            or item.target != original_target
            or item.external_code != original_external
            or parent_changed
        ):
            canonical_key = derive_canonical_key_for_item(item)
            if canonical_key and canonical_key != item.canonical_key:
                clash = self._find_by_canonical_key(item.menu_id, canonical_key)
                if clash is not None and clash.id != item.id:
                    raise ConflictError(
                        f"canonical key {canonical_key!r} already used in menu {item.menu_id}"
                    )
            item.canonical_key = canonical_key

        for sibling in moved:
            sibling.updated_by = inp.updated_by
            sibling.updated_at = now
            self._items.update(sibling)

        item.updated_by = inp.updated_by
        item.updated_at = now
        translations = item.translations
        updated = self._items.update(item)
        updated.translations = translations

        verb = "update"
        if updated.parent_id != original_parent or updated.position != original_position:
            verb = "reorder"
        self._emit(
            inp.updated_by,
            verb,
            "menu_item",
            updated.id,
            {
                "menu_id": str(updated.menu_id),
                "position": updated.position,
                "parent_id": str(updated.parent_id) if updated.parent_id else None,
            },
        )
        return updated

    def _compact_siblings(self, menu_id: UUID, parent_id: UUID | None) -> None:
        now = self._now()
        for sibling in compact(self._fetch_siblings(menu_id, parent_id)):
            sibling.updated_at = now
            self._items.update(sibling)

    def _delete_translations(self, item_id: UUID) -> None:
        for tr in self._translations.list_by_item(item_id):
            self._translations.delete(tr.id)

    def _delete_item_recursive(self, item: MenuItem, cascade: bool) -> None:
        children = self._items.list_children(item.id)
        if children and not cascade:
            raise MenuItemHasChildrenError(f"menu item {item.id} has {len(children)} children")
        for child in children:
            self._delete_item_recursive(child, cascade=True)

        self._delete_translations(item.id)
        try:
            self._items.delete(item.id)
        except NotFoundError as e:
            raise MenuItemNotFoundError(item.id) from e
        self._compact_siblings(item.menu_id, item.parent_id)

    def delete_menu_item(self, inp: DeleteMenuItemInput) -> None:
        """Delete an item (and, with cascade, its descendants)."""
        item = self._load_item(inp.item_id)
        self._delete_item_recursive(item, cascade=inp.cascade_children)
        self._emit(
            inp.deleted_by,
            "delete",
            "menu_item",
            item.id,
            {"menu_id": str(item.menu_id), "cascade": inp.cascade_children},
        )

    def bulk_reorder_menu_items(self, inp: BulkReorderMenuItemsInput) -> list[MenuItem]:
        """Replace parent/position of every item in a menu at once."""
        self._load_menu(inp.menu_id)
        items = self._items.list_by_menu(inp.menu_id)
        if len(inp.items) != len(items):
            raise ReorderMismatchError(
                f"reorder requires {len(items)} items, got {len(inp.items)}"
            )
        if not items:
            return []

        index = {item.id: item for item in items}
        parents: dict[UUID, UUID | None] = {}
        groups: dict[str, list[Any]] = {}
        for entry in inp.items:
            if entry.item_id not in index:
                raise MenuItemNotFoundError(entry.item_id)
            if entry.item_id in parents:
                raise ReorderMismatchError(f"duplicate item {entry.item_id} in reorder request")
            if entry.position < 0:
                raise MenuItemPositionError()
            if entry.parent_id is not None:
                if entry.parent_id == entry.item_id:
                    raise HierarchyCycleError(f"menu item {entry.item_id} cannot be its own parent")
                parent = index.get(entry.parent_id)
                if parent is None:
                    raise ParentInvalidError(f"parent {entry.parent_id} is not in menu {inp.menu_id}")
                if parent.type == "separator":
                    raise ParentUnsupportedError(f"separator {parent.id} cannot have children")
            parents[entry.item_id] = entry.parent_id
            groups.setdefault(sibling_key(entry.parent_id), []).append(entry)

        if has_cycle(parents):
            raise HierarchyCycleError("reorder would create a cycle")

        now = self._now()
        dirty: list[MenuItem] = []
        for entries in groups.values():
            for idx, entry in enumerate(sorted(entries, key=lambda e: e.position)):
                item = index[entry.item_id]
                changed = item.position != idx or item.parent_id != entry.parent_id or item.is_pending
                item.parent = ResolvedParent(id=entry.parent_id) if entry.parent_id else RootParent()
                item.position = idx
                if changed:
                    item.updated_by = inp.updated_by
                    item.updated_at = now
                    dirty.append(item)

        if dirty:
            self._items.bulk_update_hierarchy(dirty)

        result = sorted(items, key=lambda i: (item_sibling_key(i), i.position))
        self._emit(
            inp.updated_by,
            "reorder",
            "menu",
            inp.menu_id,
            {"menu_id": str(inp.menu_id), "count": len(result), "changed": len(dirty)},
        )
        return result

    def reconcile_menu(self, inp: ReconcileMenuInput) -> ReconcileResult:
        """Resolve pending parent references of a menu."""
        self._load_menu(inp.menu_id)
        items = self._items.list_by_menu(inp.menu_id)
        plan = plan_reconciliation(items)
        if plan.resolved == 0:
            return ReconcileResult(resolved=0, remaining=plan.remaining)

        now = self._now()
        for item in [*plan.linked, *plan.moved]:
            item.updated_by = inp.updated_by
            item.updated_at = now
        self._items.bulk_update_parent_links(plan.linked)
        if plan.moved:
            self._items.bulk_update_hierarchy(plan.moved)

        logger.debug(
            "Reconciled menu %s: %d resolved, %d remaining, %d repositioned",
            inp.menu_id,
            plan.resolved,
            plan.remaining,
            len(plan.moved),
        )
        self._emit(
            inp.updated_by,
            "reconcile",
            "menu",
            inp.menu_id,
            {"resolved": plan.resolved, "remaining": plan.remaining},
        )
        return ReconcileResult(resolved=plan.resolved, remaining=plan.remaining)

    # --- Translations ---

    def _translation_item(self, item_id: UUID) -> MenuItem:
        item = self._load_item(item_id)
        if item.type == "separator":
            raise MenuItemSeparatorFieldsError("separators cannot carry translations")
        return item

    @staticmethod
    def _translation_payload(inp: AddMenuItemTranslationInput) -> MenuItemTranslationInput:
        return MenuItemTranslationInput(
            locale=inp.locale,
            label=inp.label,
            label_key=inp.label_key,
            group_title=inp.group_title,
            group_title_key=inp.group_title_key,
            url_override=inp.url_override,
        )

    def add_menu_item_translation(self, inp: AddMenuItemTranslationInput) -> MenuItemTranslation:
        """Attach a new locale; an existing locale is a conflict."""
        item = self._translation_item(inp.item_id)
        ((normalized, locale),) = self._prepare_translations(
            item.type, [self._translation_payload(inp)]
        )
        created = self._create_translation(item.id, normalized, locale)
        self._emit(
            inp.actor_id,
            "update",
            "menu_item",
            item.id,
            {"menu_id": str(item.menu_id), "locales": [locale.code]},
        )
        return created

    def upsert_menu_item_translation(self, inp: AddMenuItemTranslationInput) -> MenuItemTranslation:
        """Create or overwrite the translation for one locale."""
        item = self._translation_item(inp.item_id)
        ((normalized, locale),) = self._prepare_translations(
            item.type, [self._translation_payload(inp)]
        )
        try:
            existing = self._translations.get_by_item_and_locale(item.id, locale.id)
        except NotFoundError:
            try:
                return self._translations.create(self._new_translation(item.id, normalized, locale))
            except ConflictError:
                existing = self._translations.get_by_item_and_locale(item.id, locale.id)

        existing.label = normalized.label
        existing.label_key = normalized.label_key
        existing.group_title = normalized.group_title
        existing.group_title_key = normalized.group_title_key
        existing.url_override = normalized.url_override
        existing.updated_at = self._now()
        return self._translations.update(existing)

    def get_menu_item_by_external_code(self, menu_code: str, external_code: str) -> MenuItem:
        menu = self._load_menu_by_code(menu_code)
        code = normalize_external_code(external_code)
        if not code:
            raise MenuItemNotFoundError(external_code)
        item = self._find_by_external_code(menu.id, code)
        if item is None:
            raise MenuItemNotFoundError(external_code)
        return item

    # --- Navigation ---

    def _node_url(
        self,
        item: MenuItem,
        translation: MenuItemTranslation | None,
        locale: str,
        locale_id: UUID | None,
    ) -> str:
        if translation is not None and translation.url_override and translation.url_override.strip():
            return translation.url_override.strip()

        request = ResolveRequest(item=item, translation=translation, locale=locale, locale_id=locale_id)
        if self._url_resolver is not None:
            try:
                url = self._url_resolver.resolve(request)
            except Exception:
                logger.debug("URL resolver failed for menu item %s", item.id, exc_info=True)
                url = ""
            if url:
                return url

        try:
            return self._default_urls.resolve(request)
        except Exception:
            logger.debug("Default URL resolution failed for menu item %s", item.id, exc_info=True)
            return ""

    def _navigation(self, menu: Menu, locale: str) -> list[NavigationNode]:
        if not menu.items:
            return []
        locale = locale.strip()
        locale_id: UUID | None = None
        if locale:
            try:
                locale_id = self._lookup_locale(locale).id
            except UnknownLocaleError:
                logger.debug("Unknown locale %r, rendering menu %s with defaults", locale, menu.code)

        builder = NavigationBuilder(
            lambda item, tr: self._node_url(item, tr, locale, locale_id),
            locale_id,
        )
        return builder.build(menu.items)

    def resolve_navigation(self, menu_code: str, locale: str = "") -> list[NavigationNode]:
        """Render a menu as a normalized, localized navigation tree."""
        code = menu_code.strip()
        if self._config.should_reconcile_on_resolve and code:
            try:
                record = self._menus.get_by_code(code)
            except NotFoundError:
                record = None
            if record is not None:
                self.reconcile_menu(ReconcileMenuInput(menu_id=record.id))
        return self._navigation(self.get_menu_by_code(code), locale)

    def resolve_navigation_by_location(self, location: str, locale: str = "") -> list[NavigationNode]:
        menu = self.get_menu_by_location(location)
        return self.resolve_navigation(menu.code, locale)

    # --- Caches ---

    def invalidate_cache(self) -> None:
        """Invalidate caches of every repository that supports it."""
        first_error: Exception | None = None
        for repo in (self._menus, self._items, self._translations):
            if not isinstance(repo, CacheInvalidatorPort):
                continue
            try:
                repo.invalidate_cache()
            except Exception as e:
                logger.warning("Cache invalidation failed for %s", type(repo).__name__, exc_info=True)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error


def create_menu_service(
    menus: MenuRepoPort,
    items: MenuItemRepoPort,
    translations: MenuItemTranslationRepoPort,
    locales: LocaleRepoPort,
    config: MenuServiceConfig | None = None,
    **collaborators: Any,
) -> MenuService:
    """Create a MenuService."""
    return MenuService(
        menus,
        items,
        translations,
        locales,
        config=config,
        **collaborators,
    )
