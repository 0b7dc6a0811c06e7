"""
Menus component - menu hierarchy management and navigation resolution.
"""

from ._impl import (
    APPEND_POSITION,
    DEFAULT_CONFIG,
    MenuService,
    MenuServiceConfig,
    create_menu_service,
)
from ._paths import (
    canonical_menu_code,
    humanize_path_segment,
    parse_menu_item_path,
    parse_menu_item_path_for_menu,
    sanitize_menu_item_segment,
)
from ._seed import MenuPaths, seed_menu
from .component import (
    build_service,
    run,
    run_add_item,
    run_add_translation,
    run_create_menu,
    run_delete_item,
    run_delete_menu,
    run_reconcile,
    run_reorder,
    run_resolve_navigation,
    run_update_item,
    run_upsert_item,
    run_upsert_menu,
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
    DeleteOutput,
    ItemOrder,
    MenuErrorInfo,
    MenuItemListOutput,
    MenuItemOutput,
    MenuItemPath,
    MenuItemTranslationInput,
    MenuOutput,
    NavigationNode,
    NavigationOutput,
    ReconcileMenuInput,
    ReconcileOutput,
    ReconcileResult,
    ResolveNavigationInput,
    ResolveRequest,
    SeedMenuOptions,
    TranslationOutput,
    UpdateMenuItemByPathInput,
    UpdateMenuItemInput,
    UpsertMenuInput,
    UpsertMenuItemByPathInput,
    UpsertMenuItemInput,
)
from .ports import (
    ActivityEmitterPort,
    AuditRecorderPort,
    CacheInvalidatorPort,
    LocaleRepoPort,
    MenuContentsResetterPort,
    MenuItemRepoPort,
    MenuItemTranslationRepoPort,
    MenuRepoPort,
    MenuUsageResolverPort,
    PageRepoPort,
    TimePort,
    URLResolverPort,
)

__all__ = [
    # Entry points
    "run",
    "run_add_item",
    "run_add_translation",
    "run_create_menu",
    "run_delete_item",
    "run_delete_menu",
    "run_reconcile",
    "run_reorder",
    "run_resolve_navigation",
    "run_update_item",
    "run_upsert_item",
    "run_upsert_menu",
    "build_service",
    # Input models
    "AddMenuItemInput",
    "AddMenuItemTranslationInput",
    "BulkReorderMenuItemsInput",
    "CreateMenuInput",
    "DeleteMenuItemInput",
    "DeleteMenuRequest",
    "ItemOrder",
    "MenuItemTranslationInput",
    "ReconcileMenuInput",
    "ResolveNavigationInput",
    "SeedMenuOptions",
    "UpdateMenuItemByPathInput",
    "UpdateMenuItemInput",
    "UpsertMenuInput",
    "UpsertMenuItemByPathInput",
    "UpsertMenuItemInput",
    # Output models
    "ActivityEvent",
    "AuditEvent",
    "DeleteOutput",
    "MenuErrorInfo",
    "MenuItemListOutput",
    "MenuItemOutput",
    "MenuItemPath",
    "MenuOutput",
    "NavigationNode",
    "NavigationOutput",
    "ReconcileOutput",
    "ReconcileResult",
    "ResolveRequest",
    "TranslationOutput",
    # Ports
    "ActivityEmitterPort",
    "AuditRecorderPort",
    "CacheInvalidatorPort",
    "LocaleRepoPort",
    "MenuContentsResetterPort",
    "MenuItemRepoPort",
    "MenuItemTranslationRepoPort",
    "MenuRepoPort",
    "MenuUsageResolverPort",
    "PageRepoPort",
    "TimePort",
    "URLResolverPort",
    # _impl re-exports
    "APPEND_POSITION",
    "DEFAULT_CONFIG",
    "MenuService",
    "MenuServiceConfig",
    "create_menu_service",
    # Path addressing
    "MenuPaths",
    "canonical_menu_code",
    "humanize_path_segment",
    "parse_menu_item_path",
    "parse_menu_item_path_for_menu",
    "sanitize_menu_item_segment",
    "seed_menu",
]
