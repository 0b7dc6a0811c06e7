from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from menukit.adapters.clock import FixedClock
from menukit.adapters.events import InMemoryActivityEmitter, InMemoryAuditRecorder
from menukit.adapters.memory import (
    InMemoryLocaleRepo,
    InMemoryMenuItemRepo,
    InMemoryMenuItemTranslationRepo,
    InMemoryMenuRepo,
    InMemoryPageRepo,
    StaticMenuUsageResolver,
)
from menukit.components.menus import CreateMenuInput, MenuService, MenuServiceConfig
from menukit.domain.entities import Locale, Menu
from tests.helpers import ACTOR, EN_ID, FR_ID

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def rules_path() -> Path:
    return ROOT / "menu_rules.yaml"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 1, tzinfo=UTC))


@pytest.fixture
def locales() -> InMemoryLocaleRepo:
    return InMemoryLocaleRepo(
        [
            Locale(id=EN_ID, code="en", display_name="English", is_default=True),
            Locale(id=FR_ID, code="fr", display_name="Français"),
        ]
    )


@pytest.fixture
def pages() -> InMemoryPageRepo:
    return InMemoryPageRepo()


@pytest.fixture
def usage() -> StaticMenuUsageResolver:
    return StaticMenuUsageResolver()


@pytest.fixture
def activity() -> InMemoryActivityEmitter:
    return InMemoryActivityEmitter()


@pytest.fixture
def audit() -> InMemoryAuditRecorder:
    return InMemoryAuditRecorder()


@pytest.fixture
def menu_repo() -> InMemoryMenuRepo:
    return InMemoryMenuRepo()


@pytest.fixture
def translation_repo() -> InMemoryMenuItemTranslationRepo:
    return InMemoryMenuItemTranslationRepo()


@pytest.fixture
def item_repo(translation_repo: InMemoryMenuItemTranslationRepo) -> InMemoryMenuItemRepo:
    return InMemoryMenuItemRepo(translation_repo)


@pytest.fixture
def make_service(
    menu_repo: InMemoryMenuRepo,
    item_repo: InMemoryMenuItemRepo,
    translation_repo: InMemoryMenuItemTranslationRepo,
    locales: InMemoryLocaleRepo,
    pages: InMemoryPageRepo,
    usage: StaticMenuUsageResolver,
    activity: InMemoryActivityEmitter,
    audit: InMemoryAuditRecorder,
    clock: FixedClock,
) -> Callable[..., MenuService]:
    """Factory for services sharing the same in-memory stores."""

    def _make(config: MenuServiceConfig | None = None, **overrides: Any) -> MenuService:
        collaborators: dict[str, Any] = {
            "pages": pages,
            "usage_resolver": usage,
            "activity": activity,
            "audit": audit,
            "time_port": clock,
        }
        collaborators.update(overrides)
        return MenuService(
            menu_repo,
            item_repo,
            translation_repo,
            locales,
            config=config,
            **collaborators,
        )

    return _make


@pytest.fixture
def service(make_service: Callable[..., MenuService]) -> MenuService:
    return make_service()


@pytest.fixture
def forgiving_service(make_service: Callable[..., MenuService]) -> MenuService:
    return make_service(MenuServiceConfig(forgiving_bootstrap=True))


@pytest.fixture
def menu(service: MenuService) -> Menu:
    return service.create_menu(CreateMenuInput(code="primary", location="header", created_by=ACTOR))
