"""
Default item -> URL strategy.

Page targets are looked up through the page repository and rendered as the
page's localized path (falling back to any path, then to the slug). Other
targets return their stored ``url`` unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from menukit.domain.entities import Page

from .errors import MenuItemTargetInvalidError, NotFoundError, PageNotFoundError, PageSlugRequiredError
from .models import ResolveRequest
from .ports import PageRepoPort


def ensure_leading_slash(path: str) -> str:
    path = path.strip()
    if not path:
        return ""
    if path.startswith("/"):
        return path
    return "/" + path


def extract_slug(target: Mapping[str, Any]) -> str:
    raw = target.get("slug")
    return str(raw).strip() if raw is not None else ""


def extract_page_id(target: Mapping[str, Any]) -> UUID | None:
    """Parse ``page_id`` from a target; raises on malformed values."""
    raw = target.get("page_id")
    if raw is None or raw == "":
        return None
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw).strip())
    except ValueError as e:
        raise MenuItemTargetInvalidError(f"invalid page_id: {raw!r}") from e


def find_page_path(page: Page, locale_id: UUID | None) -> str:
    if locale_id is not None:
        for tr in page.translations:
            if tr.locale_id == locale_id and tr.path.strip():
                return tr.path.strip()
    for tr in page.translations:
        if tr.path.strip():
            return tr.path.strip()
    return ""


def lookup_page(repo: PageRepoPort, page_id: UUID | None, slug: str) -> Page:
    """Fetch a page by id (preferred) or slug, mapping store misses."""
    try:
        if page_id is not None:
            return repo.get_by_id(page_id)
        if slug:
            return repo.get_by_slug(slug)
    except NotFoundError as e:
        raise PageNotFoundError(page_id or slug) from e
    raise PageSlugRequiredError()


class DefaultURLResolver:
    """URL resolver backed by an optional page repository."""

    def __init__(self, page_repo: PageRepoPort | None = None) -> None:
        self._pages = page_repo

    def resolve(self, request: ResolveRequest) -> str:
        target = request.item.target
        if not target or "type" not in target:
            return ""
        target_type = str(target["type"]).strip().lower()
        if target_type == "page":
            return self._page_url(target, request.locale_id)
        url = target.get("url")
        return str(url).strip() if url is not None else ""

    def _page_url(self, target: Mapping[str, Any], locale_id: UUID | None) -> str:
        slug = extract_slug(target)
        page_id = extract_page_id(target)

        if self._pages is None:
            return ensure_leading_slash(slug)

        page = lookup_page(self._pages, page_id, slug)
        path = find_page_path(page, locale_id)
        if path:
            return ensure_leading_slash(path)
        return ensure_leading_slash(slug or page.slug)
