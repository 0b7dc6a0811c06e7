"""
Deferred parent resolution ("forgiving bootstrap").

Items may be stored with a pending parent reference (an external code,
canonical key or raw id) before the parent exists. A reconciliation pass
resolves every pending reference it can, validates the resulting graph as a
whole and renumbers only the sibling groups that gained or lost members.

Key behaviors:
- References resolve by id first, then external code, then canonical key
- Self-parenting and separator parents reject the whole pass
- Full-graph cycle check after all links are applied
- Nothing is written by the planner; the caller persists the plan
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from menukit.domain.entities import MenuItem, ResolvedParent

from ._hierarchy import has_cycle, item_sibling_key, normalize_groups, parent_map
from ._identity import normalize_external_code
from .errors import HierarchyCycleError, ParentUnsupportedError


@dataclass
class ReconcilePlan:
    """Links to apply and positions to renumber."""

    resolved: int = 0
    remaining: int = 0
    linked: list[MenuItem] = field(default_factory=list)
    moved: list[MenuItem] = field(default_factory=list)


@dataclass
class ItemIndex:
    """Lookup tables used to resolve parent references."""

    by_id: dict[UUID, MenuItem]
    by_canonical: dict[str, MenuItem]
    by_external: dict[str, MenuItem]

    @classmethod
    def build(cls, items: Sequence[MenuItem]) -> ItemIndex:
        by_id: dict[UUID, MenuItem] = {}
        by_canonical: dict[str, MenuItem] = {}
        by_external: dict[str, MenuItem] = {}
        for item in items:
            by_id[item.id] = item
            if item.canonical_key:
                by_canonical[item.canonical_key] = item
            code = normalize_external_code(item.external_code)
            if code:
                by_external[code] = item
        return cls(by_id=by_id, by_canonical=by_canonical, by_external=by_external)

    def resolve(self, ref: str) -> MenuItem | None:
        ref = ref.strip()
        if not ref:
            return None
        try:
            return self.by_id.get(UUID(ref))
        except ValueError:
            pass
        code = normalize_external_code(ref)
        if code in self.by_external:
            return self.by_external[code]
        return self.by_canonical.get(ref)


def count_pending(items: Sequence[MenuItem]) -> int:
    return sum(1 for item in items if item.is_pending)


def plan_reconciliation(items: Sequence[MenuItem]) -> ReconcilePlan:
    """Resolve pending parents in ``items`` (mutated in place)."""
    index = ItemIndex.build(items)
    linked: list[MenuItem] = []
    affected: set[str] = set()

    for item in items:
        ref = item.parent_ref
        if ref is None:
            continue
        parent = index.resolve(ref)
        if parent is None:
            continue
        if parent.id == item.id:
            raise HierarchyCycleError(f"menu item {item.id} references itself as parent")
        if parent.type == "separator":
            raise ParentUnsupportedError(
                f"menu item {item.id} cannot be nested under separator {parent.id}"
            )
        affected.add(item_sibling_key(item))
        item.parent = ResolvedParent(id=parent.id)
        affected.add(item_sibling_key(item))
        linked.append(item)

    remaining = count_pending(items)
    if not linked:
        return ReconcilePlan(resolved=0, remaining=remaining)

    if has_cycle(parent_map(items)):
        raise HierarchyCycleError("resolved parent links form a cycle")

    moved = normalize_groups(items, affected)
    return ReconcilePlan(
        resolved=len(linked),
        remaining=remaining,
        linked=linked,
        moved=moved,
    )
