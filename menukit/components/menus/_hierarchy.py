"""
Sibling ordering and parent/child structure.

Positions are 0-based and only meaningful among siblings (same menu, same
resolved parent). Items whose parent is still pending are ordered with the
root items until reconciliation attaches them.

All helpers mutate the items they are given and return the ones whose
position changed, so callers persist only what moved.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from uuid import UUID

from menukit.domain.entities import MenuItem

ROOT_KEY = "root"


def sibling_key(parent_id: UUID | None) -> str:
    return str(parent_id) if parent_id is not None else ROOT_KEY


def item_sibling_key(item: MenuItem) -> str:
    return sibling_key(item.parent_id)


def sort_siblings(items: Iterable[MenuItem]) -> list[MenuItem]:
    """Stable ordering: position, then creation time."""
    return sorted(items, key=lambda i: (i.position, i.created_at))


def clamp_index(index: int, size: int) -> int:
    if index < 0:
        return 0
    if index > size:
        return size
    return index


def _renumber(ordered: Sequence[MenuItem], skip: UUID | None = None) -> list[MenuItem]:
    changed: list[MenuItem] = []
    for idx, item in enumerate(ordered):
        if item.position != idx:
            item.position = idx
            if item.id != skip:
                changed.append(item)
    return changed


def shift_for_insert(siblings: Iterable[MenuItem], index: int) -> list[MenuItem]:
    """Make room at ``index``; returns shifted siblings, last first."""
    ordered = sort_siblings(siblings)
    changed: list[MenuItem] = []
    for idx in range(len(ordered) - 1, -1, -1):
        if idx < index:
            break
        item = ordered[idx]
        if item.position != idx + 1:
            item.position = idx + 1
            changed.append(item)
    return changed


def reposition(
    siblings: Iterable[MenuItem],
    item: MenuItem,
    index: int,
) -> tuple[int, list[MenuItem]]:
    """Move ``item`` to ``index`` among ``siblings``.

    Returns the clamped index and the other siblings whose position changed.
    ``item.position`` is updated but not included in the changed list.
    """
    ordered = [s for s in sort_siblings(siblings) if s.id != item.id]
    target = clamp_index(index, len(ordered))
    ordered.insert(target, item)
    changed = _renumber(ordered, skip=item.id)
    item.position = target
    return target, changed


def compact(siblings: Iterable[MenuItem]) -> list[MenuItem]:
    """Renumber siblings to a dense ``0..n-1`` sequence, keeping order."""
    return _renumber(sort_siblings(siblings))


def normalize_groups(items: Iterable[MenuItem], keys: Iterable[str]) -> list[MenuItem]:
    """Compact only the sibling groups named in ``keys``."""
    wanted = set(keys)
    groups: dict[str, list[MenuItem]] = defaultdict(list)
    for item in items:
        key = item_sibling_key(item)
        if key in wanted:
            groups[key].append(item)
    changed: list[MenuItem] = []
    for key in sorted(groups):
        changed.extend(compact(groups[key]))
    return changed


# --- Cycle detection ---

_WHITE, _GRAY, _BLACK = 0, 1, 2


def has_cycle(parents: Mapping[UUID, UUID | None]) -> bool:
    """White/gray/black DFS over a child -> parent map."""
    color: dict[UUID, int] = {node: _WHITE for node in parents}

    for start in parents:
        if color[start] != _WHITE:
            continue
        path: list[UUID] = []
        node: UUID | None = start
        while node is not None and node in color:
            if color[node] == _GRAY:
                return True
            if color[node] == _BLACK:
                break
            color[node] = _GRAY
            path.append(node)
            node = parents.get(node)
        for visited in path:
            color[visited] = _BLACK
    return False


def parent_map(items: Iterable[MenuItem]) -> dict[UUID, UUID | None]:
    return {item.id: item.parent_id for item in items}


# --- Tree building ---


def build_hierarchy(items: Iterable[MenuItem]) -> list[MenuItem]:
    """Attach children to parents; returns root items sorted by position.

    Items whose resolved parent is not part of ``items`` are dropped.
    """
    by_parent: dict[str, list[MenuItem]] = defaultdict(list)
    for item in items:
        item.children = []
        by_parent[item_sibling_key(item)].append(item)

    def attach(nodes: list[MenuItem]) -> list[MenuItem]:
        ordered = sort_siblings(nodes)
        for node in ordered:
            node.children = attach(by_parent.get(str(node.id), []))
        return ordered

    return attach(by_parent.get(ROOT_KEY, []))


def flatten(roots: Iterable[MenuItem]) -> list[MenuItem]:
    """Depth-first pre-order list of a hydrated tree."""
    out: list[MenuItem] = []
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        out.append(node)
        stack.extend(reversed(node.children))
    return out
