"""
Tests for deferred parent reconciliation planning.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from menukit.components.menus._reconcile import ItemIndex, count_pending, plan_reconciliation
from menukit.components.menus.errors import HierarchyCycleError, ParentUnsupportedError
from menukit.domain.entities import MenuItem, PendingParent, ResolvedParent, RootParent

MENU_ID = uuid4()


def _item(**kwargs) -> MenuItem:
    return MenuItem(menu_id=MENU_ID, **kwargs)


class TestItemIndex:
    def test_resolution_order(self) -> None:
        by_code = _item(external_code="team", canonical_key="code:team")
        by_key = _item(canonical_key="group:Docs:root", type="group")
        index = ItemIndex.build([by_code, by_key])

        assert index.resolve(str(by_code.id)) is by_code
        assert index.resolve(" TEAM ") is by_code
        assert index.resolve("group:Docs:root") is by_key
        assert index.resolve("missing") is None
        assert index.resolve("") is None

    def test_unknown_uuid_is_not_resolved(self) -> None:
        index = ItemIndex.build([_item()])
        assert index.resolve(str(uuid4())) is None


class TestPlanReconciliation:
    def test_links_pending_child_and_compacts(self) -> None:
        root_a = _item(position=0)
        child = _item(position=1, parent=PendingParent(ref="team"))
        root_b = _item(position=2)
        team = _item(position=3, external_code="team")
        items = [root_a, child, root_b, team]

        plan = plan_reconciliation(items)

        assert plan.resolved == 1
        assert plan.remaining == 0
        assert plan.linked == [child]
        assert child.parent == ResolvedParent(id=team.id)
        assert child.position == 0
        assert [root_a.position, root_b.position, team.position] == [0, 1, 2]
        assert {i.id for i in plan.moved} == {child.id, root_b.id, team.id}

    def test_nothing_to_resolve(self) -> None:
        stranded = _item(parent=PendingParent(ref="ghost"))
        plan = plan_reconciliation([_item(), stranded])
        assert plan.resolved == 0
        assert plan.remaining == 1
        assert plan.linked == []
        assert stranded.is_pending

    def test_self_reference_rejected(self) -> None:
        item = _item(external_code="loop")
        item.parent = PendingParent(ref="loop")
        with pytest.raises(HierarchyCycleError):
            plan_reconciliation([item])

    def test_separator_parent_rejected(self) -> None:
        sep = _item(type="separator", external_code="sep")
        child = _item(parent=PendingParent(ref="sep"))
        with pytest.raises(ParentUnsupportedError):
            plan_reconciliation([sep, child])

    def test_cycle_through_resolved_links_rejected(self) -> None:
        a = _item(external_code="a")
        b = _item(external_code="b", parent=ResolvedParent(id=a.id))
        a.parent = PendingParent(ref="b")
        with pytest.raises(HierarchyCycleError):
            plan_reconciliation([a, b])

    def test_count_pending(self) -> None:
        items = [_item(parent=PendingParent(ref="x")), _item(parent=RootParent()), _item()]
        assert count_pending(items) == 1
