"""
Tests for round-robin distribution of unplaced groups.
"""

from __future__ import annotations

import random

import pytest

from community_map.distributor import DISTRIBUTION_ANCHORS, AnchorPoint, anchor_for, distribute
from community_map.fuzzer import within_jitter
from community_map.models import GroupLocation, GroupRecord, GroupType


def _unplaced(i: int) -> GroupRecord:
    return GroupRecord(
        id=f"g{i}",
        name=f"Group {i}",
        group_type=GroupType.COMMUNITY,
        location=GroupLocation(address="Contact for meeting location", neighborhood="DMV Area"),
    )


def _placed(i: int) -> GroupRecord:
    return GroupRecord(
        id=f"p{i}",
        name=f"Placed {i}",
        group_type=GroupType.AFFINITY,
        location=GroupLocation(
            address="Shaw, DC",
            neighborhood="Shaw",
            coordinates=(38.913, -77.022),
            has_specific_location=True,
        ),
    )


class TestDistribute:
    def test_twelve_anchors(self):
        assert len(DISTRIBUTION_ANCHORS) == 12
        assert DISTRIBUTION_ANCHORS[0].name == "Dupont Circle"

    def test_thirteenth_wraps_to_first_anchor(self):
        groups = [_unplaced(i) for i in range(13)]
        result = distribute(groups, rng=random.Random(0))

        names = [g.location.neighborhood for g in result.groups]
        assert names[:12] == [a.name for a in DISTRIBUTION_ANCHORS]
        assert names[12] == DISTRIBUTION_ANCHORS[0].name
        assert result.next_index == 13

    def test_all_get_coordinates_near_anchor(self):
        result = distribute([_unplaced(i) for i in range(5)], rng=random.Random(1))
        for group, anchor in zip(result.groups, DISTRIBUTION_ANCHORS):
            assert group.location.has_specific_location
            assert group.location.address == f"{anchor.name} area"
            assert within_jitter(group.coordinates, anchor.coordinates)
            assert group.coordinates != anchor.coordinates

    def test_placed_groups_pass_through(self):
        placed = _placed(0)
        result = distribute([placed, _unplaced(1), _placed(2), _unplaced(3)], rng=random.Random(2))

        assert result.groups[0] is placed
        assert result.groups[1].location.neighborhood == "Dupont Circle"
        assert result.groups[2].location.neighborhood == "Shaw"
        # counter only advances for unplaced groups
        assert result.groups[3].location.neighborhood == "Arlington"
        assert result.next_index == 2

    def test_input_order_is_preserved(self):
        groups = [_unplaced(i) for i in range(4)]
        result = distribute(groups)
        assert [g.id for g in result.groups] == ["g0", "g1", "g2", "g3"]

    def test_inputs_not_mutated(self):
        group = _unplaced(0)
        distribute([group])
        assert group.coordinates is None
        assert group.location.has_specific_location is False

    def test_explicit_start_continues_a_pass(self):
        first = distribute([_unplaced(i) for i in range(3)])
        second = distribute([_unplaced(9)], start=first.next_index)
        assert second.groups[0].location.neighborhood == DISTRIBUTION_ANCHORS[3].name

    def test_passes_do_not_share_state(self):
        distribute([_unplaced(i) for i in range(5)])
        result = distribute([_unplaced(0)])
        assert result.groups[0].location.neighborhood == "Dupont Circle"

    def test_custom_anchors(self):
        anchors = [AnchorPoint("A", (38.0, -77.0)), AnchorPoint("B", (39.0, -77.0))]
        result = distribute([_unplaced(i) for i in range(3)], anchors=anchors)
        assert [g.location.neighborhood for g in result.groups] == ["A", "B", "A"]

    def test_no_anchors(self):
        with pytest.raises(ValueError):
            distribute([_unplaced(0)], anchors=[])

    def test_empty_input(self):
        result = distribute([])
        assert result.groups == []
        assert result.next_index == 0


class TestAnchorFor:
    def test_modulo(self):
        assert anchor_for(0) == anchor_for(12) == anchor_for(24)
        assert anchor_for(11).name == "Takoma Park"
