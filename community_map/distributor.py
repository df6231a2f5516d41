"""
Geographic distribution for groups without a usable location.

Unplaced groups are dealt out round-robin over a fixed list of anchor points
across DC, Northern Virginia and Maryland, so the map stays populated without
pretending any single spot is where the group meets. The round-robin counter
is explicit: a pass starts at `start` and reports `next_index`, so two passes
never share hidden state.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from community_map.fuzzer import jitter
from community_map.models import Coordinates, GroupLocation, GroupRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnchorPoint:
    name: str
    coordinates: Coordinates


DISTRIBUTION_ANCHORS: tuple[AnchorPoint, ...] = (
    AnchorPoint("Dupont Circle", (38.9097, -77.0365)),
    AnchorPoint("Arlington", (38.8816, -77.0910)),
    AnchorPoint("Columbia Heights", (38.9289, -77.0353)),
    AnchorPoint("Bethesda", (38.9807, -77.1010)),
    AnchorPoint("Alexandria", (38.8048, -77.0469)),
    AnchorPoint("Silver Spring", (38.9907, -77.0261)),
    AnchorPoint("Capitol Hill", (38.8903, -76.9901)),
    AnchorPoint("Fairfax", (38.8462, -77.3064)),
    AnchorPoint("Georgetown", (38.9076, -77.0723)),
    AnchorPoint("Adams Morgan", (38.9220, -77.0420)),
    AnchorPoint("Rockville", (39.0840, -77.1528)),
    AnchorPoint("Takoma Park", (38.9779, -77.0074)),
)


@dataclass(frozen=True)
class DistributionResult:
    groups: list[GroupRecord]
    # Counter value to hand to the next pass, if one continues this one
    next_index: int


def anchor_for(index: int, anchors: Sequence[AnchorPoint] = DISTRIBUTION_ANCHORS) -> AnchorPoint:
    return anchors[index % len(anchors)]


def distribute(
    groups: Sequence[GroupRecord],
    anchors: Sequence[AnchorPoint] = DISTRIBUTION_ANCHORS,
    start: int = 0,
    rng: Optional[random.Random] = None,
) -> DistributionResult:
    """
    Give every group lacking a specific location the next anchor, in input order.
    Groups that already have one pass through untouched.
    """
    if not anchors:
        raise ValueError("distribute() needs at least one anchor point")

    index = start
    placed: list[GroupRecord] = []
    assigned = 0

    for group in groups:
        if group.location.has_specific_location and group.coordinates is not None:
            placed.append(group)
            continue

        anchor = anchor_for(index, anchors)
        index += 1
        assigned += 1
        logger.debug("Assigning %r to %s", group.name, anchor.name)

        placed.append(group.model_copy(update={
            "location": GroupLocation(
                address=f"{anchor.name} area",
                neighborhood=anchor.name,
                coordinates=jitter(anchor.coordinates, rng),
                has_specific_location=True,
            ),
        }))

    if assigned:
        logger.info("Distributed %d of %d groups across %d anchor points",
                    assigned, len(placed), len(anchors))
    return DistributionResult(groups=placed, next_index=index)
