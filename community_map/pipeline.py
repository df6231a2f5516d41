"""
Pipeline orchestrator.
Ties together fetch -> classify + resolve -> distribute for one map load.
Called by the group feed or invoked manually via CLI.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional, Sequence

from community_map.classifier import GroupClassifier
from community_map.distributor import distribute
from community_map.errors import CommunityMapError
from community_map.gazetteer import get_matcher
from community_map.models import GroupRecord, GroupStats, GroupType, RawGroup
from community_map.repository import GroupRepository, fallback_groups
from community_map.resolver import LocationResolver

logger = logging.getLogger(__name__)

REGION_LABELS = {
    "dc": "Washington DC",
    "va": "Northern Virginia",
    "md": "Maryland",
}


def to_group_record(raw: RawGroup, classifier: GroupClassifier, resolver: LocationResolver) -> GroupRecord:
    """Classify and locate one raw group. The location may still be unresolved."""
    attrs = raw.attributes
    name = attrs.name or "Unnamed Group"
    description = attrs.description or ""
    resolved = resolver.resolve(attrs.location_candidates(), name)

    return GroupRecord(
        id=raw.id,
        name=name,
        description=description,
        group_type=classifier.classify(name, description),
        location=resolved.to_location(),
        meeting_day=attrs.schedule or "Contact for details",
        member_count=attrs.memberships_count or 0,
        is_active=not attrs.archived,
        contact_info=attrs.contact_email or "",
        public_url=attrs.public_url or attrs.public_church_center_web_url or "",
        last_updated=attrs.updated_at,
    )


def build_groups(
    raw_groups: Iterable[RawGroup],
    classifier: Optional[GroupClassifier] = None,
    rng: Optional[random.Random] = None,
) -> list[GroupRecord]:
    """
    Turn a fetched batch into map-ready groups:
      1. Drop archived groups
      2. Classify + resolve each one
      3. Distribute the ones without a location over the anchor points

    Every returned group has coordinates.
    """
    classifier = classifier or GroupClassifier()
    resolver = LocationResolver(rng=rng)

    records = [
        to_group_record(raw, classifier, resolver)
        for raw in raw_groups
        if not raw.attributes.archived
    ]
    return distribute(records, rng=rng).groups


async def get_groups(
    repository: Optional[GroupRepository] = None,
    classifier: Optional[GroupClassifier] = None,
    rng: Optional[random.Random] = None,
) -> list[GroupRecord]:
    """
    Fetch and build the groups for one map load.
    Never raises for source problems: an unreachable proxy, a malformed
    payload or an empty result all produce the fallback groups.
    """
    repository = repository or GroupRepository()
    classifier = classifier or GroupClassifier()

    try:
        raw = await repository.fetch_groups()
    except CommunityMapError as e:
        logger.warning("Failed to fetch groups, using fallback data: %s", e)
        raw = []

    groups = build_groups(raw, classifier, rng)
    if groups:
        logger.info("Built %d groups for the map", len(groups))
        return groups

    logger.warning("No active groups from source, using fallback group data")
    return build_groups(fallback_groups(), classifier, rng)


# ── Gap analysis ──────────────────────────────────────────────────────

def analyze_location_coverage(groups: Iterable[GroupRecord]) -> list[str]:
    """Regions with at least one group, in order of first appearance."""
    matcher = get_matcher()
    coverage: list[str] = []
    for group in groups:
        region = matcher.region_of(group.location.neighborhood)
        label = REGION_LABELS.get(region) if region else None
        if label and label not in coverage:
            coverage.append(label)
    return coverage


def group_stats(groups: Sequence[GroupRecord]) -> GroupStats:
    total_members = sum(g.member_count for g in groups)
    return GroupStats(
        total_groups=len(groups),
        community_groups=sum(1 for g in groups if g.group_type == GroupType.COMMUNITY),
        affinity_groups=sum(1 for g in groups if g.group_type == GroupType.AFFINITY),
        total_members=total_members,
        average_group_size=round(total_members / len(groups)) if groups else 0,
        location_coverage=analyze_location_coverage(groups),
    )


def filter_groups(groups: Iterable[GroupRecord], group_type: str = "all") -> list[GroupRecord]:
    """The map's type filter: "all", "community" or "affinity"."""
    if group_type == "all":
        return list(groups)
    wanted = GroupType(group_type)
    return [g for g in groups if g.group_type == wanted]
