"""
Location resolution: free-text group location fields -> fuzzed DMV coordinates.

Strategy:
  1. Take the first candidate field that actually says something (not empty,
     not "DMV Area", not "contact for location", not "varies ...").
  2. Failing that, look for a known place name inside the group's own name.
  3. Geocode the chosen string against the gazetteer:
       exact match -> substring match (either direction) -> state keyword
       (Virginia -> Arlington, Maryland -> Silver Spring) -> DC center.
  4. Jitter the result once for privacy.

A record with nothing usable comes back unresolved (no coordinates); the
distributor places those.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from community_map.fuzzer import jitter
from community_map.gazetteer import (
    DC_CENTER,
    MARYLAND_ANCHOR,
    VIRGINIA_ANCHOR,
    GazetteerMatcher,
    get_matcher,
)
from community_map.models import Coordinates, GroupLocation

logger = logging.getLogger(__name__)

DEFAULT_NEIGHBORHOOD = "DMV Area"
UNRESOLVED_ADDRESS = "Contact for meeting location"

# Exact (lowercased) values that carry no location information
_NO_INFO_VALUES = frozenset({"", "dmv area", "contact for location"})
_NO_INFO_FRAGMENTS = ("varies",)


class MatchKind(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    STATE = "state"
    DEFAULT = "default"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ResolvedLocation:
    address: str
    neighborhood: str
    coordinates: Optional[Coordinates]
    has_specific_location: bool
    match: MatchKind
    # Unjittered point the coordinates were drawn around
    anchor: Optional[Coordinates] = None
    # Gazetteer surface form that matched, if any
    place: Optional[str] = None

    def to_location(self) -> GroupLocation:
        return GroupLocation(
            address=self.address,
            neighborhood=self.neighborhood,
            coordinates=self.coordinates,
            has_specific_location=self.has_specific_location,
        )


def normalize_place(text: str) -> str:
    """Lowercase, strip, collapse whitespace."""
    return re.sub(r"\s+", " ", text.strip().lower())


def is_no_info(text: Optional[str]) -> bool:
    """True for empty strings and the placeholders groups use instead of a location."""
    if text is None:
        return True
    normalized = normalize_place(text)
    if normalized in _NO_INFO_VALUES:
        return True
    return any(fragment in normalized for fragment in _NO_INFO_FRAGMENTS)


def extract_neighborhood(place: str) -> str:
    """Text before the first comma, e.g. "Dupont Circle, DC" -> "Dupont Circle"."""
    head = place.split(",", 1)[0].strip()
    return head or DEFAULT_NEIGHBORHOOD


class LocationResolver:
    """Turns the location fields of one group into a `ResolvedLocation`."""

    def __init__(
        self,
        matcher: Optional[GazetteerMatcher] = None,
        rng: Optional[random.Random] = None,
    ):
        self.matcher = matcher or get_matcher()
        self.rng = rng

    def choose_place(self, candidates: Sequence[Optional[str]], fallback_name: str = "") -> Optional[str]:
        """First informative candidate, else a place keyword found in the group name."""
        for candidate in candidates:
            if not is_no_info(candidate):
                return candidate.strip()
        return self.extract_from_name(fallback_name)

    def extract_from_name(self, name: Optional[str]) -> Optional[str]:
        """Many groups carry their neighborhood in the title ("Arlington Young Professionals")."""
        if not name:
            return None
        keyword = self.matcher.find_in(name)
        if keyword is not None:
            logger.debug("Found location %r in group name %r", keyword, name)
        return keyword

    def geocode(self, place: str) -> tuple[MatchKind, Coordinates, Optional[str]]:
        """Unjittered gazetteer lookup. Always returns a point; DC center is the last resort."""
        location = normalize_place(place)

        hit = self.matcher.exact(location)
        if hit is not None:
            surface, entry = hit
            return MatchKind.EXACT, entry.coordinates, surface

        hit = self.matcher.partial(location)
        if hit is not None:
            surface, entry = hit
            return MatchKind.PARTIAL, entry.coordinates, surface

        if "virginia" in location or "va" in location:
            return MatchKind.STATE, VIRGINIA_ANCHOR, None
        if "maryland" in location or "md" in location:
            return MatchKind.STATE, MARYLAND_ANCHOR, None

        return MatchKind.DEFAULT, DC_CENTER, None

    def resolve(self, candidates: Sequence[Optional[str]], fallback_name: str = "") -> ResolvedLocation:
        place = self.choose_place(candidates, fallback_name)

        if place is None or is_no_info(place):
            logger.debug("No specific location for group %r", fallback_name)
            return ResolvedLocation(
                address=UNRESOLVED_ADDRESS,
                neighborhood=DEFAULT_NEIGHBORHOOD,
                coordinates=None,
                has_specific_location=False,
                match=MatchKind.UNRESOLVED,
            )

        match, anchor, surface = self.geocode(place)
        logger.debug("Geocoded %r via %s match (%s) -> %s", place, match.value, surface, anchor)

        return ResolvedLocation(
            address=place,
            neighborhood=extract_neighborhood(place),
            coordinates=jitter(anchor, self.rng),
            has_specific_location=True,
            match=match,
            anchor=anchor,
            place=surface,
        )


def resolve(
    candidates: Sequence[Optional[str]],
    fallback_name: str = "",
    rng: Optional[random.Random] = None,
) -> ResolvedLocation:
    """Resolve with the shared gazetteer matcher."""
    return LocationResolver(rng=rng).resolve(candidates, fallback_name)
