"""
DMV gazetteer: the fixed lookup table of neighborhoods and cities a group
location string can resolve to.

Design:
  - Every entry maps a lowercase surface form to a display name, a region
    (dc, va, md) and coordinates. Aliases ("dupont") share an entry with the
    canonical form ("dupont circle").
  - Insertion order is the matching order. Multi-word forms come before the
    shorter aliases they contain ("dupont circle" before "dupont",
    "washington dc" before "washington" before "dc"), DC before Northern
    Virginia before Maryland, and the broad regional terms come last so a
    specific place always wins over a state name.
  - Matching is plain case-insensitive substring search, no word boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from community_map.models import Coordinates


@dataclass(frozen=True)
class GazetteerEntry:
    display_name: str          # "Dupont Circle"
    region: str                # dc, va, md
    latitude: float
    longitude: float

    @property
    def coordinates(self) -> Coordinates:
        return (self.latitude, self.longitude)


# Fixed anchors used when a string only names a state, or nothing we know
DC_CENTER: Coordinates = (38.9072, -77.0369)
VIRGINIA_ANCHOR: Coordinates = (38.8816, -77.0910)   # Arlington
MARYLAND_ANCHOR: Coordinates = (38.9907, -77.0261)   # Silver Spring


# ══════════════════════════════════════════════════════════════════════
# GAZETTEER DATA
# ══════════════════════════════════════════════════════════════════════

_GAZETTEER: dict[str, GazetteerEntry] = {}


def _add(surface_forms: list[str], display: str, region: str, lat: float, lon: float):
    entry = GazetteerEntry(display, region, lat, lon)
    for form in surface_forms:
        _GAZETTEER[form.lower()] = entry


# ── Washington DC neighborhoods ───────────────────────────────────────

_add(["dupont circle", "dupont"], "Dupont Circle", "dc", 38.9097, -77.0365)
_add(["adams morgan"], "Adams Morgan", "dc", 38.9220, -77.0420)
_add(["capitol hill"], "Capitol Hill", "dc", 38.8903, -76.9901)
_add(["columbia heights"], "Columbia Heights", "dc", 38.9289, -77.0353)
_add(["shaw"], "Shaw", "dc", 38.9129, -77.0218)
_add(["petworth"], "Petworth", "dc", 38.9369, -77.0249)
_add(["brookland"], "Brookland", "dc", 38.9339, -76.9956)
_add(["anacostia"], "Anacostia", "dc", 38.8622, -76.9810)
_add(["foggy bottom"], "Foggy Bottom", "dc", 38.9006, -77.0472)
_add(["georgetown"], "Georgetown", "dc", 38.9076, -77.0723)
_add(["logan circle"], "Logan Circle", "dc", 38.9095, -77.0292)
_add(["u street"], "U Street", "dc", 38.9169, -77.0281)
_add(["h street"], "H Street", "dc", 38.8998, -76.9951)
_add(["navy yard"], "Navy Yard", "dc", 38.8762, -77.0065)
_add(["downtown"], "Downtown", "dc", 38.8951, -77.0364)
_add(["chinatown"], "Chinatown", "dc", 38.8998, -77.0218)

# ── Washington DC, city-wide terms ────────────────────────────────────

_add(["washington dc", "washington", "dc"], "Washington DC", "dc", *DC_CENTER)

# ── Northern Virginia ─────────────────────────────────────────────────

_add(["arlington"], "Arlington", "va", 38.8816, -77.0910)
_add(["alexandria"], "Alexandria", "va", 38.8048, -77.0469)
_add(["fairfax"], "Fairfax", "va", 38.8462, -77.3064)
_add(["vienna"], "Vienna", "va", 38.9012, -77.2653)
_add(["reston"], "Reston", "va", 38.9687, -77.3411)
_add(["sterling"], "Sterling", "va", 39.0068, -77.4286)
_add(["annandale"], "Annandale", "va", 38.8304, -77.1963)
_add(["falls church"], "Falls Church", "va", 38.8823, -77.1711)
_add(["tysons"], "Tysons", "va", 38.9188, -77.2297)
_add(["leesburg"], "Leesburg", "va", 39.1156, -77.5636)
_add(["herndon"], "Herndon", "va", 38.9696, -77.3861)
_add(["mclean"], "McLean", "va", 38.9338, -77.1775)
_add(["springfield"], "Springfield", "va", 38.7893, -77.1872)
_add(["burke"], "Burke", "va", 38.7932, -77.2719)
_add(["woodbridge"], "Woodbridge", "va", 38.6581, -77.2497)
_add(["manassas"], "Manassas", "va", 38.7509, -77.4753)

# ── Maryland suburbs ──────────────────────────────────────────────────

_add(["bethesda"], "Bethesda", "md", 38.9807, -77.1010)
_add(["rockville"], "Rockville", "md", 39.0840, -77.1528)
_add(["silver spring"], "Silver Spring", "md", 38.9907, -77.0261)
_add(["takoma park"], "Takoma Park", "md", 38.9779, -77.0074)
_add(["college park"], "College Park", "md", 38.9897, -76.9378)
_add(["hyattsville"], "Hyattsville", "md", 38.9551, -76.9455)
_add(["gaithersburg"], "Gaithersburg", "md", 39.1434, -77.2014)
_add(["germantown"], "Germantown", "md", 39.1712, -77.2717)
_add(["wheaton"], "Wheaton", "md", 39.0370, -77.0558)
_add(["kensington"], "Kensington", "md", 39.0273, -77.0764)
_add(["chevy chase"], "Chevy Chase", "md", 38.9851, -77.0872)
_add(["potomac"], "Potomac", "md", 39.0223, -77.2086)
_add(["bowie"], "Bowie", "md", 38.9426, -76.7302)
_add(["laurel"], "Laurel", "md", 39.0993, -76.8483)
_add(["greenbelt"], "Greenbelt", "md", 38.9912, -76.8756)
_add(["riverdale"], "Riverdale", "md", 38.9584, -76.9119)

# ── Broad regional terms (last: anything specific wins first) ────────

_add(["northern virginia", "nova", "virginia"], "Northern Virginia", "va", *VIRGINIA_ANCHOR)
_add(["maryland"], "Maryland", "md", *MARYLAND_ANCHOR)


# ══════════════════════════════════════════════════════════════════════
# MATCHING
# ══════════════════════════════════════════════════════════════════════

class GazetteerMatcher:
    """
    Lookups over the DMV gazetteer.
      - exact():    the whole string is a known surface form
      - partial():  the string contains a known form, or a known form contains it
      - find_in():  first known form appearing anywhere in free text (group names)
    All lookups walk entries in insertion order, so ties resolve the same way every time.
    """

    def __init__(self, entries: Optional[dict[str, GazetteerEntry]] = None):
        self._entries = dict(entries if entries is not None else _GAZETTEER)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, place: str) -> bool:
        return place.lower().strip() in self._entries

    def items(self) -> Iterator[tuple[str, GazetteerEntry]]:
        return iter(self._entries.items())

    def get(self, place: str) -> Optional[GazetteerEntry]:
        return self._entries.get(place.lower().strip())

    def exact(self, place: str) -> Optional[tuple[str, GazetteerEntry]]:
        key = place.lower().strip()
        entry = self._entries.get(key)
        if entry is None:
            return None
        return key, entry

    def partial(self, place: str) -> Optional[tuple[str, GazetteerEntry]]:
        text = place.lower().strip()
        if not text:
            return None
        for surface, entry in self._entries.items():
            if surface in text or text in surface:
                return surface, entry
        return None

    def find_in(self, text: str) -> Optional[str]:
        """Return the first surface form contained in `text`, or None."""
        lowered = text.lower()
        for surface in self._entries:
            if surface in lowered:
                return surface
        return None

    def region_of(self, text: str) -> Optional[str]:
        surface = self.find_in(text)
        if surface is None:
            return None
        return self._entries[surface].region


# Singleton matcher instance
_matcher: Optional[GazetteerMatcher] = None


def get_matcher() -> GazetteerMatcher:
    global _matcher
    if _matcher is None:
        _matcher = GazetteerMatcher()
    return _matcher
