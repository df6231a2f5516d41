"""
Privacy fuzzing for displayed coordinates.

Each axis gets an independent uniform offset of at most 0.0036 degrees,
roughly a quarter mile at DMV latitudes. Callers jitter a coordinate exactly
once, when it is first assigned, and store the result.
"""

from __future__ import annotations

import random
from typing import Optional

from community_map.models import Coordinates

JITTER_DEGREES = 0.0036


def jitter(coord: Coordinates, rng: Optional[random.Random] = None) -> Coordinates:
    """Return `coord` moved by a random offset in [-JITTER_DEGREES, +JITTER_DEGREES] per axis."""
    source = rng if rng is not None else random
    lat, lng = coord
    return (
        lat + source.uniform(-JITTER_DEGREES, JITTER_DEGREES),
        lng + source.uniform(-JITTER_DEGREES, JITTER_DEGREES),
    )


def within_jitter(coord: Coordinates, anchor: Coordinates) -> bool:
    """True when `coord` is inside the jitter box around `anchor`."""
    # small epsilon for float addition on the box edge
    bound = JITTER_DEGREES + 1e-9
    return abs(coord[0] - anchor[0]) <= bound and abs(coord[1] - anchor[1]) <= bound
