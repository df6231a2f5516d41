"""Community vs. affinity classification from group name and description."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from community_map.config import get_settings
from community_map.models import GroupType

logger = logging.getLogger(__name__)

PACKAGED_KEYWORDS = Path(__file__).resolve().parent / "data" / "classifier_keywords.json"


@dataclass(frozen=True)
class KeywordSet:
    name: str
    terms: tuple[str, ...]


@dataclass(frozen=True)
class AffinityKeywords:
    """Named sets of terms that signal an identity- or interest-based group."""
    version: int
    sets: tuple[KeywordSet, ...]

    def terms(self) -> tuple[str, ...]:
        return tuple(term for keyword_set in self.sets for term in keyword_set.terms)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AffinityKeywords":
        file_path = path or PACKAGED_KEYWORDS
        with file_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        sets = tuple(
            KeywordSet(name=name, terms=tuple(term.lower() for term in terms))
            for name, terms in raw["sets"].items()
        )
        logger.debug("Loaded classifier keywords v%s from %s", raw["version"], file_path)
        return cls(version=int(raw["version"]), sets=sets)


class GroupClassifier:
    """
    Substring keyword match: any affinity term in the lowercased name or
    description makes the group an affinity group, everything else is a
    community group. No stemming, no scoring; the first hit decides.
    """

    def __init__(self, keywords: Optional[AffinityKeywords] = None):
        if keywords is None:
            configured = get_settings().classifier.keywords_path
            keywords = AffinityKeywords.load(Path(configured) if configured else None)
        self.keywords = keywords
        self._terms = keywords.terms()

    def classify(self, name: Optional[str], description: Optional[str]) -> GroupType:
        name_l = (name or "").lower()
        description_l = (description or "").lower()
        for term in self._terms:
            if term in name_l or term in description_l:
                return GroupType.AFFINITY
        return GroupType.COMMUNITY
