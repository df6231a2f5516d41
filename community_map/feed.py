"""
Refresh coordination for the displayed group set.

A refresh builds a complete new list and then swaps it in whole; nothing is
ever updated in place. Each refresh takes a sequence token when it starts,
and a finished refresh is only applied if no later-started refresh has
already been applied, so an abandoned slow fetch can't overwrite newer data.
"""

from __future__ import annotations

import itertools
import logging
import random
from typing import Optional

from community_map.classifier import GroupClassifier
from community_map.models import GroupRecord
from community_map.pipeline import get_groups
from community_map.repository import GroupRepository

logger = logging.getLogger(__name__)


class GroupFeed:
    """Holds the current snapshot of map groups and refreshes it on demand."""

    def __init__(
        self,
        repository: Optional[GroupRepository] = None,
        classifier: Optional[GroupClassifier] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repository = repository or GroupRepository()
        self.classifier = classifier or GroupClassifier()
        self.rng = rng
        self._sequence = itertools.count(1)
        self._applied_token = 0
        self._groups: tuple[GroupRecord, ...] = ()

    @property
    def groups(self) -> tuple[GroupRecord, ...]:
        return self._groups

    @property
    def applied_token(self) -> int:
        return self._applied_token

    async def refresh(self) -> bool:
        """
        Rebuild the group list. Returns True if the result was applied,
        False if a later refresh finished first and this one was discarded.
        """
        token = next(self._sequence)
        logger.info("Refresh %d started", token)

        groups = await get_groups(self.repository, self.classifier, self.rng)

        if token < self._applied_token:
            logger.info("Refresh %d discarded, refresh %d already applied", token, self._applied_token)
            return False

        self._groups = tuple(groups)
        self._applied_token = token
        logger.info("Refresh %d applied: %d groups", token, len(groups))
        return True
