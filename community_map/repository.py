"""
Group repository: the map's view of the groups proxy.

Fetches `GET /groups` from the proxy, validates entries with Pydantic, and
owns the one canonical list of fallback groups used whenever the proxy is
unreachable or has nothing to say.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from community_map.config import RepositoryConfig, get_settings
from community_map.errors import MalformedResponse, SourceUnavailable
from community_map.models import RawGroup

logger = logging.getLogger(__name__)


# ── Fallback fixture ──────────────────────────────────────────────────

_FALLBACK_GROUPS: tuple[dict, ...] = (
    {
        "id": "fallback-1",
        "attributes": {
            "name": "Dupont Circle Community Group",
            "description": "Weekly gathering for authentic community and spiritual growth in the heart of DC",
            "location": "Dupont Circle, Washington DC",
            "schedule": "Wednesday evenings, 7:00 PM",
            "memberships_count": 12,
            "archived": False,
            "group_type": "Community Group",
            "enrollment": "open",
        },
    },
    {
        "id": "fallback-2",
        "attributes": {
            "name": "Young Adult Professionals",
            "description": "Affinity group for young professionals navigating faith, career, and community",
            "location": "Arlington, Virginia",
            "schedule": "Tuesday evenings, 7:30 PM",
            "memberships_count": 8,
            "archived": False,
            "group_type": "Affinity Group",
            "enrollment": "open",
        },
    },
    {
        "id": "fallback-3",
        "attributes": {
            "name": "Columbia Heights Community Group",
            "description": "Diverse community group focused on justice, service, and neighborhood connection",
            "location": "Columbia Heights, Washington DC",
            "schedule": "Thursday evenings, 6:30 PM",
            "memberships_count": 15,
            "archived": False,
            "group_type": "Community Group",
            "enrollment": "open",
        },
    },
    {
        "id": "fallback-4",
        "attributes": {
            "name": "LGBTQ+ Affinity Group",
            "description": "Safe and affirming space for LGBTQ+ members and allies to explore faith together",
            "location": "Shaw, Washington DC",
            "schedule": "Second Saturday of each month, 3:00 PM",
            "memberships_count": 6,
            "archived": False,
            "group_type": "Affinity Group",
            "enrollment": "open",
        },
    },
    {
        "id": "fallback-5",
        "attributes": {
            "name": "Bethesda Community Group",
            "description": "Suburban community group welcoming families, couples, and individuals",
            "location": "Bethesda, Maryland",
            "schedule": "Sunday afternoons, 4:00 PM",
            "memberships_count": 10,
            "archived": False,
            "group_type": "Community Group",
            "enrollment": "open",
        },
    },
)


def fallback_groups() -> list[RawGroup]:
    """Fresh copies of the built-in sample groups."""
    return [RawGroup.model_validate(raw) for raw in _FALLBACK_GROUPS]


# ── Parsing ───────────────────────────────────────────────────────────

def parse_raw_groups(raw_list: list) -> list[RawGroup]:
    """
    Validate raw `{id, attributes}` dicts into RawGroup models.
    Skips invalid entries with a warning.
    """
    results = []
    for raw in raw_list:
        try:
            results.append(RawGroup.model_validate(raw))
        except Exception as e:
            gid = raw.get("id", "unknown") if isinstance(raw, dict) else "unknown"
            logger.warning("Failed to parse group %s: %s", gid, e)
    return results


# ── Client ────────────────────────────────────────────────────────────

class GroupRepository:
    """
    Async client for the groups proxy.
    Raises SourceUnavailable / MalformedResponse; never returns fallback data itself.
    """

    def __init__(
        self,
        config: Optional[RepositoryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or get_settings().repository
        self._transport = transport

    @property
    def groups_url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/groups"

    async def fetch_groups(self) -> list[RawGroup]:
        logger.info("Fetching groups from %s", self.groups_url)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(self.groups_url, timeout=self.config.request_timeout)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("HTTP %d fetching groups: %s", e.response.status_code, e.response.text[:200])
            raise SourceUnavailable(
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("Request error fetching groups: %s", e)
            raise SourceUnavailable(str(e)) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse(f"Groups response is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponse(f"Expected a JSON object, got {type(data).__name__}")
        if data.get("error"):
            raise SourceUnavailable(str(data["error"]))

        raw_list = data.get("groups")
        if not isinstance(raw_list, list):
            raise MalformedResponse("Groups response has no 'groups' list")

        groups = parse_raw_groups(raw_list)
        logger.info("Loaded %d groups from proxy (%d in payload)", len(groups), len(raw_list))
        return groups
