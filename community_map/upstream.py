"""
Planning Center Groups API client (used by the proxy only).
Authenticates with the client id / secret pair, follows pagination links,
applies the configured eligibility policy and maps each group into the
proxy's `{id, attributes}` shape.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from community_map.config import EligibilityConfig, PlanningCenterConfig, get_settings
from community_map.errors import ConfigurationMissing, SourceUnavailable
from community_map.models import GroupAttributes, RawGroup

logger = logging.getLogger(__name__)

# Alternate location-bearing fields forwarded untouched when upstream has them
_PASSTHROUGH_LOCATION_FIELDS = (
    "contact_info",
    "church_center_url_location",
    "address",
    "meeting_location",
)


def _retry_after_seconds(value: Optional[str], default: int = 5) -> int:
    """Retry-After as whole seconds; HTTP-date or garbage values fall back to the default."""
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return default


def is_eligible(attributes: dict, policy: EligibilityConfig) -> bool:
    """Archived groups never qualify; enrollment and public URL checks are policy."""
    if attributes.get("archived"):
        return False
    if policy.require_public_url and not attributes.get("public_church_center_web_url"):
        return False
    if policy.require_open_enrollment and attributes.get("enrollment") != "open":
        return False
    return True


def to_proxy_group(raw: dict) -> RawGroup:
    """Map one upstream `{id, attributes}` entry onto the fields the map consumes."""
    attributes = raw.get("attributes") or {}
    mapped = {
        "name": attributes.get("name") or "Unnamed Group",
        "description": attributes.get("description") or "",
        "location": (attributes.get("location_type_preference")
                     or attributes.get("location")
                     or "DMV Area"),
        "schedule": attributes.get("schedule") or "Contact for details",
        "contact_email": attributes.get("contact_email") or "",
        "public_url": attributes.get("public_church_center_web_url") or "",
        "memberships_count": attributes.get("memberships_count") or 0,
        "archived": bool(attributes.get("archived")),
        "updated_at": attributes.get("updated_at"),
        "group_type": attributes.get("group_type") or "",
        "enrollment": attributes.get("enrollment") or "open",
    }
    for field_name in _PASSTHROUGH_LOCATION_FIELDS:
        if attributes.get(field_name):
            mapped[field_name] = attributes[field_name]

    return RawGroup(id=raw.get("id"), attributes=GroupAttributes.model_validate(mapped))


class PlanningCenterClient:
    """
    Async client for the Planning Center Groups v2 API.
    Handles Basic auth, pagination and 429 back-off.
    """

    def __init__(
        self,
        config: Optional[PlanningCenterConfig] = None,
        eligibility: Optional[EligibilityConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.config = config or settings.planning_center
        self.eligibility = eligibility or settings.eligibility
        self._transport = transport

    def check_credentials(self) -> None:
        if not self.config.has_credentials:
            raise ConfigurationMissing(
                "Missing Planning Center API credentials. "
                f"CLIENT_ID: {bool(self.config.client_id)}, SECRET: {bool(self.config.secret)}"
            )

    async def _fetch_page(self, client: httpx.AsyncClient, url: str, params: Optional[dict]) -> dict:
        """Fetch a single page, backing off on 429."""
        for attempt in range(self.config.max_retries):
            try:
                resp = await client.get(url, params=params, timeout=self.config.request_timeout)
                resp.raise_for_status()
                data = resp.json()
                return data if isinstance(data, dict) else {}

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 429 and attempt + 1 < self.config.max_retries:
                    retry_after = _retry_after_seconds(e.response.headers.get("Retry-After"))
                    logger.warning("Planning Center rate limited, sleeping %ds", retry_after)
                    await asyncio.sleep(retry_after)
                    continue
                logger.error("Planning Center API error: HTTP %d", status)
                raise SourceUnavailable(
                    f"Planning Center API error: {status} {e.response.text[:200]}",
                    status_code=status,
                ) from e
            except httpx.RequestError as e:
                logger.error("Request error fetching Planning Center groups: %s", e)
                raise SourceUnavailable(f"Planning Center request failed: {e}") from e
            except ValueError as e:
                logger.warning("Planning Center returned non-JSON body: %s", e)
                return {}

        raise SourceUnavailable(f"Planning Center still rate limited after {self.config.max_retries} attempts",
                                status_code=429)

    async def fetch_all_raw(self) -> list[dict]:
        """
        All upstream group entries, following `links.next`.
        A page without a `data` list counts as zero groups.
        """
        self.check_credentials()
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        }
        auth = httpx.BasicAuth(self.config.client_id, self.config.secret)

        groups: list[dict] = []
        url: Optional[str] = f"{self.config.base_url.rstrip('/')}{self.config.groups_endpoint}"
        params: Optional[dict] = {"per_page": self.config.page_size}
        page_num = 0

        async with httpx.AsyncClient(auth=auth, headers=headers, transport=self._transport) as client:
            while url and page_num < self.config.max_pages:
                logger.info("Fetching Planning Center groups page %d", page_num)
                data = await self._fetch_page(client, url, params)
                page = data.get("data")
                if not isinstance(page, list):
                    break
                groups.extend(g for g in page if isinstance(g, dict))
                page_num += 1

                links = data.get("links") or {}
                url = links.get("next")
                params = None  # next links already carry the query

        logger.info("Fetched %d groups from Planning Center in %d pages", len(groups), page_num)
        return groups

    async def fetch_groups(self) -> list[RawGroup]:
        raw = await self.fetch_all_raw()
        eligible = [g for g in raw if is_eligible(g.get("attributes") or {}, self.eligibility)]
        groups = []
        for entry in eligible:
            try:
                groups.append(to_proxy_group(entry))
            except Exception as e:
                logger.warning("Failed to map Planning Center group %s: %s", entry.get("id", "unknown"), e)
        logger.info("Processed %d eligible groups (of %d)", len(groups), len(raw))
        return groups
