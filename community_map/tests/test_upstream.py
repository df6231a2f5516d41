"""
Tests for the Planning Center client used by the proxy.
HTTP is served by httpx.MockTransport; no network required.
"""

from __future__ import annotations

import base64

import httpx
import pytest

from community_map.config import EligibilityConfig, PlanningCenterConfig
from community_map.errors import ConfigurationMissing, SourceUnavailable
from community_map import upstream
from community_map.upstream import PlanningCenterClient, _retry_after_seconds, is_eligible, to_proxy_group

CONFIG = PlanningCenterConfig(
    client_id="app-id",
    secret="app-secret",
    base_url="https://pco.test",
    page_size=2,
    max_pages=5,
    request_timeout=5,
    max_retries=2,
)
STRICT = EligibilityConfig(require_open_enrollment=True, require_public_url=True)
ARCHIVED_ONLY = EligibilityConfig(require_open_enrollment=False, require_public_url=False)


def _group(gid: str, **attributes) -> dict:
    base = {
        "name": f"Group {gid}",
        "archived": False,
        "enrollment": "open",
        "public_church_center_web_url": f"https://church.test/groups/{gid}",
    }
    base.update(attributes)
    return {"id": gid, "type": "Group", "attributes": base}


def _client(handler, config=CONFIG, eligibility=STRICT) -> PlanningCenterClient:
    return PlanningCenterClient(config, eligibility, transport=httpx.MockTransport(handler))


class TestEligibility:
    def test_archived_never_eligible(self):
        assert not is_eligible({"archived": True}, ARCHIVED_ONLY)

    def test_strict_policy(self):
        attrs = _group("1")["attributes"]
        assert is_eligible(attrs, STRICT)
        assert not is_eligible({**attrs, "enrollment": "closed"}, STRICT)
        assert not is_eligible({**attrs, "public_church_center_web_url": None}, STRICT)

    def test_archived_only_policy(self):
        assert is_eligible({"enrollment": "closed"}, ARCHIVED_ONLY)


class TestToProxyGroup:
    def test_defaults(self):
        group = to_proxy_group({"id": "5", "attributes": {}})
        attrs = group.attributes
        assert group.id == "5"
        assert attrs.name == "Unnamed Group"
        assert attrs.location == "DMV Area"
        assert attrs.schedule == "Contact for details"
        assert attrs.memberships_count == 0
        assert attrs.enrollment == "open"

    def test_location_from_preference(self):
        group = to_proxy_group(_group("1", location_type_preference="Capitol Hill, DC"))
        assert group.attributes.location == "Capitol Hill, DC"
        assert group.attributes.public_url == "https://church.test/groups/1"

    def test_alternate_location_fields_forwarded(self):
        group = to_proxy_group(_group("1", meeting_location="Navy Yard"))
        assert group.attributes.meeting_location == "Navy Yard"
        assert group.attributes.address is None


class TestFetchGroups:
    @pytest.mark.asyncio
    async def test_basic_auth_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["agent"] = request.headers["User-Agent"]
            seen["path"] = request.url.path
            seen["per_page"] = request.url.params.get("per_page")
            return httpx.Response(200, json={"data": [_group("1")]})

        groups = await _client(handler).fetch_groups()
        expected = base64.b64encode(b"app-id:app-secret").decode()
        assert seen["auth"] == f"Basic {expected}"
        assert seen["agent"] == "Table Church Community Map"
        assert seen["path"] == "/groups/v2/groups"
        assert seen["per_page"] == "2"
        assert [g.id for g in groups] == ["1"]

    @pytest.mark.asyncio
    async def test_follows_next_links(self):
        def handler(request):
            if request.url.params.get("offset") == "2":
                return httpx.Response(200, json={"data": [_group("3")], "links": {}})
            return httpx.Response(200, json={
                "data": [_group("1"), _group("2")],
                "links": {"next": "https://pco.test/groups/v2/groups?per_page=2&offset=2"},
            })

        groups = await _client(handler).fetch_groups()
        assert [g.id for g in groups] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_max_pages_cap(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(200, json={
                "data": [_group(str(len(calls)))],
                "links": {"next": f"https://pco.test/groups/v2/groups?offset={len(calls)}"},
            })

        config = PlanningCenterConfig(client_id="a", secret="b", base_url="https://pco.test", max_pages=3)
        groups = await _client(handler, config=config).fetch_groups()
        assert len(calls) == 3
        assert len(groups) == 3

    @pytest.mark.asyncio
    async def test_eligibility_applied(self):
        def handler(request):
            return httpx.Response(200, json={"data": [
                _group("open"),
                _group("closed", enrollment="closed"),
                _group("archived", archived=True),
                _group("private", public_church_center_web_url=None),
            ]})

        strict = await _client(handler).fetch_groups()
        relaxed = await _client(handler, eligibility=ARCHIVED_ONLY).fetch_groups()
        assert [g.id for g in strict] == ["open"]
        assert [g.id for g in relaxed] == ["open", "closed", "private"]

    @pytest.mark.asyncio
    async def test_missing_data_is_zero_groups(self):
        def handler(request):
            return httpx.Response(200, json={"meta": {}})

        assert await _client(handler).fetch_groups() == []

    @pytest.mark.asyncio
    async def test_upstream_error(self):
        def handler(request):
            return httpx.Response(401, json={"errors": [{"title": "Unauthorized"}]})

        with pytest.raises(SourceUnavailable) as exc_info:
            await _client(handler).fetch_groups()
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_rate_limit_retry(self):
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                return httpx.Response(429, headers={"Retry-After": "0"})
            return httpx.Response(200, json={"data": [_group("1")]})

        groups = await _client(handler).fetch_groups()
        assert len(calls) == 2
        assert len(groups) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self):
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "0"})

        with pytest.raises(SourceUnavailable):
            await _client(handler).fetch_groups()

    @pytest.mark.asyncio
    async def test_rate_limit_with_http_date(self, monkeypatch):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr(upstream.asyncio, "sleep", fake_sleep)
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                return httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"})
            return httpx.Response(200, json={"data": [_group("1")]})

        groups = await _client(handler).fetch_groups()
        assert slept == [5]
        assert [g.id for g in groups] == ["1"]

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        def handler(request):
            raise AssertionError("should not be called")

        config = PlanningCenterConfig(client_id="", secret="s", base_url="https://pco.test")
        with pytest.raises(ConfigurationMissing) as exc_info:
            await _client(handler, config=config).fetch_groups()
        assert "CLIENT_ID: False" in str(exc_info.value)
        assert "SECRET: True" in str(exc_info.value)


class TestRetryAfter:
    def test_seconds(self):
        assert _retry_after_seconds("12") == 12

    def test_missing_uses_default(self):
        assert _retry_after_seconds(None) == 5

    def test_http_date_uses_default(self):
        assert _retry_after_seconds("Wed, 21 Oct 2026 07:28:00 GMT") == 5

    def test_negative_clamped(self):
        assert _retry_after_seconds("-3") == 0
