"""
Failure taxonomy for the groups pipeline.

Every error here is recovered at the boundary closest to where it happens:
the proxy turns them into HTTP 500 bodies, the map pipeline swaps in the
fallback groups. An unplaceable location is not an error at all.
"""

from __future__ import annotations


class CommunityMapError(Exception):
    """Base class for all community_map errors."""


class SourceUnavailable(CommunityMapError):
    """Network failure, timeout, non-2xx status or an error body from a groups source."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(CommunityMapError):
    """The source answered, but not with the JSON shape we expect."""


class ConfigurationMissing(CommunityMapError):
    """Required Planning Center credentials are absent. Only raised inside the proxy."""
