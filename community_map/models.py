"""
Pydantic models used across the pipeline for validation and serialization.
These are pure data objects; no HTTP or map coupling.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


Coordinates = tuple[float, float]  # (lat, lng)


# ── Enums ──────────────────────────────────────────────────────────────

class GroupType(str, Enum):
    COMMUNITY = "community"
    AFFINITY = "affinity"


# ── Raw group models (proxy wire format) ──────────────────────────────

class GroupAttributes(BaseModel):
    """Attribute bag of a group as forwarded by the proxy. Everything is optional."""
    name: Optional[str] = None
    description: Optional[str] = None
    # Location-bearing fields, in the order the resolver consults them
    location_type_preference: Optional[str] = None
    location: Optional[str] = None
    contact_info: Optional[str] = None
    church_center_url_location: Optional[str] = None
    address: Optional[str] = None
    meeting_location: Optional[str] = None

    schedule: Optional[str] = None
    contact_email: Optional[str] = None
    public_url: Optional[str] = None
    public_church_center_web_url: Optional[str] = None
    memberships_count: Optional[int] = Field(None, ge=0)
    archived: Optional[bool] = False
    updated_at: Optional[str] = None
    group_type: Optional[str] = None
    enrollment: Optional[str] = None

    model_config = {"extra": "allow"}

    @field_validator("archived", mode="before")
    @classmethod
    def null_archived_is_active(cls, v):
        return False if v is None else v

    def location_candidates(self) -> list[Optional[str]]:
        """Location-bearing fields, explicit fields first, contact info after."""
        return [
            self.location_type_preference,
            self.location,
            self.contact_info,
            self.church_center_url_location,
            self.address,
            self.meeting_location,
        ]


class RawGroup(BaseModel):
    """One `{id, attributes}` entry from GET /groups."""
    id: str
    attributes: GroupAttributes = Field(default_factory=GroupAttributes)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        """Planning Center ids are strings, hand-written fixtures sometimes use ints."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("attributes", mode="before")
    @classmethod
    def null_attributes(cls, v):
        return {} if v is None else v


class GroupsResponse(BaseModel):
    groups: list[RawGroup]
    last_updated: str = Field(..., alias="lastUpdated")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


# ── Resolved group models (what the map renders) ──────────────────────

class GroupLocation(BaseModel):
    address: str
    neighborhood: str
    coordinates: Optional[Coordinates] = None
    has_specific_location: bool = Field(False, alias="hasSpecificLocation")

    model_config = {"populate_by_name": True}


class GroupRecord(BaseModel):
    """A fully classified, located group ready for the presentation layer."""
    id: str
    name: str
    description: str = ""
    group_type: GroupType = Field(..., alias="groupType")
    location: GroupLocation
    meeting_day: str = Field("Contact for details", alias="meetingDay")
    member_count: int = Field(0, ge=0, alias="memberCount")
    is_active: bool = Field(True, alias="isActive")
    contact_info: str = Field("", alias="contactInfo")
    public_url: str = Field("", alias="publicUrl")
    last_updated: Optional[str] = Field(None, alias="lastUpdated")

    model_config = {"populate_by_name": True}

    @property
    def coordinates(self) -> Optional[Coordinates]:
        return self.location.coordinates


class GroupStats(BaseModel):
    total_groups: int = Field(0, alias="totalGroups")
    community_groups: int = Field(0, alias="communityGroups")
    affinity_groups: int = Field(0, alias="affinityGroups")
    total_members: int = Field(0, alias="totalMembers")
    average_group_size: int = Field(0, alias="averageGroupSize")
    location_coverage: list[str] = Field(default_factory=list, alias="locationCoverage")

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    status: str = "ok"
    credentials_configured: bool = False
