# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from dutyroster.core.config import settings
from dutyroster.models.domain import Event, Member, RoleDefinition, Session


# ── Roster Schemas ──

class RosterCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Roster name")
    team_id: Optional[str] = Field(default=None, description="Owning team")
    events: list[Event] = Field(default_factory=list, description="Scheduled events")
    roles: list[RoleDefinition] = Field(
        default_factory=list, description="Roles with column quantities"
    )
    members: list[Member] = Field(default_factory=list, description="Member pool")


class RosterResponse(BaseModel):
    id: str
    name: str
    team_id: Optional[str] = None
    events: list[dict]
    slots: list[dict]
    members: list[dict]
    assignments: list[dict]
    created_at: str
    updated_at: Optional[str] = None
    saved_at: Optional[str] = None


class GuestCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role_ids: list[str] = Field(default_factory=list)


# ── Cell Schemas ──

class CellAssignRequest(BaseModel):
    member_id: str = Field(..., min_length=1, description="Member to pin in the cell")


class CellResponse(BaseModel):
    event_id: str
    slot_id: str
    member_id: str
    manual: bool
    conflict: bool


# ── Shuffle Schemas ──

class ShuffleRequest(BaseModel):
    mode: Optional[str] = Field(
        default=None,
        pattern="^(all|empty_only)$",
        description="'all' refills every unpinned cell, 'empty_only' fills gaps",
    )


class ShuffleResponse(BaseModel):
    roster_id: str
    mode: str
    assignments_made: int
    changed: int
    unfilled: list[dict[str, str]]
    assignments: list[dict[str, Any]]


class ClearAutoResponse(BaseModel):
    roster_id: str
    removed_count: int
    assignments: list[dict[str, Any]]


class ConflictResponse(BaseModel):
    event_id: str
    slot_id: str
    member_id: str
    manual: bool
    reasons: list[str]


# ── Availability Schemas ──

class AvailabilitySetRequest(BaseModel):
    member_key: str = Field(..., min_length=1, description="User id, or member id for guests")
    date: datetime.date
    session: Session = Session.ALL_DAY
    available: bool
    reason: str = ""


class AvailabilityToggleRequest(BaseModel):
    member_key: str = Field(..., min_length=1)
    date: datetime.date
    session: Session = Session.ALL_DAY
    reason: str = ""


class AvailabilityRangeRequest(BaseModel):
    member_key: str = Field(..., min_length=1)
    start: datetime.date
    end: datetime.date
    session: Session = Session.ALL_DAY
    available: bool
    reason: str = ""

    @model_validator(mode="after")
    def check_order(self) -> "AvailabilityRangeRequest":
        if self.end < self.start:
            raise ValueError("end must not be before start")
        days = (self.end - self.start).days + 1
        if days > settings.MAX_AVAILABILITY_RANGE_DAYS:
            raise ValueError(
                f"range spans {days} days, max is {settings.MAX_AVAILABILITY_RANGE_DAYS}"
            )
        return self


class AvailabilitySyncRequest(BaseModel):
    start: Optional[datetime.date] = None
    end: Optional[datetime.date] = None

    @model_validator(mode="after")
    def check_order(self) -> "AvailabilitySyncRequest":
        if self.start and self.end and self.end < self.start:
            raise ValueError("end must not be before start")
        return self


# ── Member Schemas ──

class MemberCreateRequest(BaseModel):
    id: str = Field(..., min_length=1, description="Team member id")
    name: str = Field(..., min_length=1, max_length=255)
    user_id: Optional[str] = Field(default=None, description="Account id used for availability")
    role_ids: list[str] = Field(default_factory=list, description="Team roles held")
