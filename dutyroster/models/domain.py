# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Session(str, Enum):
    """Sub-day bucket used to scope availability."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ALL_DAY = "all_day"


def session_from_time(event_time: Optional[datetime.time]) -> Session:
    """Bucket a time of day into a session. No time means the whole day."""
    if event_time is None:
        return Session.ALL_DAY
    if event_time.hour < 12:
        return Session.MORNING
    if event_time.hour < 17:
        return Session.AFTERNOON
    return Session.EVENING


class Event(BaseModel):
    """One scheduled occurrence (a grid row)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    date: datetime.date
    name: str = ""
    time: Optional[datetime.time] = None
    session: Optional[Session] = None
    sort_order: int = 0

    @property
    def effective_session(self) -> Session:
        return self.session or session_from_time(self.time)


class RoleSlot(BaseModel):
    """One role column, repeated across every event of a roster."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    team_role_id: Optional[str] = None
    slot_index: int = Field(default=1, ge=1)

    @property
    def base_name(self) -> str:
        """Display name without the trailing column number."""
        head, _, tail = self.name.rpartition(" ")
        if head and tail.isdigit():
            return head
        return self.name


class RegisteredMember(BaseModel):
    """A persistent team member."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["registered"] = "registered"
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    user_id: Optional[str] = None
    role_ids: frozenset[str] = frozenset()

    @property
    def availability_key(self) -> str:
        return self.user_id or self.id

    def is_eligible_for(self, team_role_id: Optional[str]) -> bool:
        """Empty role set means eligible for any slot."""
        if team_role_id is None or not self.role_ids:
            return True
        return team_role_id in self.role_ids


class GuestMember(BaseModel):
    """An ad-hoc member added to a single roster."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["guest"] = "guest"
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    role_ids: frozenset[str] = frozenset()

    @property
    def availability_key(self) -> str:
        return self.id

    def is_eligible_for(self, team_role_id: Optional[str]) -> bool:
        if team_role_id is None or not self.role_ids:
            return True
        return team_role_id in self.role_ids


Member = Annotated[Union[RegisteredMember, GuestMember], Field(discriminator="kind")]


class AvailabilityEntry(BaseModel):
    """A member's declared availability for one date/session."""

    model_config = ConfigDict(frozen=True)

    member_key: str = Field(..., min_length=1)
    date: datetime.date
    session: Session = Session.ALL_DAY
    available: bool
    reason: str = ""


class Assignment(BaseModel):
    """Contents of one filled cell."""

    model_config = ConfigDict(frozen=True)

    member_id: str = Field(..., min_length=1)
    manual: bool = False


class RoleDefinition(BaseModel):
    """A team role with the number of columns it needs on a roster."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=0)
    team_role_id: Optional[str] = None


def expand_roles_to_slots(roles: list[RoleDefinition]) -> list[RoleSlot]:
    """
    Expand role definitions into numbered grid columns.
    quantity > 1 -> "Soprano 1", "Soprano 2" with ids "<id>__1", "<id>__2";
    quantity == 1 -> the role as-is; quantity == 0 -> skipped.
    """
    slots: list[RoleSlot] = []
    for role in roles:
        team_role_id = role.team_role_id or role.id
        for i in range(1, role.quantity + 1):
            numbered = role.quantity > 1
            slots.append(
                RoleSlot(
                    id=f"{role.id}__{i}" if numbered else role.id,
                    name=f"{role.name} {i}" if numbered else role.name,
                    team_role_id=team_role_id,
                    slot_index=i,
                )
            )
    return slots
