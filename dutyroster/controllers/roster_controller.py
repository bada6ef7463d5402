# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Roster structure endpoints — rosters, events, slots, members.
Thin HTTP layer — delegates ALL logic to RosterService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dutyroster.core.dependencies import get_history_repo, get_roster_service
from dutyroster.models.domain import Event, RegisteredMember, RoleDefinition
from dutyroster.repositories.history_repository import HistoryRepository
from dutyroster.schemas.roster import (
    GuestCreateRequest,
    MemberCreateRequest,
    RosterCreateRequest,
    RosterResponse,
)
from dutyroster.services.roster_service import RosterService

router = APIRouter(prefix="/api/v1", tags=["Rosters"])


@router.post("/rosters", status_code=201, response_model=RosterResponse)
def create_roster(
    payload: RosterCreateRequest,
    service: RosterService = Depends(get_roster_service),
):
    """Create a roster grid from events, role definitions and members."""
    try:
        roster = service.create_roster(
            name=payload.name,
            team_id=payload.team_id,
            events=payload.events,
            roles=payload.roles,
            members=payload.members,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return service.to_view(roster)


@router.get("/rosters")
def list_rosters(
    service: RosterService = Depends(get_roster_service),
):
    """List rosters with summary counts."""
    return [
        {
            "id": r["id"],
            "name": r["name"],
            "team_id": r["team_id"],
            "events_count": len(r["events"]),
            "slots_count": len(r["slots"]),
            "members_count": len(r["members"]),
            "filled_cells": len(r["matrix"]),
        }
        for r in service.list_rosters()
    ]


@router.get("/rosters/{roster_id}", response_model=RosterResponse)
def get_roster(
    roster_id: str,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.to_view(service.get_roster(roster_id))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/rosters/{roster_id}")
def delete_roster(
    roster_id: str,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.delete_roster(roster_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Events ──

@router.post("/rosters/{roster_id}/events", status_code=201, response_model=RosterResponse)
def add_event(
    roster_id: str,
    payload: Event,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.to_view(service.add_event(roster_id, payload))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/rosters/{roster_id}/events/{event_id}", response_model=RosterResponse)
def remove_event(
    roster_id: str,
    event_id: str,
    service: RosterService = Depends(get_roster_service),
):
    """Remove an event row together with its cells."""
    try:
        return service.to_view(service.remove_event(roster_id, event_id))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Slots ──

@router.post("/rosters/{roster_id}/slots", status_code=201, response_model=RosterResponse)
def add_role(
    roster_id: str,
    payload: RoleDefinition,
    service: RosterService = Depends(get_roster_service),
):
    """Add the columns for a role definition."""
    try:
        return service.to_view(service.add_role(roster_id, payload))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/rosters/{roster_id}/slots/{slot_id}/duplicate",
    status_code=201,
    response_model=RosterResponse,
)
def duplicate_slot(
    roster_id: str,
    slot_id: str,
    service: RosterService = Depends(get_roster_service),
):
    """Add another column for the same role."""
    try:
        return service.to_view(service.duplicate_slot(roster_id, slot_id))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/rosters/{roster_id}/slots/{slot_id}", response_model=RosterResponse)
def remove_slot(
    roster_id: str,
    slot_id: str,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.to_view(service.remove_slot(roster_id, slot_id))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Members ──

@router.post("/rosters/{roster_id}/members", status_code=201, response_model=RosterResponse)
def add_member(
    roster_id: str,
    payload: MemberCreateRequest,
    service: RosterService = Depends(get_roster_service),
):
    try:
        member = RegisteredMember(
            id=payload.id,
            name=payload.name,
            user_id=payload.user_id,
            role_ids=frozenset(payload.role_ids),
        )
        return service.to_view(service.add_member(roster_id, member))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/rosters/{roster_id}/guests", status_code=201)
def add_guest(
    roster_id: str,
    payload: GuestCreateRequest,
    service: RosterService = Depends(get_roster_service),
):
    """Create an ad-hoc guest member on this roster."""
    try:
        guest = service.add_guest(roster_id, payload.name, payload.role_ids)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return guest.model_dump(mode="json")


# ── History ──

@router.get("/history")
def get_history(
    roster_id: Optional[str] = None,
    event_type: Optional[str] = None,
    limit: int = Query(default=None, ge=1, description="Max results"),
    history_repo: HistoryRepository = Depends(get_history_repo),
):
    """Audit log for roster edits and shuffles."""
    return history_repo.get_all(roster_id=roster_id, event_type=event_type, limit=limit)
