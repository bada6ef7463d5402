# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Grid cell, shuffle, conflict and save endpoints.
Thin HTTP layer — delegates ALL logic to RosterService.
"""

from fastapi import APIRouter, Depends, HTTPException

from dutyroster.core.dependencies import get_roster_service
from dutyroster.schemas.roster import (
    CellAssignRequest,
    CellResponse,
    ClearAutoResponse,
    ConflictResponse,
    ShuffleRequest,
    ShuffleResponse,
)
from dutyroster.services.roster_service import RosterService

router = APIRouter(prefix="/api/v1/rosters/{roster_id}", tags=["Assignments"])


# ── Cells ──

@router.put("/cells/{event_id}/{slot_id}", response_model=CellResponse)
def assign_cell(
    roster_id: str,
    event_id: str,
    slot_id: str,
    payload: CellAssignRequest,
    service: RosterService = Depends(get_roster_service),
):
    """Pin a member into a cell. Conflicts are reported, not prevented."""
    try:
        return service.assign_cell(roster_id, event_id, slot_id, payload.member_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/cells/{event_id}/{slot_id}")
def remove_cell(
    roster_id: str,
    event_id: str,
    slot_id: str,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.remove_cell(roster_id, event_id, slot_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/cells/{event_id}/{slot_id}/toggle-pin")
def toggle_pin(
    roster_id: str,
    event_id: str,
    slot_id: str,
    service: RosterService = Depends(get_roster_service),
):
    """Pin or unpin a filled cell."""
    try:
        return service.toggle_pin(roster_id, event_id, slot_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Engine ──

@router.post("/shuffle", response_model=ShuffleResponse)
def shuffle(
    roster_id: str,
    payload: ShuffleRequest | None = None,
    service: RosterService = Depends(get_roster_service),
):
    """Auto-fill the grid. Pinned cells are never touched."""
    try:
        return service.shuffle(roster_id, payload.mode if payload else None)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/clear-auto", response_model=ClearAutoResponse)
def clear_auto(
    roster_id: str,
    service: RosterService = Depends(get_roster_service),
):
    """Remove every auto-assigned cell, keeping pins."""
    try:
        return service.clear_auto(roster_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/conflicts", response_model=list[ConflictResponse])
def list_conflicts(
    roster_id: str,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.conflicts(roster_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/stats")
def roster_stats(
    roster_id: str,
    service: RosterService = Depends(get_roster_service),
):
    """Cell counts and per-member load."""
    try:
        return service.stats(roster_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/save")
def save_roster(
    roster_id: str,
    service: RosterService = Depends(get_roster_service),
):
    """Push the grid to the persistence service."""
    try:
        return service.save_roster(roster_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
