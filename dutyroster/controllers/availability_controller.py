# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Availability endpoints.
Thin HTTP layer — delegates ALL logic to AvailabilityService.
"""

from fastapi import APIRouter, Depends, HTTPException

from dutyroster.core.dependencies import get_availability_service, get_roster_service
from dutyroster.schemas.roster import (
    AvailabilityRangeRequest,
    AvailabilitySetRequest,
    AvailabilitySyncRequest,
    AvailabilityToggleRequest,
)
from dutyroster.services.availability_service import AvailabilityService
from dutyroster.services.roster_service import RosterService

router = APIRouter(prefix="/api/v1", tags=["Availability"])


@router.put("/availability")
def set_availability(
    payload: AvailabilitySetRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Record availability for one date and session."""
    entry = service.set_availability(
        member_key=payload.member_key,
        date=payload.date,
        available=payload.available,
        session=payload.session,
        reason=payload.reason,
    )
    return entry.model_dump(mode="json")


@router.post("/availability/toggle")
def toggle_availability(
    payload: AvailabilityToggleRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    entry = service.toggle_availability(
        member_key=payload.member_key,
        date=payload.date,
        session=payload.session,
        reason=payload.reason,
    )
    return entry.model_dump(mode="json")


@router.put("/availability/range")
def set_availability_range(
    payload: AvailabilityRangeRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Apply one availability value to every day of a date range."""
    try:
        entries = service.set_range(
            member_key=payload.member_key,
            start=payload.start,
            end=payload.end,
            available=payload.available,
            session=payload.session,
            reason=payload.reason,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"member_key": payload.member_key, "days": len(entries)}


@router.get("/availability/{member_key}")
def get_member_availability(
    member_key: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    return {
        "entries": [e.model_dump(mode="json") for e in service.get_member(member_key)],
        "stats": service.stats(member_key),
    }


@router.delete("/availability/{member_key}")
def clear_member_availability(
    member_key: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    return {"member_key": member_key, "removed": service.clear_member(member_key)}


@router.post("/rosters/{roster_id}/availability/sync")
def sync_roster_availability(
    roster_id: str,
    payload: AvailabilitySyncRequest | None = None,
    roster_service: RosterService = Depends(get_roster_service),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Import availability for a roster's members from the hosted backend."""
    try:
        roster = roster_service.get_roster(roster_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))

    dates = [e.date for e in roster["events"]]
    start = payload.start if payload and payload.start else (min(dates) if dates else None)
    end = payload.end if payload and payload.end else (max(dates) if dates else None)
    if start is None or end is None:
        return {"roster_id": roster_id, "imported": 0}

    imported = service.import_from_backend(
        [m.availability_key for m in roster["members"]], start, end
    )
    return {"roster_id": roster_id, "imported": imported}
