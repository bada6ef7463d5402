# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Conflict detection — pure computation, no side effects.
Flags cells only; never repairs them.
"""

from typing import Any, Iterable

from dutyroster.models.domain import Event
from dutyroster.services.availability_index import AvailabilityIndex
from dutyroster.services.matrix import RosterMatrix

UNAVAILABLE = "unavailable"
DOUBLE_BOOKED = "double_booked"


class ConflictDetector:
    """Reads a matrix and an availability index; writes nothing."""

    def __init__(
        self,
        matrix: RosterMatrix,
        availability: AvailabilityIndex,
        events: Iterable[Event],
        member_keys: dict[str, str] | None = None,
    ) -> None:
        self._matrix = matrix
        self._availability = availability
        self._events = {e.id: e for e in events}
        # member_id -> availability key (user id for registered members)
        self._member_keys = member_keys or {}

    def reasons(self, event_id: str, slot_id: str) -> list[str]:
        """Why a cell is in conflict; empty list when it is not."""
        assignment = self._matrix.get(event_id, slot_id)
        if assignment is None:
            return []

        found: list[str] = []
        event = self._events.get(event_id)
        if event is not None:
            key = self._member_keys.get(assignment.member_id, assignment.member_id)
            if self._availability.is_unavailable(key, event.date, event.effective_session):
                found.append(UNAVAILABLE)

        others = [
            s for s in self._matrix.holders(event_id, assignment.member_id) if s != slot_id
        ]
        if others:
            found.append(DOUBLE_BOOKED)
        return found

    def has_conflict(self, event_id: str, slot_id: str) -> bool:
        return bool(self.reasons(event_id, slot_id))

    def find_conflicts(self) -> list[dict[str, Any]]:
        """Every conflicting cell with its reasons, in matrix order."""
        conflicts: list[dict[str, Any]] = []
        for (event_id, slot_id), assignment in self._matrix.cells():
            found = self.reasons(event_id, slot_id)
            if found:
                conflicts.append(
                    {
                        "event_id": event_id,
                        "slot_id": slot_id,
                        "member_id": assignment.member_id,
                        "manual": assignment.manual,
                        "reasons": found,
                    }
                )
        return conflicts
