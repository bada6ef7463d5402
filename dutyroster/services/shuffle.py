# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Shuffle engine — greedy auto-assignment, pure computation.

Cells are filled event by event (input order), slot by slot (input order).
For each fillable cell the candidate pool is every member not already in
the event and not unavailable for the event's date/session, ranked by:

    1. declared role matches the slot's team role
    2. live load (cells held so far) ascending
    3. last assignment earliest in event order (never assigned first)
    4. member input order

Pinned (manual) cells are never read as fillable and never written.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from dutyroster.models.domain import Event, GuestMember, RegisteredMember, RoleSlot
from dutyroster.services.availability_index import AvailabilityIndex
from dutyroster.services.matrix import CellKey, RosterMatrix

AnyMember = RegisteredMember | GuestMember


class ShuffleMode(str, Enum):
    ALL = "all"
    EMPTY_ONLY = "empty_only"


@dataclass
class ShuffleResult:
    matrix: RosterMatrix
    assignments_made: int = 0
    changed: int = 0
    unfilled: list[CellKey] = field(default_factory=list)


@dataclass
class ClearResult:
    matrix: RosterMatrix
    removed_count: int = 0


def count_changed(before: RosterMatrix, after: RosterMatrix) -> int:
    """Number of cells whose contents differ between two matrices."""
    keys = {key for key, _ in before.cells()} | {key for key, _ in after.cells()}
    return sum(1 for event_id, slot_id in keys
               if before.get(event_id, slot_id) != after.get(event_id, slot_id))


def clear_auto_assignments(matrix: RosterMatrix) -> ClearResult:
    """Remove every non-pinned cell. No re-assignment."""
    working = matrix.copy()
    removed = working.clear_auto()
    return ClearResult(matrix=working, removed_count=removed)


class ShuffleEngine:
    """Deterministic single-pass filler over a matrix snapshot."""

    def __init__(self, availability: Optional[AvailabilityIndex] = None) -> None:
        self._availability = availability or AvailabilityIndex()

    def shuffle(
        self,
        matrix: RosterMatrix,
        events: Sequence[Event],
        slots: Sequence[RoleSlot],
        members: Sequence[AnyMember],
        mode: ShuffleMode | str = ShuffleMode.ALL,
    ) -> ShuffleResult:
        """Return a new matrix; the input matrix is not modified."""
        mode = ShuffleMode(mode)
        working = matrix.copy()
        if mode is ShuffleMode.ALL:
            working.clear_auto()

        pool = _unique(members)
        order = {m.id: i for i, m in enumerate(pool)}
        event_position = {e.id: i for i, e in enumerate(events)}
        last_seen = _last_assigned(working, event_position)

        made = 0
        unfilled: list[CellKey] = []
        for position, event in enumerate(events):
            session = event.effective_session
            for slot in slots:
                if working.get(event.id, slot.id) is not None:
                    continue

                candidates = [
                    m for m in pool
                    if not working.is_occupying(event.id, m.id)
                    and not self._availability.is_unavailable(
                        m.availability_key, event.date, session
                    )
                ]
                if not candidates:
                    unfilled.append((event.id, slot.id))
                    continue

                chosen = min(
                    candidates,
                    key=lambda m: _rank(m, slot, working, last_seen, order),
                )
                working.place(event.id, slot.id, chosen.id)
                last_seen[chosen.id] = max(last_seen.get(chosen.id, -1), position)
                made += 1

        return ShuffleResult(
            matrix=working,
            assignments_made=made,
            changed=count_changed(matrix, working),
            unfilled=unfilled,
        )


def _rank(
    member: AnyMember,
    slot: RoleSlot,
    working: RosterMatrix,
    last_seen: dict[str, int],
    order: dict[str, int],
) -> tuple[int, int, int, int]:
    mismatch = 0 if member.is_eligible_for(slot.team_role_id) else 1
    return (
        mismatch,
        working.load_of(member.id),
        last_seen.get(member.id, -1),
        order[member.id],
    )


def _unique(members: Sequence[AnyMember]) -> list[AnyMember]:
    seen: set[str] = set()
    result: list[AnyMember] = []
    for m in members:
        if m.id not in seen:
            seen.add(m.id)
            result.append(m)
    return result


def _last_assigned(matrix: RosterMatrix, event_position: dict[str, int]) -> dict[str, int]:
    """member_id -> latest event position already holding them."""
    last: dict[str, int] = {}
    for (event_id, _), assignment in matrix.cells():
        position = event_position.get(event_id)
        if position is not None and position > last.get(assignment.member_id, -1):
            last[assignment.member_id] = position
    return last
