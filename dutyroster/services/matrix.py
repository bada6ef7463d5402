# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Roster matrix — in-memory grid of (event, slot) -> assignment.
Occupancy and load are kept in indices updated on every write.
"""

from collections import Counter
from typing import Any, Iterable, Iterator, Mapping, Optional

from dutyroster.models.domain import Assignment, Event, RoleSlot

CellKey = tuple[str, str]


class RosterMatrix:
    """Cell store keyed by (event_id, slot_id)."""

    def __init__(self, cells: Optional[Mapping[CellKey, Assignment]] = None) -> None:
        self._cells: dict[CellKey, Assignment] = {}
        self._event_members: dict[str, Counter] = {}
        self._load: Counter = Counter()
        for (event_id, slot_id), assignment in (cells or {}).items():
            self._put(event_id, slot_id, assignment)

    # ── Read ──

    def get(self, event_id: str, slot_id: str) -> Optional[Assignment]:
        return self._cells.get((event_id, slot_id))

    def cells(self) -> Iterator[tuple[CellKey, Assignment]]:
        return iter(list(self._cells.items()))

    def occupants_of(self, event_id: str) -> set[str]:
        """Members currently filling any slot of the event."""
        return set(self._event_members.get(event_id, ()))

    def is_occupying(self, event_id: str, member_id: str) -> bool:
        return self._event_members.get(event_id, Counter())[member_id] > 0

    def load_of(self, member_id: str) -> int:
        """Number of cells across the whole matrix holding the member."""
        return self._load[member_id]

    def holders(self, event_id: str, member_id: str) -> list[str]:
        """Slot ids of the event held by the member."""
        return [
            slot_id
            for (e_id, slot_id), a in self._cells.items()
            if e_id == event_id and a.member_id == member_id
        ]

    def pinned_cells(self) -> dict[CellKey, Assignment]:
        return {key: a for key, a in self._cells.items() if a.manual}

    def stats(self, events: list[Event], slots: list[RoleSlot]) -> dict[str, int]:
        """Cell counts over the visible grid."""
        event_ids = {e.id for e in events}
        slot_ids = {s.id for s in slots}
        visible = [
            a for (e_id, s_id), a in self._cells.items()
            if e_id in event_ids and s_id in slot_ids
        ]
        total = len(event_ids) * len(slot_ids)
        manual = sum(1 for a in visible if a.manual)
        return {
            "total_cells": total,
            "filled_cells": len(visible),
            "manual_cells": manual,
            "auto_cells": len(visible) - manual,
            "empty_cells": total - len(visible),
        }

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, key: CellKey) -> bool:
        return key in self._cells

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RosterMatrix):
            return NotImplemented
        return self._cells == other._cells

    # ── Write ──

    def assign(self, event_id: str, slot_id: str, member_id: str) -> Assignment:
        """Administrator edit: sets the cell and pins it. No conflict repair."""
        assignment = Assignment(member_id=member_id, manual=True)
        self._put(event_id, slot_id, assignment)
        return assignment

    def place(self, event_id: str, slot_id: str, member_id: str) -> Assignment:
        """Auto-fill write: always unpinned."""
        assignment = Assignment(member_id=member_id, manual=False)
        self._put(event_id, slot_id, assignment)
        return assignment

    def remove(self, event_id: str, slot_id: str) -> Optional[Assignment]:
        previous = self._cells.pop((event_id, slot_id), None)
        if previous is not None:
            self._unindex(event_id, previous.member_id)
        return previous

    def toggle_manual(self, event_id: str, slot_id: str) -> Optional[Assignment]:
        """Flip the pin on a filled cell. Empty cells are left alone."""
        current = self._cells.get((event_id, slot_id))
        if current is None:
            return None
        toggled = Assignment(member_id=current.member_id, manual=not current.manual)
        self._cells[(event_id, slot_id)] = toggled
        return toggled

    def clear_auto(self) -> int:
        """Drop every unpinned cell; return how many were removed."""
        auto_keys = [key for key, a in self._cells.items() if not a.manual]
        for event_id, slot_id in auto_keys:
            self.remove(event_id, slot_id)
        return len(auto_keys)

    def drop_event(self, event_id: str) -> int:
        keys = [key for key in self._cells if key[0] == event_id]
        for e_id, slot_id in keys:
            self.remove(e_id, slot_id)
        return len(keys)

    def drop_slot(self, slot_id: str) -> int:
        keys = [key for key in self._cells if key[1] == slot_id]
        for event_id, s_id in keys:
            self.remove(event_id, s_id)
        return len(keys)

    def rekey_slot(self, old_slot_id: str, new_slot_id: str) -> None:
        """Move every cell of one column to a new column id."""
        for (event_id, slot_id), assignment in self.cells():
            if slot_id == old_slot_id:
                self.remove(event_id, slot_id)
                self._put(event_id, new_slot_id, assignment)

    def copy(self) -> "RosterMatrix":
        return RosterMatrix(self._cells)

    # ── Serialization ──

    def to_records(self) -> list[dict[str, Any]]:
        return [
            {
                "event_id": event_id,
                "slot_id": slot_id,
                "member_id": a.member_id,
                "manual": a.manual,
            }
            for (event_id, slot_id), a in self._cells.items()
        ]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "RosterMatrix":
        return cls(
            {
                (r["event_id"], r["slot_id"]): Assignment(
                    member_id=r["member_id"], manual=bool(r.get("manual", False))
                )
                for r in records
            }
        )

    # ── Internal ──

    def _put(self, event_id: str, slot_id: str, assignment: Assignment) -> None:
        previous = self._cells.get((event_id, slot_id))
        if previous is not None:
            self._unindex(event_id, previous.member_id)
        self._cells[(event_id, slot_id)] = assignment
        self._event_members.setdefault(event_id, Counter())[assignment.member_id] += 1
        self._load[assignment.member_id] += 1

    def _unindex(self, event_id: str, member_id: str) -> None:
        members = self._event_members[event_id]
        members[member_id] -= 1
        if members[member_id] <= 0:
            del members[member_id]
        if not members:
            del self._event_members[event_id]
        self._load[member_id] -= 1
        if self._load[member_id] <= 0:
            del self._load[member_id]
