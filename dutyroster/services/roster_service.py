# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Roster management — grid edits, shuffles, conflict scans, saves.
Coordinates repository writes with metrics, history, and validation.

Every engine call works on a copy of the stored matrix; the store is only
updated after the engine returns.
"""

import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from dutyroster.core.config import settings
from dutyroster.core.logging import get_logger
from dutyroster.metrics.prometheus import (
    ACTIVE_ROSTERS,
    AUTO_CELLS_CLEARED,
    CELLS_FILLED,
    CELLS_UNFILLED,
    CONFLICTING_CELLS,
    MANUAL_EDITS,
    SAVES_TOTAL,
    SHUFFLE_DURATION,
    SHUFFLES_TOTAL,
)
from dutyroster.models.domain import (
    Event,
    GuestMember,
    RegisteredMember,
    RoleDefinition,
    RoleSlot,
    expand_roles_to_slots,
)
from dutyroster.repositories.history_repository import HistoryRepository
from dutyroster.repositories.roster_repository import RosterRepository
from dutyroster.services.availability_service import AvailabilityService
from dutyroster.services.conflicts import ConflictDetector
from dutyroster.services.matrix import RosterMatrix
from dutyroster.services.persistence_client import PersistenceClient
from dutyroster.services.shuffle import ShuffleEngine, ShuffleMode, clear_auto_assignments

logger = get_logger(__name__)

_SLOT_SUFFIX = re.compile(r"__\d+$")


def _root_slot_id(slot_id: str) -> str:
    return _SLOT_SUFFIX.sub("", slot_id)


def _event_sort_key(event: Event) -> tuple:
    return (event.sort_order, event.date, event.time is not None, event.time or datetime.min.time())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RosterService:
    """Business logic for roster grids."""

    def __init__(
        self,
        roster_repo: RosterRepository,
        availability_service: AvailabilityService,
        history_repo: HistoryRepository,
        persistence_client: PersistenceClient,
    ) -> None:
        self._rosters = roster_repo
        self._availability = availability_service
        self._history = history_repo
        self._backend = persistence_client

    # ── Roster commands ──

    def create_roster(
        self,
        name: str,
        team_id: Optional[str] = None,
        events: Optional[list[Event]] = None,
        roles: Optional[list[RoleDefinition]] = None,
        members: Optional[list[RegisteredMember | GuestMember]] = None,
    ) -> dict[str, Any]:
        """Create an empty grid. Raises ValueError on duplicate ids."""
        events = list(events or [])
        slots = expand_roles_to_slots(list(roles or []))
        members = list(members or [])
        for label, items in (("event", events), ("slot", slots), ("member", members)):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise ValueError(f"Duplicate {label} ids in roster definition")

        roster_id = str(uuid.uuid4())
        record: dict[str, Any] = {
            "id": roster_id,
            "name": name,
            "team_id": team_id,
            "events": sorted(events, key=_event_sort_key),
            "slots": slots,
            "members": members,
            "matrix": RosterMatrix(),
            "created_at": _now(),
            "updated_at": None,
            "saved_at": None,
        }
        self._rosters.save(roster_id, record)

        ACTIVE_ROSTERS.set(self._rosters.count())
        self._history.record_event(
            "roster_created",
            roster_id,
            {"events": len(events), "slots": len(slots), "members": len(members)},
        )
        logger.info(
            "Roster created: id=%s, events=%d, slots=%d, members=%d",
            roster_id, len(events), len(slots), len(members),
        )
        return record

    def delete_roster(self, roster_id: str) -> dict[str, str]:
        if self._rosters.delete(roster_id) is None:
            raise KeyError(f"No roster found with id '{roster_id}'")
        ACTIVE_ROSTERS.set(self._rosters.count())
        try:
            CONFLICTING_CELLS.remove(roster_id)
        except KeyError:
            pass  # never scanned
        self._history.record_event("roster_deleted", roster_id, {})
        logger.info("Roster deleted: id=%s", roster_id)
        return {"status": "deleted", "roster_id": roster_id}

    # ── Structure commands ──

    def add_event(self, roster_id: str, event: Event) -> dict[str, Any]:
        roster = self.get_roster(roster_id)
        if any(e.id == event.id for e in roster["events"]):
            raise ValueError(f"Event '{event.id}' already exists on this roster")
        roster["events"] = sorted(roster["events"] + [event], key=_event_sort_key)
        self._touch(roster, "event_added", {"event_id": event.id, "date": event.date.isoformat()})
        return roster

    def remove_event(self, roster_id: str, event_id: str) -> dict[str, Any]:
        roster = self.get_roster(roster_id)
        self._require_event(roster, event_id)
        roster["events"] = [e for e in roster["events"] if e.id != event_id]
        dropped = roster["matrix"].drop_event(event_id)
        self._touch(roster, "event_removed", {"event_id": event_id, "cells_dropped": dropped})
        return roster

    def add_role(self, roster_id: str, role: RoleDefinition) -> dict[str, Any]:
        """Append the columns for one role definition."""
        roster = self.get_roster(roster_id)
        new_slots = expand_roles_to_slots([role])
        existing = {s.id for s in roster["slots"]}
        clashes = [s.id for s in new_slots if s.id in existing]
        if clashes:
            raise ValueError(f"Slot ids already on this roster: {', '.join(clashes)}")
        roster["slots"] = roster["slots"] + new_slots
        self._touch(roster, "slots_added", {"slot_ids": [s.id for s in new_slots]})
        return roster

    def duplicate_slot(self, roster_id: str, slot_id: str) -> dict[str, Any]:
        """
        Add another column for the same role, numbered after its siblings.
        A lone un-numbered column is renamed to "<name> 1" first and its
        cells move with it.
        """
        roster = self.get_roster(roster_id)
        source = self._require_slot(roster, slot_id)
        base = source.base_name
        slots: list[RoleSlot] = list(roster["slots"])
        siblings = [s for s in slots if s.base_name == base]
        root = _root_slot_id(source.id)

        if len(siblings) == 1 and source.name == base:
            if any(s.id == f"{root}__1" for s in slots):
                raise ValueError(f"Slot id '{root}__1' already exists on this roster")
            renamed = source.model_copy(
                update={"id": f"{root}__1", "name": f"{base} 1", "slot_index": 1}
            )
            slots[slots.index(source)] = renamed
            roster["matrix"].rekey_slot(source.id, renamed.id)

        taken = {s.id for s in slots}
        new_index = max(s.slot_index for s in siblings) + 1
        while f"{root}__{new_index}" in taken:
            new_index += 1
        new_slot = RoleSlot(
            id=f"{root}__{new_index}",
            name=f"{base} {new_index}",
            team_role_id=source.team_role_id,
            slot_index=new_index,
        )
        last_sibling = max(i for i, s in enumerate(slots) if s.base_name == base)
        slots.insert(last_sibling + 1, new_slot)
        roster["slots"] = slots
        self._touch(roster, "slot_duplicated", {"source": slot_id, "new_slot": new_slot.id})
        return roster

    def remove_slot(self, roster_id: str, slot_id: str) -> dict[str, Any]:
        """Drop a column and its cells; a single remaining sibling loses its number."""
        roster = self.get_roster(roster_id)
        removed = self._require_slot(roster, slot_id)
        slots = [s for s in roster["slots"] if s.id != slot_id]
        dropped = roster["matrix"].drop_slot(slot_id)

        siblings = [s for s in slots if s.base_name == removed.base_name]
        if len(siblings) == 1 and siblings[0].name != removed.base_name:
            lone = siblings[0]
            plain_id = _root_slot_id(lone.id)
            if plain_id not in {s.id for s in slots}:
                plain = lone.model_copy(
                    update={"id": plain_id, "name": removed.base_name, "slot_index": 1}
                )
                slots[slots.index(lone)] = plain
                roster["matrix"].rekey_slot(lone.id, plain.id)

        roster["slots"] = slots
        self._touch(roster, "slot_removed", {"slot_id": slot_id, "cells_dropped": dropped})
        return roster

    def add_member(
        self, roster_id: str, member: RegisteredMember | GuestMember
    ) -> dict[str, Any]:
        roster = self.get_roster(roster_id)
        if any(m.id == member.id for m in roster["members"]):
            raise ValueError(f"Member '{member.id}' already exists on this roster")
        roster["members"] = roster["members"] + [member]
        self._touch(roster, "member_added", {"member_id": member.id, "kind": member.kind})
        return roster

    def add_guest(
        self, roster_id: str, name: str, role_ids: Optional[list[str]] = None
    ) -> GuestMember:
        """Mint an ad-hoc member id usable anywhere a member id is."""
        guest = GuestMember(
            id=f"guest-{uuid.uuid4()}",
            name=name,
            role_ids=frozenset(role_ids or ()),
        )
        self.add_member(roster_id, guest)
        return guest

    # ── Cell commands ──

    def assign_cell(
        self, roster_id: str, event_id: str, slot_id: str, member_id: str
    ) -> dict[str, Any]:
        """Administrator assignment: always pinned, never conflict-repaired."""
        roster = self.get_roster(roster_id)
        self._require_event(roster, event_id)
        self._require_slot(roster, slot_id)
        self._require_member(roster, member_id)

        assignment = roster["matrix"].assign(event_id, slot_id, member_id)
        MANUAL_EDITS.labels(action="assign").inc()
        self._touch(
            roster,
            "cell_assigned",
            {"event_id": event_id, "slot_id": slot_id, "member_id": member_id},
        )
        return self._cell_view(roster, event_id, slot_id, assignment)

    def remove_cell(self, roster_id: str, event_id: str, slot_id: str) -> dict[str, Any]:
        roster = self.get_roster(roster_id)
        previous = roster["matrix"].remove(event_id, slot_id)
        if previous is not None:
            MANUAL_EDITS.labels(action="remove").inc()
            self._touch(
                roster,
                "cell_removed",
                {"event_id": event_id, "slot_id": slot_id, "member_id": previous.member_id},
            )
        return {
            "status": "removed" if previous is not None else "empty",
            "event_id": event_id,
            "slot_id": slot_id,
        }

    def toggle_pin(self, roster_id: str, event_id: str, slot_id: str) -> dict[str, Any]:
        """Flip the pin of a filled cell; an empty cell is left as it is."""
        roster = self.get_roster(roster_id)
        toggled = roster["matrix"].toggle_manual(event_id, slot_id)
        if toggled is None:
            return {"status": "empty", "event_id": event_id, "slot_id": slot_id}
        MANUAL_EDITS.labels(action="toggle_pin").inc()
        self._touch(
            roster,
            "pin_toggled",
            {"event_id": event_id, "slot_id": slot_id, "manual": toggled.manual},
        )
        return self._cell_view(roster, event_id, slot_id, toggled)

    # ── Engine commands ──

    def shuffle(self, roster_id: str, mode: str | None = None) -> dict[str, Any]:
        """Run the auto-fill engine over a snapshot and commit its result."""
        roster = self.get_roster(roster_id)
        shuffle_mode = ShuffleMode(mode or settings.DEFAULT_SHUFFLE_MODE)
        index = self._availability.build_index(
            roster["events"], [m.availability_key for m in roster["members"]]
        )
        engine = ShuffleEngine(index)

        started = time.perf_counter()
        result = engine.shuffle(
            roster["matrix"],
            roster["events"],
            roster["slots"],
            roster["members"],
            shuffle_mode,
        )
        SHUFFLE_DURATION.labels(mode=shuffle_mode.value).observe(time.perf_counter() - started)

        roster["matrix"] = result.matrix
        SHUFFLES_TOTAL.labels(mode=shuffle_mode.value).inc()
        CELLS_FILLED.inc(result.assignments_made)
        CELLS_UNFILLED.inc(len(result.unfilled))
        self._touch(
            roster,
            "shuffle",
            {
                "mode": shuffle_mode.value,
                "assignments_made": result.assignments_made,
                "changed": result.changed,
                "unfilled": len(result.unfilled),
            },
        )
        logger.info(
            "Shuffle complete: roster=%s, mode=%s, made=%d, changed=%d, unfilled=%d",
            roster_id, shuffle_mode.value, result.assignments_made,
            result.changed, len(result.unfilled),
            extra={"roster_id": roster_id, "mode": shuffle_mode.value},
        )
        return {
            "roster_id": roster_id,
            "mode": shuffle_mode.value,
            "assignments_made": result.assignments_made,
            "changed": result.changed,
            "unfilled": [
                {"event_id": event_id, "slot_id": slot_id}
                for event_id, slot_id in result.unfilled
            ],
            "assignments": result.matrix.to_records(),
        }

    def clear_auto(self, roster_id: str) -> dict[str, Any]:
        roster = self.get_roster(roster_id)
        result = clear_auto_assignments(roster["matrix"])
        roster["matrix"] = result.matrix
        AUTO_CELLS_CLEARED.inc(result.removed_count)
        self._touch(roster, "auto_cleared", {"removed": result.removed_count})
        logger.info(
            "Auto assignments cleared: roster=%s, removed=%d",
            roster_id, result.removed_count,
        )
        return {
            "roster_id": roster_id,
            "removed_count": result.removed_count,
            "assignments": result.matrix.to_records(),
        }

    def save_roster(self, roster_id: str) -> dict[str, Any]:
        """Push the current grid to the persistence service."""
        roster = self.get_roster(roster_id)
        events = {e.id: e for e in roster["events"]}
        slots = {s.id: s for s in roster["slots"]}
        rows = [
            {
                "member_id": a.member_id,
                "team_id": roster["team_id"],
                "roster_id": roster_id,
                "date": events[event_id].date.isoformat(),
                "role": slots[slot_id].base_name,
                "slot_id": slot_id,
                "manual": a.manual,
            }
            for (event_id, slot_id), a in roster["matrix"].cells()
            if event_id in events and slot_id in slots
        ]
        persisted = self._backend.upsert_assignments(roster_id, rows)
        SAVES_TOTAL.labels(outcome="ok" if persisted else "failed").inc()
        if persisted:
            roster["saved_at"] = _now()
            self._history.record_event("roster_saved", roster_id, {"rows": len(rows)})
        return {
            "status": "saved" if persisted else "save_failed",
            "roster_id": roster_id,
            "rows": len(rows),
        }

    # ── Queries ──

    def list_rosters(self) -> list[dict[str, Any]]:
        return self._rosters.get_all()

    def get_roster(self, roster_id: str) -> dict[str, Any]:
        roster = self._rosters.get(roster_id)
        if roster is None:
            raise KeyError(f"No roster found with id '{roster_id}'")
        return roster

    def conflicts(self, roster_id: str) -> list[dict[str, Any]]:
        roster = self.get_roster(roster_id)
        found = self._detector(roster).find_conflicts()
        CONFLICTING_CELLS.labels(roster=roster_id).set(len(found))
        return found

    def stats(self, roster_id: str) -> dict[str, Any]:
        roster = self.get_roster(roster_id)
        matrix: RosterMatrix = roster["matrix"]
        stats = matrix.stats(roster["events"], roster["slots"])
        stats["member_load"] = {m.id: matrix.load_of(m.id) for m in roster["members"]}
        return stats

    def to_view(self, roster: dict[str, Any]) -> dict[str, Any]:
        """JSON-ready projection of a roster record."""
        detector = self._detector(roster)
        assignments = roster["matrix"].to_records()
        for cell in assignments:
            cell["conflict"] = detector.has_conflict(cell["event_id"], cell["slot_id"])
        return {
            "id": roster["id"],
            "name": roster["name"],
            "team_id": roster["team_id"],
            "events": [e.model_dump(mode="json") for e in roster["events"]],
            "slots": [s.model_dump(mode="json") for s in roster["slots"]],
            "members": [m.model_dump(mode="json") for m in roster["members"]],
            "assignments": assignments,
            "created_at": roster["created_at"],
            "updated_at": roster["updated_at"],
            "saved_at": roster["saved_at"],
        }

    # ── Seed ──

    def seed_demo(self) -> dict[str, Any]:
        """Create a small worship-team roster so the service is usable immediately."""
        roster = self.create_roster(
            name="Sunday Services",
            team_id="demo-team",
            events=[
                Event(id="sun-1", name="Morning Service", date="2026-11-01", time="09:30"),
                Event(id="sun-2", name="Morning Service", date="2026-11-08", time="09:30"),
                Event(id="sun-3", name="Evening Worship", date="2026-11-08", time="18:00"),
            ],
            roles=[
                RoleDefinition(id="worship-leader", name="Worship Leader"),
                RoleDefinition(id="vocals", name="Vocalist", quantity=2),
                RoleDefinition(id="keys", name="Keyboard"),
                RoleDefinition(id="sound", name="Sound Engineer"),
            ],
            members=[
                RegisteredMember(id="m-anna", name="Anna Park", user_id="u-anna",
                                 role_ids=frozenset({"worship-leader", "vocals"})),
                RegisteredMember(id="m-ben", name="Ben Okafor", user_id="u-ben",
                                 role_ids=frozenset({"keys"})),
                RegisteredMember(id="m-cara", name="Cara Silva", user_id="u-cara",
                                 role_ids=frozenset({"vocals"})),
                RegisteredMember(id="m-dev", name="Dev Patel", user_id="u-dev",
                                 role_ids=frozenset({"sound"})),
                RegisteredMember(id="m-ema", name="Ema Novak", user_id="u-ema"),
            ],
        )
        logger.info("Seeded demo roster: id=%s", roster["id"])
        return roster

    # ── Internal ──

    def _detector(self, roster: dict[str, Any]) -> ConflictDetector:
        index = self._availability.build_index(
            roster["events"], [m.availability_key for m in roster["members"]]
        )
        return ConflictDetector(
            roster["matrix"],
            index,
            roster["events"],
            member_keys={m.id: m.availability_key for m in roster["members"]},
        )

    def _touch(self, roster: dict[str, Any], event_type: str, details: dict[str, Any]) -> None:
        roster["updated_at"] = _now()
        self._history.record_event(event_type, roster["id"], details)

    def _cell_view(self, roster, event_id, slot_id, assignment) -> dict[str, Any]:
        return {
            "event_id": event_id,
            "slot_id": slot_id,
            "member_id": assignment.member_id,
            "manual": assignment.manual,
            "conflict": self._detector(roster).has_conflict(event_id, slot_id),
        }

    @staticmethod
    def _require_event(roster: dict[str, Any], event_id: str) -> Event:
        for e in roster["events"]:
            if e.id == event_id:
                return e
        raise KeyError(f"No event '{event_id}' on roster '{roster['id']}'")

    @staticmethod
    def _require_slot(roster: dict[str, Any], slot_id: str) -> RoleSlot:
        for s in roster["slots"]:
            if s.id == slot_id:
                return s
        raise KeyError(f"No slot '{slot_id}' on roster '{roster['id']}'")

    @staticmethod
    def _require_member(roster: dict[str, Any], member_id: str) -> None:
        if not any(m.id == member_id for m in roster["members"]):
            raise KeyError(f"No member '{member_id}' on roster '{roster['id']}'")
