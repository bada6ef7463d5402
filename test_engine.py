# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the roster engine: availability lookup, matrix, conflict
detection and the shuffle pass. No HTTP, no repositories.
"""

from datetime import date, time

import pytest

from dutyroster.models.domain import (
    Assignment,
    AvailabilityEntry,
    Event,
    GuestMember,
    RegisteredMember,
    RoleDefinition,
    RoleSlot,
    Session,
    expand_roles_to_slots,
    session_from_time,
)
from dutyroster.services.availability_index import AvailabilityIndex
from dutyroster.services.conflicts import DOUBLE_BOOKED, UNAVAILABLE, ConflictDetector
from dutyroster.services.matrix import RosterMatrix
from dutyroster.services.shuffle import (
    ShuffleEngine,
    ShuffleMode,
    clear_auto_assignments,
    count_changed,
)

D1 = date(2026, 11, 1)
D2 = date(2026, 11, 8)
D3 = date(2026, 11, 15)
D4 = date(2026, 11, 22)


def member(member_id, roles=(), user_id=None):
    return RegisteredMember(
        id=member_id, name=member_id.upper(), user_id=user_id, role_ids=frozenset(roles)
    )


def off(member_key, day, session=Session.ALL_DAY, reason="away"):
    return AvailabilityEntry(
        member_key=member_key, date=day, session=session, available=False, reason=reason
    )


# ============================================
# Fixtures
# ============================================
@pytest.fixture
def worship():
    """Two events x two slots, three members (the documented example)."""
    events = [Event(id="e1", date=D1), Event(id="e2", date=D2)]
    slots = [
        RoleSlot(id="vocalist", name="Vocalist", team_role_id="vocals"),
        RoleSlot(id="keyboard", name="Keyboard", team_role_id="keys"),
    ]
    members = [member("a", {"vocals"}), member("b", {"keys"}), member("c")]
    availability = AvailabilityIndex([off("c", D1)])
    return events, slots, members, availability


@pytest.fixture
def busy():
    """Four events x three slots with pins, gaps and unavailability."""
    events = [
        Event(id="e1", date=D1, time=time(9, 30)),
        Event(id="e2", date=D2, time=time(18, 0)),
        Event(id="e3", date=D3),
        Event(id="e4", date=D4, session=Session.AFTERNOON),
    ]
    slots = [
        RoleSlot(id="lead", name="Worship Leader", team_role_id="lead"),
        RoleSlot(id="vox", name="Vocalist", team_role_id="vocals"),
        RoleSlot(id="sound", name="Sound", team_role_id="sound"),
    ]
    members = [
        member("ann", {"lead", "vocals"}, user_id="u-ann"),
        member("ben", {"sound"}, user_id="u-ben"),
        member("cat", {"vocals"}, user_id="u-cat"),
        member("dan"),
        GuestMember(id="guest-1", name="Visiting Singer"),
    ]
    availability = AvailabilityIndex([
        off("u-ann", D2),
        off("u-ben", D1, Session.MORNING),
        off("u-cat", D4, Session.AFTERNOON),
        off("guest-1", D3),
    ])
    matrix = RosterMatrix()
    matrix.assign("e1", "lead", "dan")
    matrix.assign("e3", "vox", "ann")
    matrix.assign("e3", "sound", "ann")  # deliberate pinned double-booking
    matrix.assign("e2", "vox", "ann")  # pinned while unavailable
    matrix.place("e4", "sound", "ben")
    return events, slots, members, availability, matrix


# ============================================
# Sessions & slots
# ============================================
class TestSessions:
    def test_morning(self):
        assert session_from_time(time(9, 30)) is Session.MORNING

    def test_noon_is_afternoon(self):
        assert session_from_time(time(12, 0)) is Session.AFTERNOON

    def test_five_pm_is_evening(self):
        assert session_from_time(time(17, 0)) is Session.EVENING

    def test_no_time_is_all_day(self):
        assert session_from_time(None) is Session.ALL_DAY

    def test_explicit_session_wins_over_time(self):
        event = Event(id="e", date=D1, time=time(9, 0), session=Session.EVENING)
        assert event.effective_session is Session.EVENING

    def test_session_derived_from_time(self):
        event = Event(id="e", date=D1, time=time(19, 0))
        assert event.effective_session is Session.EVENING


class TestSlotExpansion:
    def test_single_quantity_keeps_id_and_name(self):
        slots = expand_roles_to_slots([RoleDefinition(id="keys", name="Keyboard")])
        assert [(s.id, s.name) for s in slots] == [("keys", "Keyboard")]
        assert slots[0].team_role_id == "keys"

    def test_multiple_quantity_numbers_columns(self):
        slots = expand_roles_to_slots(
            [RoleDefinition(id="alto", name="Alto", quantity=3)]
        )
        assert [s.id for s in slots] == ["alto__1", "alto__2", "alto__3"]
        assert [s.name for s in slots] == ["Alto 1", "Alto 2", "Alto 3"]
        assert {s.team_role_id for s in slots} == {"alto"}

    def test_zero_quantity_skipped(self):
        slots = expand_roles_to_slots([
            RoleDefinition(id="drums", name="Drummer", quantity=0),
            RoleDefinition(id="bass", name="Bass Guitar"),
        ])
        assert [s.id for s in slots] == ["bass"]

    def test_base_name_strips_number(self):
        assert RoleSlot(id="x", name="Soprano 2").base_name == "Soprano"
        assert RoleSlot(id="y", name="Bass (Voice)").base_name == "Bass (Voice)"


# ============================================
# AvailabilityIndex
# ============================================
class TestAvailabilityIndex:
    def test_unset_means_available(self):
        index = AvailabilityIndex()
        assert index.is_unavailable("u1", D1, Session.MORNING) is False

    def test_all_day_entry_applies_to_every_session(self):
        index = AvailabilityIndex([off("u1", D1)])
        for session in Session:
            assert index.is_unavailable("u1", D1, session) is True

    def test_all_day_available_overrides_session_entry(self):
        index = AvailabilityIndex([
            off("u1", D1, Session.EVENING),
            AvailabilityEntry(member_key="u1", date=D1, available=True),
        ])
        assert index.is_unavailable("u1", D1, Session.EVENING) is False

    def test_session_entry_only_blocks_its_session(self):
        index = AvailabilityIndex([off("u1", D1, Session.MORNING)])
        assert index.is_unavailable("u1", D1, Session.MORNING) is True
        assert index.is_unavailable("u1", D1, Session.EVENING) is False

    def test_all_day_query_ignores_session_entries(self):
        index = AvailabilityIndex([off("u1", D1, Session.MORNING)])
        assert index.is_unavailable("u1", D1, Session.ALL_DAY) is False

    def test_other_dates_and_members_unaffected(self):
        index = AvailabilityIndex([off("u1", D1)])
        assert index.is_unavailable("u1", D2) is False
        assert index.is_unavailable("u2", D1) is False

    def test_lookup_exposes_reason(self):
        index = AvailabilityIndex([off("u1", D1, reason="Travelling")])
        assert index.lookup("u1", D1, Session.EVENING).reason == "Travelling"
        assert index.lookup("u1", D2) is None

    def test_later_entry_replaces_earlier(self):
        index = AvailabilityIndex([off("u1", D1)])
        index.add(AvailabilityEntry(member_key="u1", date=D1, available=True))
        assert index.is_unavailable("u1", D1) is False
        assert len(index) == 1

    def test_entries_for_member_sorted(self):
        index = AvailabilityIndex([off("u1", D2), off("u1", D1), off("u2", D1)])
        assert [e.date for e in index.entries_for("u1")] == [D1, D2]


# ============================================
# RosterMatrix
# ============================================
class TestRosterMatrix:
    def test_assign_pins_cell(self):
        matrix = RosterMatrix()
        assignment = matrix.assign("e1", "s1", "a")
        assert assignment == Assignment(member_id="a", manual=True)
        assert matrix.get("e1", "s1").manual is True

    def test_place_is_unpinned(self):
        matrix = RosterMatrix()
        assert matrix.place("e1", "s1", "a").manual is False

    def test_occupants_and_load(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        matrix.place("e1", "s2", "b")
        matrix.place("e2", "s1", "a")
        assert matrix.occupants_of("e1") == {"a", "b"}
        assert matrix.occupants_of("e3") == set()
        assert matrix.load_of("a") == 2
        assert matrix.load_of("zed") == 0

    def test_remove_updates_indices(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        removed = matrix.remove("e1", "s1")
        assert removed.member_id == "a"
        assert matrix.occupants_of("e1") == set()
        assert matrix.load_of("a") == 0
        assert matrix.remove("e1", "s1") is None

    def test_overwrite_moves_load(self):
        matrix = RosterMatrix()
        matrix.place("e1", "s1", "a")
        matrix.assign("e1", "s1", "b")
        assert matrix.load_of("a") == 0
        assert matrix.load_of("b") == 1
        assert matrix.occupants_of("e1") == {"b"}

    def test_double_booking_counted_per_cell(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        matrix.assign("e1", "s2", "a")
        matrix.remove("e1", "s1")
        assert matrix.is_occupying("e1", "a") is True
        assert matrix.load_of("a") == 1

    def test_toggle_manual_flips(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        assert matrix.toggle_manual("e1", "s1").manual is False
        assert matrix.toggle_manual("e1", "s1").manual is True

    def test_toggle_manual_on_empty_cell_is_noop(self):
        matrix = RosterMatrix()
        assert matrix.toggle_manual("e1", "s1") is None
        assert len(matrix) == 0

    def test_clear_auto_keeps_pins(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        matrix.place("e1", "s2", "b")
        matrix.place("e2", "s1", "c")
        assert matrix.clear_auto() == 2
        assert list(matrix.pinned_cells()) == [("e1", "s1")]
        assert matrix.load_of("b") == 0

    def test_copy_is_independent(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        clone = matrix.copy()
        clone.remove("e1", "s1")
        assert matrix.get("e1", "s1") is not None
        assert matrix.load_of("a") == 1

    def test_rekey_slot_moves_cells(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "alto", "a")
        matrix.place("e2", "alto", "b")
        matrix.rekey_slot("alto", "alto__1")
        assert matrix.get("e1", "alto") is None
        assert matrix.get("e1", "alto__1").member_id == "a"
        assert matrix.get("e2", "alto__1").manual is False
        assert matrix.load_of("a") == 1

    def test_stats_over_visible_grid(self):
        events = [Event(id="e1", date=D1), Event(id="e2", date=D2)]
        slots = [RoleSlot(id="s1", name="One"), RoleSlot(id="s2", name="Two")]
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "a")
        matrix.place("e2", "s2", "b")
        matrix.place("gone", "s1", "c")
        assert matrix.stats(events, slots) == {
            "total_cells": 4,
            "filled_cells": 2,
            "manual_cells": 1,
            "auto_cells": 1,
            "empty_cells": 2,
        }

    def test_from_records(self):
        matrix = RosterMatrix.from_records([
            {"event_id": "e1", "slot_id": "s1", "member_id": "a", "manual": True},
            {"event_id": "e1", "slot_id": "s2", "member_id": "b"},
        ])
        assert matrix.get("e1", "s1").manual is True
        assert matrix.get("e1", "s2").manual is False
        assert matrix.occupants_of("e1") == {"a", "b"}


# ============================================
# ConflictDetector
# ============================================
class TestConflictDetector:
    def test_unavailable_member_flagged(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "x")
        detector = ConflictDetector(
            matrix, AvailabilityIndex([off("x", D1)]), [Event(id="e1", date=D1)]
        )
        assert detector.has_conflict("e1", "s1") is True
        assert detector.reasons("e1", "s1") == [UNAVAILABLE]

    def test_double_booking_flags_both_cells(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "x")
        matrix.assign("e1", "s2", "x")
        detector = ConflictDetector(matrix, AvailabilityIndex(), [Event(id="e1", date=D1)])
        assert detector.reasons("e1", "s1") == [DOUBLE_BOOKED]
        assert detector.reasons("e1", "s2") == [DOUBLE_BOOKED]

    def test_same_member_in_other_event_is_fine(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "x")
        matrix.assign("e2", "s1", "x")
        events = [Event(id="e1", date=D1), Event(id="e2", date=D2)]
        detector = ConflictDetector(matrix, AvailabilityIndex(), events)
        assert detector.find_conflicts() == []

    def test_empty_cell_has_no_conflict(self):
        detector = ConflictDetector(RosterMatrix(), AvailabilityIndex(), [])
        assert detector.has_conflict("e1", "s1") is False

    def test_session_scoped_unavailability(self):
        matrix = RosterMatrix()
        matrix.assign("morning", "s1", "x")
        matrix.assign("evening", "s1", "x")
        events = [
            Event(id="morning", date=D1, time=time(9, 0)),
            Event(id="evening", date=D1, time=time(19, 0)),
        ]
        index = AvailabilityIndex([off("x", D1, Session.MORNING)])
        detector = ConflictDetector(matrix, index, events)
        assert detector.has_conflict("morning", "s1") is True
        assert detector.has_conflict("evening", "s1") is False

    def test_registered_member_checked_by_user_id(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "m-1")
        detector = ConflictDetector(
            matrix,
            AvailabilityIndex([off("u-1", D1)]),
            [Event(id="e1", date=D1)],
            member_keys={"m-1": "u-1"},
        )
        assert detector.has_conflict("e1", "s1") is True

    def test_detector_does_not_mutate(self):
        matrix = RosterMatrix()
        matrix.assign("e1", "s1", "x")
        matrix.assign("e1", "s2", "x")
        before = matrix.to_records()
        ConflictDetector(matrix, AvailabilityIndex(), [Event(id="e1", date=D1)]).find_conflicts()
        assert matrix.to_records() == before


# ============================================
# ShuffleEngine: documented scenarios
# ============================================
class TestShuffleScenarios:
    def test_worship_example_fills_every_cell(self, worship):
        events, slots, members, availability = worship
        matrix = RosterMatrix()
        matrix.place("e2", "keyboard", "c")  # prior auto assignment

        result = ShuffleEngine(availability).shuffle(matrix, events, slots, members, "all")
        grid = result.matrix

        assert grid.get("e1", "vocalist").member_id == "a"
        assert grid.get("e1", "keyboard").member_id == "b"
        assert grid.get("e2", "vocalist").member_id == "c"
        assert grid.get("e2", "keyboard").member_id == "b"
        assert result.assignments_made == 4
        assert result.unfilled == []
        assert "c" not in grid.occupants_of("e1")

    def test_pinned_unavailable_member_survives_and_is_flagged(self, worship):
        events, slots, members, availability = worship
        members = members + [member("x", {"vocals"})]
        availability.add(off("x", D1))
        matrix = RosterMatrix()
        matrix.assign("e1", "vocalist", "x")

        result = ShuffleEngine(availability).shuffle(matrix, events, slots, members, "all")

        assert result.matrix.get("e1", "vocalist") == Assignment(member_id="x", manual=True)
        detector = ConflictDetector(result.matrix, availability, events)
        assert detector.has_conflict("e1", "vocalist") is True
        assert detector.reasons("e1", "vocalist") == [UNAVAILABLE]


# ============================================
# ShuffleEngine: properties
# ============================================
@pytest.mark.parametrize("mode", [ShuffleMode.ALL, ShuffleMode.EMPTY_ONLY])
class TestShuffleProperties:
    def test_pins_unchanged(self, busy, mode):
        events, slots, members, availability, matrix = busy
        pinned = matrix.pinned_cells()
        result = ShuffleEngine(availability).shuffle(matrix, events, slots, members, mode)
        for (event_id, slot_id), assignment in pinned.items():
            assert result.matrix.get(event_id, slot_id) == assignment

    def test_no_invented_double_booking(self, busy, mode):
        events, slots, members, availability, matrix = busy
        result = ShuffleEngine(availability).shuffle(matrix, events, slots, members, mode)
        for event in events:
            pinned_here = {
                a.member_id for (e_id, _), a in result.matrix.cells()
                if e_id == event.id and a.manual
            }
            auto_here = [
                a.member_id for (e_id, _), a in result.matrix.cells()
                if e_id == event.id and not a.manual
            ]
            assert len(auto_here) == len(set(auto_here))
            assert not pinned_here & set(auto_here)

    def test_auto_cells_respect_availability(self, busy, mode):
        events, slots, members, availability, matrix = busy
        keys = {m.id: m.availability_key for m in members}
        by_id = {e.id: e for e in events}
        result = ShuffleEngine(availability).shuffle(matrix, events, slots, members, mode)
        for (event_id, _), a in result.matrix.cells():
            if a.manual:
                continue
            event = by_id[event_id]
            assert not availability.is_unavailable(
                keys[a.member_id], event.date, event.effective_session
            )

    def test_deterministic(self, busy, mode):
        events, slots, members, availability, matrix = busy
        engine = ShuffleEngine(availability)
        first = engine.shuffle(matrix, events, slots, members, mode)
        second = engine.shuffle(matrix, events, slots, members, mode)
        assert first.matrix.to_records() == second.matrix.to_records()
        assert first.assignments_made == second.assignments_made

    def test_input_matrix_untouched(self, busy, mode):
        events, slots, members, availability, matrix = busy
        before = matrix.to_records()
        ShuffleEngine(availability).shuffle(matrix, events, slots, members, mode)
        assert matrix.to_records() == before

    def test_no_auto_cell_is_pinned(self, busy, mode):
        events, slots, members, availability, matrix = busy
        pinned_before = set(matrix.pinned_cells())
        result = ShuffleEngine(availability).shuffle(matrix, events, slots, members, mode)
        assert set(result.matrix.pinned_cells()) == pinned_before


class TestShuffleModes:
    def test_empty_only_is_idempotent(self, busy):
        events, slots, members, availability, matrix = busy
        engine = ShuffleEngine(availability)
        first = engine.shuffle(matrix, events, slots, members, ShuffleMode.EMPTY_ONLY)
        second = engine.shuffle(first.matrix, events, slots, members, ShuffleMode.EMPTY_ONLY)
        assert second.assignments_made == 0
        assert second.changed == 0
        assert second.matrix == first.matrix

    def test_all_fills_at_least_as_many_as_empty_only(self, busy):
        events, slots, members, availability, matrix = busy
        engine = ShuffleEngine(availability)
        full = engine.shuffle(matrix, events, slots, members, ShuffleMode.ALL)
        gaps = engine.shuffle(matrix, events, slots, members, ShuffleMode.EMPTY_ONLY)
        auto = lambda m: sum(1 for _, a in m.cells() if not a.manual)
        assert auto(full.matrix) >= auto(gaps.matrix)

    def test_empty_only_keeps_existing_auto_cells(self, busy):
        events, slots, members, availability, matrix = busy
        result = ShuffleEngine(availability).shuffle(
            matrix, events, slots, members, ShuffleMode.EMPTY_ONLY
        )
        assert result.matrix.get("e4", "sound") == Assignment(member_id="ben", manual=False)

    def test_all_mode_recomputes_auto_cells(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="keys", name="Keyboard", team_role_id="keys")]
        members = [member("a", {"vocals"}), member("b", {"keys"})]
        matrix = RosterMatrix()
        matrix.place("e1", "keys", "a")

        result = ShuffleEngine().shuffle(matrix, events, slots, members, "all")

        assert result.matrix.get("e1", "keys").member_id == "b"
        assert result.changed == 1

    def test_rerun_of_all_mode_reports_no_change(self, worship):
        events, slots, members, availability = worship
        engine = ShuffleEngine(availability)
        first = engine.shuffle(RosterMatrix(), events, slots, members, "all")
        second = engine.shuffle(first.matrix, events, slots, members, "all")
        assert second.assignments_made == first.assignments_made
        assert second.changed == 0

    def test_mode_accepts_strings(self, worship):
        events, slots, members, availability = worship
        result = ShuffleEngine(availability).shuffle(
            RosterMatrix(), events, slots, members, "empty_only"
        )
        assert result.assignments_made == 4

    def test_unknown_mode_rejected(self, worship):
        events, slots, members, availability = worship
        with pytest.raises(ValueError):
            ShuffleEngine(availability).shuffle(RosterMatrix(), events, slots, members, "some")


class TestShuffleRanking:
    def test_role_match_beats_lower_load(self):
        events = [Event(id=f"e{i}", date=D1) for i in range(3)]
        slots = [RoleSlot(id="keys", name="Keyboard", team_role_id="keys")]
        members = [member("vox", {"vocals"}), member("keys", {"keys"})]
        matrix = RosterMatrix()
        matrix.assign("e0", "keys", "keys")
        matrix.assign("e1", "keys", "keys")

        result = ShuffleEngine().shuffle(matrix, events, slots, members, "empty_only")

        assert result.matrix.get("e2", "keys").member_id == "keys"

    def test_non_matching_member_used_when_no_match_available(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="keys", name="Keyboard", team_role_id="keys")]
        members = [member("vox", {"vocals"}), member("keys", {"keys"})]
        availability = AvailabilityIndex([off("keys", D1)])

        result = ShuffleEngine(availability).shuffle(RosterMatrix(), events, slots, members)

        assert result.matrix.get("e1", "keys").member_id == "vox"

    def test_load_balanced_across_events(self):
        events = [Event(id=f"e{i}", date=D1) for i in range(3)]
        slots = [RoleSlot(id="usher", name="Usher")]
        members = [member("a"), member("b"), member("c")]

        result = ShuffleEngine().shuffle(RosterMatrix(), events, slots, members)

        assert [result.matrix.get(f"e{i}", "usher").member_id for i in range(3)] == [
            "a", "b", "c",
        ]

    def test_load_counts_pinned_cells(self):
        events = [Event(id="e1", date=D1), Event(id="e2", date=D2)]
        slots = [RoleSlot(id="usher", name="Usher")]
        members = [member("a"), member("b")]
        matrix = RosterMatrix()
        matrix.assign("e1", "usher", "a")

        result = ShuffleEngine().shuffle(matrix, events, slots, members)

        assert result.matrix.get("e2", "usher").member_id == "b"

    def test_longest_since_last_assignment_breaks_load_ties(self):
        events = [Event(id=f"e{i}", date=D1) for i in range(1, 4)]
        slots = [RoleSlot(id="usher", name="Usher")]
        members = [member("b"), member("a")]
        matrix = RosterMatrix()
        matrix.assign("e1", "usher", "a")
        matrix.assign("e2", "usher", "b")

        result = ShuffleEngine().shuffle(matrix, events, slots, members)

        assert result.matrix.get("e3", "usher").member_id == "a"

    def test_input_order_breaks_remaining_ties(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="usher", name="Usher")]
        members = [member("zed"), member("amy")]

        result = ShuffleEngine().shuffle(RosterMatrix(), events, slots, members)

        assert result.matrix.get("e1", "usher").member_id == "zed"

    def test_earlier_slots_get_scarce_members_first(self):
        events = [Event(id="e1", date=D1)]
        slots = [
            RoleSlot(id="first", name="First", team_role_id="r"),
            RoleSlot(id="second", name="Second", team_role_id="r"),
        ]
        members = [member("only", {"r"})]

        result = ShuffleEngine().shuffle(RosterMatrix(), events, slots, members)

        assert result.matrix.get("e1", "first").member_id == "only"
        assert result.matrix.get("e1", "second") is None
        assert result.unfilled == [("e1", "second")]

    def test_session_scoped_unavailability_respected(self):
        events = [
            Event(id="am", date=D1, time=time(9, 0)),
            Event(id="pm", date=D1, time=time(19, 0)),
        ]
        slots = [RoleSlot(id="usher", name="Usher")]
        members = [member("a", user_id="u-a"), member("b", user_id="u-b")]
        availability = AvailabilityIndex([off("u-a", D1, Session.MORNING)])

        result = ShuffleEngine(availability).shuffle(RosterMatrix(), events, slots, members)

        assert result.matrix.get("am", "usher").member_id == "b"
        assert result.matrix.get("pm", "usher").member_id == "a"

    def test_pinned_member_not_auto_placed_again_in_same_event(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="s1", name="One"), RoleSlot(id="s2", name="Two")]
        members = [member("a"), member("b")]
        matrix = RosterMatrix()
        matrix.assign("e1", "s2", "b")

        result = ShuffleEngine().shuffle(matrix, events, slots, members)

        assert result.matrix.get("e1", "s1").member_id == "a"

    def test_duplicate_members_considered_once(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="s1", name="One"), RoleSlot(id="s2", name="Two")]
        members = [member("a"), member("a")]

        result = ShuffleEngine().shuffle(RosterMatrix(), events, slots, members)

        assert result.assignments_made == 1


class TestShuffleDegradation:
    def test_empty_member_list(self, worship):
        events, slots, _, availability = worship
        result = ShuffleEngine(availability).shuffle(RosterMatrix(), events, slots, [])
        assert result.assignments_made == 0
        assert len(result.unfilled) == 4
        assert len(result.matrix) == 0

    def test_no_slots(self, worship):
        events, _, members, availability = worship
        result = ShuffleEngine(availability).shuffle(RosterMatrix(), events, [], members)
        assert result.assignments_made == 0
        assert result.unfilled == []

    def test_no_events(self, worship):
        _, slots, members, availability = worship
        result = ShuffleEngine(availability).shuffle(RosterMatrix(), [], slots, members)
        assert result.assignments_made == 0

    def test_slot_linked_to_unknown_role_still_filled(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="s1", name="Mystery", team_role_id="does-not-exist")]
        members = [member("a", {"vocals"})]
        result = ShuffleEngine().shuffle(RosterMatrix(), events, slots, members)
        assert result.matrix.get("e1", "s1").member_id == "a"

    def test_guest_without_roles_eligible_everywhere(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="keys", name="Keyboard", team_role_id="keys")]
        members = [member("vox", {"vocals"}), GuestMember(id="guest-9", name="Guest")]
        result = ShuffleEngine().shuffle(RosterMatrix(), events, slots, members)
        assert result.matrix.get("e1", "keys").member_id == "guest-9"

    def test_everyone_unavailable_leaves_cells_empty(self):
        events = [Event(id="e1", date=D1)]
        slots = [RoleSlot(id="s1", name="One")]
        members = [member("a")]
        availability = AvailabilityIndex([off("a", D1)])
        result = ShuffleEngine(availability).shuffle(RosterMatrix(), events, slots, members)
        assert result.assignments_made == 0
        assert result.unfilled == [("e1", "s1")]

    def test_cells_for_unknown_events_carried_or_dropped(self):
        matrix = RosterMatrix()
        matrix.assign("ghost", "s1", "a")
        matrix.place("ghost", "s2", "b")
        result = ShuffleEngine().shuffle(matrix, [], [], [], "all")
        assert result.matrix.get("ghost", "s1").manual is True
        assert result.matrix.get("ghost", "s2") is None


class TestClearAutoAssignments:
    def test_removes_only_auto_cells(self, busy):
        *_, matrix = busy
        result = clear_auto_assignments(matrix)
        assert result.removed_count == 1
        assert all(a.manual for _, a in result.matrix.cells())
        assert len(result.matrix) == len(matrix) - 1

    def test_does_not_reassign_or_mutate_input(self, busy):
        *_, matrix = busy
        before = matrix.to_records()
        clear_auto_assignments(matrix)
        assert matrix.to_records() == before

    def test_nothing_to_clear(self):
        assert clear_auto_assignments(RosterMatrix()).removed_count == 0


class TestCountChanged:
    def test_counts_added_removed_and_modified(self):
        before = RosterMatrix()
        before.place("e1", "s1", "a")
        before.place("e1", "s2", "b")
        after = RosterMatrix()
        after.place("e1", "s1", "a")
        after.place("e1", "s2", "c")
        after.place("e2", "s1", "d")
        assert count_changed(before, after) == 2
