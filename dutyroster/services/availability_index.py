# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Availability lookup — pure computation, no side effects.

Resolution for (member, date, session):
    1. an all_day entry for the date wins regardless of session
    2. else a session-specific entry for date + session
    3. else available (unset is not a constraint)
"""

import datetime
from typing import Iterable, Optional

from dutyroster.models.domain import AvailabilityEntry, Session


class AvailabilityIndex:
    """Hash lookup over raw availability records."""

    def __init__(self, entries: Iterable[AvailabilityEntry] = ()) -> None:
        self._entries: dict[tuple[str, datetime.date, Session], AvailabilityEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: AvailabilityEntry) -> None:
        """Insert or replace the record for (member, date, session)."""
        self._entries[(entry.member_key, entry.date, entry.session)] = entry

    def lookup(
        self,
        member_key: str,
        date: datetime.date,
        session: Session = Session.ALL_DAY,
    ) -> Optional[AvailabilityEntry]:
        """Return the entry that decides availability, or None when unset."""
        all_day = self._entries.get((member_key, date, Session.ALL_DAY))
        if all_day is not None:
            return all_day
        if session is Session.ALL_DAY:
            return None
        return self._entries.get((member_key, date, session))

    def is_unavailable(
        self,
        member_key: str,
        date: datetime.date,
        session: Session = Session.ALL_DAY,
    ) -> bool:
        entry = self.lookup(member_key, date, session)
        return entry is not None and not entry.available

    def entries_for(self, member_key: str) -> list[AvailabilityEntry]:
        return sorted(
            (e for e in self._entries.values() if e.member_key == member_key),
            key=lambda e: (e.date, e.session.value),
        )

    def __len__(self) -> int:
        return len(self._entries)
