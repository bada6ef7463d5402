# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Availability records.
One record per (member_key, date, session); later writes replace earlier ones.
"""

import datetime
from typing import Iterable, Optional

from dutyroster.models.domain import AvailabilityEntry, Session

EntryKey = tuple[str, datetime.date, Session]


class AvailabilityRepository:
    """In-memory availability storage."""

    def __init__(self) -> None:
        self._store: dict[EntryKey, AvailabilityEntry] = {}

    # ── Read ──

    def get(
        self, member_key: str, date: datetime.date, session: Session
    ) -> Optional[AvailabilityEntry]:
        return self._store.get((member_key, date, session))

    def get_for_member(self, member_key: str) -> list[AvailabilityEntry]:
        return sorted(
            (e for e in self._store.values() if e.member_key == member_key),
            key=lambda e: (e.date, e.session.value),
        )

    def get_in_range(
        self,
        start: datetime.date,
        end: datetime.date,
        member_keys: Optional[Iterable[str]] = None,
    ) -> list[AvailabilityEntry]:
        keys = set(member_keys) if member_keys is not None else None
        return [
            e for e in self._store.values()
            if start <= e.date <= end and (keys is None or e.member_key in keys)
        ]

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def upsert(self, entry: AvailabilityEntry) -> None:
        self._store[(entry.member_key, entry.date, entry.session)] = entry

    def delete_for_member(self, member_key: str) -> int:
        keys = [k for k in self._store if k[0] == member_key]
        for k in keys:
            del self._store[k]
        return len(keys)

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
