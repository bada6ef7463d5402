# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Availability management — member-declared dates and sessions.
Feeds the AvailabilityIndex used by the shuffle engine and conflict scan.
"""

import datetime
from typing import Any, Iterable

from dutyroster.core.config import settings
from dutyroster.core.logging import get_logger
from dutyroster.models.domain import AvailabilityEntry, Event, Session
from dutyroster.repositories.availability_repository import AvailabilityRepository
from dutyroster.services.availability_index import AvailabilityIndex
from dutyroster.services.persistence_client import PersistenceClient

logger = get_logger(__name__)


class AvailabilityService:
    """Business logic for availability records."""

    def __init__(
        self,
        availability_repo: AvailabilityRepository,
        persistence_client: PersistenceClient,
    ) -> None:
        self._availability = availability_repo
        self._backend = persistence_client

    # ── Commands ──

    def set_availability(
        self,
        member_key: str,
        date: datetime.date,
        available: bool,
        session: Session = Session.ALL_DAY,
        reason: str = "",
    ) -> AvailabilityEntry:
        """Record one date/session. A reason is only kept for unavailability."""
        entry = AvailabilityEntry(
            member_key=member_key,
            date=date,
            session=session,
            available=available,
            reason="" if available else reason,
        )
        self._availability.upsert(entry)
        return entry

    def toggle_availability(
        self,
        member_key: str,
        date: datetime.date,
        session: Session = Session.ALL_DAY,
        reason: str = "",
    ) -> AvailabilityEntry:
        """Unset or available becomes unavailable; unavailable becomes available."""
        current = self._availability.get(member_key, date, session)
        currently_available = current.available if current is not None else True
        return self.set_availability(
            member_key, date, not currently_available, session, reason
        )

    def set_range(
        self,
        member_key: str,
        start: datetime.date,
        end: datetime.date,
        available: bool,
        session: Session = Session.ALL_DAY,
        reason: str = "",
    ) -> list[AvailabilityEntry]:
        """Apply the same availability to every day in [start, end]."""
        if end < start:
            raise ValueError("Range end must not be before range start")
        if (end - start).days + 1 > settings.MAX_AVAILABILITY_RANGE_DAYS:
            raise ValueError(
                f"Range longer than {settings.MAX_AVAILABILITY_RANGE_DAYS} days"
            )
        entries: list[AvailabilityEntry] = []
        day = start
        while day <= end:
            entries.append(self.set_availability(member_key, day, available, session, reason))
            day += datetime.timedelta(days=1)
        logger.info(
            "Availability range set: member=%s, days=%d, available=%s",
            member_key, len(entries), available,
        )
        return entries

    def clear_member(self, member_key: str) -> int:
        removed = self._availability.delete_for_member(member_key)
        logger.info("Availability cleared: member=%s, removed=%d", member_key, removed)
        return removed

    def import_from_backend(
        self,
        member_keys: list[str],
        start: datetime.date,
        end: datetime.date,
    ) -> int:
        """Pull a snapshot from the hosted backend into the local store."""
        entries = self._backend.fetch_availability(member_keys, start, end)
        for entry in entries:
            self._availability.upsert(entry)
        return len(entries)

    # ── Queries ──

    def get_member(self, member_key: str) -> list[AvailabilityEntry]:
        return self._availability.get_for_member(member_key)

    def stats(self, member_key: str) -> dict[str, Any]:
        entries = self._availability.get_for_member(member_key)
        available = sum(1 for e in entries if e.available)
        return {
            "member_key": member_key,
            "available": available,
            "unavailable": len(entries) - available,
            "total": len(entries),
        }

    def build_index(
        self,
        events: Iterable[Event],
        member_keys: Iterable[str] | None = None,
    ) -> AvailabilityIndex:
        """Index covering the date span of the given events."""
        dates = [e.date for e in events]
        if not dates:
            return AvailabilityIndex()
        return AvailabilityIndex(
            self._availability.get_in_range(min(dates), max(dates), member_keys)
        )
