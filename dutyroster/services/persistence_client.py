# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Persistence client — calls to the hosted roster backend.
Handles HTTP calls with timeout & fault tolerance.
"""

import datetime
from typing import Any

import httpx

from dutyroster.core.config import settings
from dutyroster.core.logging import get_logger
from dutyroster.models.domain import AvailabilityEntry

logger = get_logger(__name__)


class PersistenceClient:
    """Upserts saved assignments and fetches availability snapshots."""

    def upsert_assignments(self, roster_id: str, rows: list[dict[str, Any]]) -> bool:
        """Push assignment rows. Failures are logged and reported, never raised."""
        try:
            with httpx.Client(timeout=settings.PERSISTENCE_TIMEOUT) as client:
                resp = client.post(
                    f"{settings.PERSISTENCE_SERVICE_URL}/api/v1/rosters/{roster_id}/assignments",
                    json={"assignments": rows},
                )
                resp.raise_for_status()
            logger.info(
                "Assignments persisted: roster=%s, rows=%d, status=%d",
                roster_id, len(rows), resp.status_code,
            )
            return True
        except httpx.HTTPError as exc:
            logger.warning("Assignment upsert failed: roster=%s, error=%s", roster_id, exc)
            return False

    def fetch_availability(
        self,
        member_keys: list[str],
        start: datetime.date,
        end: datetime.date,
    ) -> list[AvailabilityEntry]:
        """Fetch raw availability rows. Returns [] when the backend is unreachable."""
        try:
            with httpx.Client(timeout=settings.PERSISTENCE_TIMEOUT) as client:
                resp = client.get(
                    f"{settings.PERSISTENCE_SERVICE_URL}/api/v1/availability",
                    params={
                        "members": ",".join(member_keys),
                        "start": start.isoformat(),
                        "end": end.isoformat(),
                    },
                )
                resp.raise_for_status()
                rows = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Availability fetch failed: %s", exc)
            return []

        if not isinstance(rows, list):
            logger.warning("Availability fetch returned %s, expected a list", type(rows).__name__)
            return []

        entries: list[AvailabilityEntry] = []
        skipped = 0
        for row in rows:
            try:
                entries.append(
                    AvailabilityEntry(
                        member_key=row["user_id"],
                        date=row["date"],
                        session=row.get("session") or "all_day",
                        available=row["is_available"],
                        reason=row.get("reason") or "",
                    )
                )
            except (KeyError, TypeError, AttributeError, ValueError) as exc:
                skipped += 1
                logger.warning("Skipping malformed availability row: %s", exc)
        logger.info("Availability fetched: rows=%d, skipped=%d", len(entries), skipped)
        return entries
