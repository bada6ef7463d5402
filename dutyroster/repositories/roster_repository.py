# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Roster data access.
Encapsulates all read/write operations on the rosters in-memory store.
NO business rules here — pure CRUD.
"""

from typing import Any, Optional


class RosterRepository:
    """In-memory roster storage keyed by roster id."""

    def __init__(self) -> None:
        self._store: dict[str, dict[str, Any]] = {}

    # ── Read ──

    def get_all(self) -> list[dict[str, Any]]:
        return list(self._store.values())

    def get(self, roster_id: str) -> Optional[dict[str, Any]]:
        return self._store.get(roster_id)

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, roster_id: str, roster: dict[str, Any]) -> None:
        self._store[roster_id] = roster

    def delete(self, roster_id: str) -> Optional[dict[str, Any]]:
        return self._store.pop(roster_id, None)

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
