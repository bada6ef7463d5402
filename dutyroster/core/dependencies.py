# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from dutyroster.repositories.availability_repository import AvailabilityRepository
from dutyroster.repositories.history_repository import HistoryRepository
from dutyroster.repositories.roster_repository import RosterRepository
from dutyroster.services.availability_service import AvailabilityService
from dutyroster.services.persistence_client import PersistenceClient
from dutyroster.services.roster_service import RosterService

# ── Singleton repository instances (in-memory stores) ──
_roster_repo = RosterRepository()
_availability_repo = AvailabilityRepository()
_history_repo = HistoryRepository()
_persistence_client = PersistenceClient()

# ── Service instances (with injected dependencies) ──
_availability_service = AvailabilityService(
    availability_repo=_availability_repo,
    persistence_client=_persistence_client,
)
_roster_service = RosterService(
    roster_repo=_roster_repo,
    availability_service=_availability_service,
    history_repo=_history_repo,
    persistence_client=_persistence_client,
)


# ── FastAPI dependency functions ──
def get_roster_service() -> RosterService:
    return _roster_service


def get_availability_service() -> AvailabilityService:
    return _availability_service


def get_roster_repo() -> RosterRepository:
    return _roster_repo


def get_availability_repo() -> AvailabilityRepository:
    return _availability_repo


def get_history_repo() -> HistoryRepository:
    return _history_repo
