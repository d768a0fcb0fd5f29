import logging
import os
import socket
from urllib.parse import urlparse

from gigsim.application.services.event_bus import EventBus
from gigsim.application.services.simulation_service import SimulationService
from gigsim.domain.repositories import GenreCatalogSource
from gigsim.infrastructure.game_data_client import BundledGenreCatalog, GameDataClient
from gigsim.infrastructure.inmemory.inmemory_snapshot_repo import InMemorySnapshotRepository
from gigsim.infrastructure.rival_generator import SeededRivalGenerator


logger = logging.getLogger(__name__)


def default_seed() -> int:
    try:
        return int(os.getenv("GIGSIM_SEED", "1"))
    except ValueError:
        logger.warning("GIGSIM_SEED is not an integer; using 1")
        return 1


def _looks_like_local_mysql_unreachable(database_url: str) -> bool:
    if not database_url:
        return False

    parsed = urlparse(database_url)
    if not parsed.scheme.startswith("mysql"):
        return False

    host = (parsed.hostname or "").strip().lower()
    if host not in {"localhost", "127.0.0.1", "::1"}:
        return False

    port = parsed.port or 3306
    timeout = float(os.getenv("GIGSIM_DB_CONNECT_TIMEOUT_S", "0.35"))

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return False
    except OSError:
        return True


def _build_genre_source() -> GenreCatalogSource:
    base_url = os.getenv("GIGSIM_GAME_DATA_URL", "").strip()
    if not base_url:
        return BundledGenreCatalog()

    timeout = float(os.getenv("GIGSIM_HTTP_TIMEOUT_S", "2"))
    retries = int(os.getenv("GIGSIM_HTTP_RETRIES", "1"))
    backoff_seconds = float(os.getenv("GIGSIM_HTTP_BACKOFF_S", "0.1"))
    return GameDataClient(base_url, timeout=timeout, retries=retries, backoff_seconds=backoff_seconds)


def _build_service(snapshot_repo) -> SimulationService:
    return SimulationService(
        snapshot_repo,
        event_bus=EventBus(),
        genre_source=_build_genre_source(),
        rival_generator=SeededRivalGenerator(),
    )


def _build_sql_simulation_service() -> SimulationService:
    from gigsim.infrastructure.db.sql.sql_snapshot_repo import SqlSnapshotRepository

    snapshot_repo = SqlSnapshotRepository()
    try:
        snapshot_repo.verify_schema()
    except Exception as exc:
        raise RuntimeError(f"Database schema check failed: {exc}") from exc
    return _build_service(snapshot_repo)


def create_simulation_service() -> SimulationService:
    database_url = os.getenv("GIGSIM_DATABASE_URL")
    if database_url:
        if _looks_like_local_mysql_unreachable(database_url):
            logger.warning("MySQL appears unreachable, falling back to in-memory.")
            return _build_service(InMemorySnapshotRepository())
        try:
            return _build_sql_simulation_service()
        except Exception as exc:
            logger.warning("Database unavailable, falling back to in-memory.", extra={"error": str(exc)})

    return _build_service(InMemorySnapshotRepository())
