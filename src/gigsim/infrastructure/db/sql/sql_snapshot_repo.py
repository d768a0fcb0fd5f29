from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import text

from gigsim.domain.models.snapshot import Snapshot
from gigsim.domain.repositories import SnapshotRepository
from gigsim.infrastructure import snapshot_codec
from .connection import SessionLocal


logger = logging.getLogger(__name__)

TABLE_NAME = "simulation_snapshot"


def _dialect(session) -> str:
    return session.bind.dialect.name if session.bind is not None else "mysql"


def _table_columns(session, table_name: str) -> set[str]:
    if _dialect(session) == "sqlite":
        rows = session.execute(text(f"PRAGMA table_info({table_name})")).all()
        return {str(row.name).lower() for row in rows}

    rows = session.execute(
        text(
            """
            SELECT COLUMN_NAME
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_NAME = :table_name
            """
        ),
        {"table_name": str(table_name)},
    ).all()
    return {str(row.COLUMN_NAME).lower() for row in rows}


def ensure_schema(session) -> None:
    if _dialect(session) == "mysql":
        session.execute(
            text(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    session_id VARCHAR(120) PRIMARY KEY,
                    week INT NOT NULL DEFAULT 0,
                    money INT NOT NULL DEFAULT 0,
                    payload_json LONGTEXT NOT NULL
                )
                """
            )
        )
    else:
        session.execute(
            text(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    session_id TEXT PRIMARY KEY,
                    week INTEGER NOT NULL DEFAULT 0,
                    money INTEGER NOT NULL DEFAULT 0,
                    payload_json TEXT NOT NULL
                )
                """
            )
        )


class SqlSnapshotRepository(SnapshotRepository):
    """Stores each session's snapshot as one JSON row keyed by session id."""

    def __init__(self, session_factory=None, *, create_schema: bool = True) -> None:
        self._session_factory = session_factory
        self._create_schema = create_schema
        self._schema_ready = False

    def _sessions(self):
        return self._session_factory or SessionLocal

    def _prepare(self, session) -> None:
        if self._schema_ready or not self._create_schema:
            return
        ensure_schema(session)
        self._schema_ready = True

    def load(self, session_id: str) -> Optional[Snapshot]:
        with self._sessions().begin() as session:
            self._prepare(session)
            row = session.execute(
                text(f"SELECT payload_json FROM {TABLE_NAME} WHERE session_id = :sid"),
                {"sid": str(session_id)},
            ).first()
        if not row:
            return None
        return snapshot_codec.loads(row.payload_json)

    def save(self, session_id: str, snapshot: Snapshot) -> None:
        params = {
            "sid": str(session_id),
            "week": int(snapshot.week),
            "money": int(snapshot.money),
            "payload": snapshot_codec.dumps(snapshot),
        }
        with self._sessions().begin() as session:
            self._prepare(session)
            if _dialect(session) == "mysql":
                statement = text(
                    f"""
                    INSERT INTO {TABLE_NAME} (session_id, week, money, payload_json)
                    VALUES (:sid, :week, :money, :payload)
                    ON DUPLICATE KEY UPDATE
                        week = VALUES(week),
                        money = VALUES(money),
                        payload_json = VALUES(payload_json)
                    """
                )
            else:
                statement = text(
                    f"""
                    INSERT INTO {TABLE_NAME} (session_id, week, money, payload_json)
                    VALUES (:sid, :week, :money, :payload)
                    ON CONFLICT(session_id) DO UPDATE SET
                        week = excluded.week,
                        money = excluded.money,
                        payload_json = excluded.payload_json
                    """
                )
            session.execute(statement, params)
        logger.debug("Snapshot saved", extra={"session_id": str(session_id), "week": int(snapshot.week)})

    def list_sessions(self) -> List[str]:
        with self._sessions().begin() as session:
            self._prepare(session)
            rows = session.execute(text(f"SELECT session_id FROM {TABLE_NAME} ORDER BY session_id")).all()
        return [str(row.session_id) for row in rows]

    def verify_schema(self) -> None:
        """Fail fast when the configured database cannot be reached."""

        with self._sessions().begin() as session:
            self._prepare(session)
            columns = _table_columns(session, TABLE_NAME)
        if "payload_json" not in columns:
            raise RuntimeError(f"{TABLE_NAME} is missing the payload_json column")
