"""SQLite-backed event sink."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from plotania.logging.models import LogEvent

DEFAULT_DB_PATH = Path.home() / ".plotania" / "events.db"


class EventStore:
    """SQLite-backed store for editor events with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS log_events (
                    id TEXT PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    document_id TEXT,
                    timestamp TEXT NOT NULL,
                    event_type TEXT NOT NULL,
                    tool_name TEXT,
                    selection_start INTEGER,
                    selection_end INTEGER,
                    doc_length INTEGER,
                    payload_json TEXT NOT NULL DEFAULT '{}'
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_log_events_session ON log_events (session_id, timestamp)"
            )

    def save_event(self, event: LogEvent) -> None:
        """Persist one event."""
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO log_events
                   (id, session_id, document_id, timestamp, event_type, tool_name,
                    selection_start, selection_end, doc_length, payload_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event.id,
                    event.session_id,
                    event.document_id,
                    event.timestamp.isoformat(),
                    event.event_type,
                    event.tool_name,
                    event.selection_start,
                    event.selection_end,
                    event.doc_length,
                    json.dumps(event.payload, ensure_ascii=False),
                ),
            )

    def get_events(
        self,
        session_id: str | None = None,
        event_type: str | None = None,
        limit: int = 50,
    ) -> list[LogEvent]:
        """Retrieve the newest events, optionally filtered by session and type."""
        clauses: list[str] = []
        params: list = []
        if session_id is not None:
            clauses.append("session_id = ?")
            params.append(session_id)
        if event_type is not None:
            clauses.append("event_type = ?")
            params.append(event_type)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM log_events {where} ORDER BY timestamp DESC LIMIT ?",
                params,
            ).fetchall()
        return [self._row_to_event(row) for row in rows]

    def count_by_type(self, session_id: str | None = None) -> dict[str, int]:
        """Number of stored events per event type."""
        with self._connect() as conn:
            if session_id is not None:
                rows = conn.execute(
                    "SELECT event_type, COUNT(*) FROM log_events WHERE session_id = ? GROUP BY event_type",
                    (session_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT event_type, COUNT(*) FROM log_events GROUP BY event_type"
                ).fetchall()
        return {event_type: count for event_type, count in rows}

    @staticmethod
    def _row_to_event(row: tuple) -> LogEvent:
        return LogEvent(
            id=row[0],
            session_id=row[1],
            document_id=row[2],
            timestamp=datetime.fromisoformat(row[3]),
            event_type=row[4],
            tool_name=row[5],
            selection_start=row[6],
            selection_end=row[7],
            doc_length=row[8],
            payload=json.loads(row[9] or "{}"),
        )
