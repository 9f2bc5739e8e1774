"""Repository recording which Stripe events have been handled."""

import sqlite3
from datetime import datetime
from typing import Optional

PROCESSING = "processing"
PROCESSED = "processed"
FAILED = "failed"


class WebhookEventRepository:
    """Deduplicates Stripe redeliveries by event ID.

    An event is claimed once; a claim is only granted again after the
    previous attempt was marked as failed.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_table()

    def _initialize_table(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS webhook_events (
                    event_id TEXT PRIMARY KEY,
                    event_type TEXT NOT NULL,
                    status TEXT NOT NULL,
                    attempts INTEGER NOT NULL DEFAULT 1,
                    error TEXT,
                    received_at TEXT NOT NULL,
                    processed_at TEXT
                )
            """)
            conn.commit()

    def claim(self, event_id: str, event_type: str) -> bool:
        """Return True if the caller should process this event."""
        now = datetime.utcnow().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO webhook_events (event_id, event_type, status, received_at)
                VALUES (?, ?, ?, ?)
                """,
                (event_id, event_type, PROCESSING, now),
            )
            if cursor.rowcount:
                conn.commit()
                return True

            cursor = conn.execute(
                """
                UPDATE webhook_events
                SET status = ?, attempts = attempts + 1, error = NULL, received_at = ?
                WHERE event_id = ? AND status = ?
                """,
                (PROCESSING, now, event_id, FAILED),
            )
            conn.commit()
            return bool(cursor.rowcount)

    def mark_processed(self, event_id: str) -> None:
        now = datetime.utcnow().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "UPDATE webhook_events SET status = ?, processed_at = ? WHERE event_id = ?",
                (PROCESSED, now, event_id),
            )
            conn.commit()

    def mark_failed(self, event_id: str, error: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "UPDATE webhook_events SET status = ?, error = ? WHERE event_id = ?",
                (FAILED, error, event_id),
            )
            conn.commit()

    def get_status(self, event_id: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT status FROM webhook_events WHERE event_id = ?", (event_id,)
            ).fetchone()
        return row[0] if row else None
