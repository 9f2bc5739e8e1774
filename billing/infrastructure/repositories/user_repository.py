"""Repository for User persistence."""

import sqlite3
from datetime import datetime
from typing import Optional

from billing.domain.models.user import User


class UserRepository:
    """Repository for reading the host application's users from SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_table()

    def _initialize_table(self) -> None:
        """Create users table if it doesn't exist and migrate schema if needed."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT UNIQUE NOT NULL,
                    first_name TEXT NOT NULL DEFAULT '',
                    last_name TEXT NOT NULL DEFAULT '',
                    payment_id TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Older user tables predate Stripe customers
            cursor = conn.execute("PRAGMA table_info(users)")
            existing_columns = {row[1] for row in cursor.fetchall()}
            if "payment_id" not in existing_columns:
                conn.execute("ALTER TABLE users ADD COLUMN payment_id TEXT")

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_users_email ON users(email)"
            )
            conn.commit()

    def create(self, email: str, first_name: str, last_name: str = "") -> User:
        """Create a new user."""
        now = datetime.utcnow().isoformat()
        email_clean = email.strip().lower()

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (email, first_name, last_name, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (email_clean, first_name, last_name, now, now),
            )
            conn.commit()
            user_id = cursor.lastrowid

        return User(
            id=user_id,
            email=email_clean,
            first_name=first_name,
            last_name=last_name,
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT * FROM users WHERE id = ?", (user_id,)
            )
            row = cursor.fetchone()

        if not row:
            return None

        return self._row_to_user(row)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email, ignoring case."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
            )
            row = cursor.fetchone()

        if not row:
            return None

        return self._row_to_user(row)

    def update_payment_id(self, user_id: int, payment_id: str) -> Optional[User]:
        """Store the Stripe customer ID of a user."""
        now = datetime.utcnow().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "UPDATE users SET payment_id = ?, updated_at = ? WHERE id = ?",
                (payment_id, now, user_id),
            )
            conn.commit()

        return self.get_by_id(user_id)

    def _row_to_user(self, row: sqlite3.Row) -> User:
        """Convert database row to User entity."""
        return User(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            payment_id=row["payment_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
