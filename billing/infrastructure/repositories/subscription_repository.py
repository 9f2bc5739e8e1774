"""Repository for SubscriptionRecord persistence."""

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional

from billing.domain.models.subscription import SubscriptionRecord, SubscriptionStatus

_PAYMENT_INTENT_MATCH = (
    "(json_extract(latest_invoice, '$.payment_intent.id') = ? "
    "OR json_extract(latest_invoice, '$.payment_intent') = ?)"
)


class SubscriptionRepository:
    """Repository for managing subscription documents in SQLite.

    Semi-structured Stripe fields are stored as JSON text. Writes are last
    write wins; there is no optimistic locking between concurrent webhooks.
    """

    UPDATABLE_FIELDS = (
        "subscription_schedule_id",
        "subscription_start",
        "subscription_end",
        "currency",
        "price_id",
        "recurrency",
        "customer",
        "latest_invoice",
        "status",
    )
    JSON_FIELDS = ("customer", "latest_invoice")

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_table()

    def _initialize_table(self) -> None:
        """Create subscriptions table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    subscription_id TEXT UNIQUE NOT NULL,
                    subscription_schedule_id TEXT,
                    user_id INTEGER NOT NULL,
                    subscription_start INTEGER,
                    subscription_end INTEGER,
                    currency TEXT NOT NULL,
                    price_id TEXT NOT NULL,
                    recurrency TEXT,
                    customer TEXT,
                    latest_invoice TEXT NOT NULL DEFAULT '{}',
                    status TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_subscriptions_user_id ON subscriptions(user_id)"
            )
            conn.commit()

    def create(self, record: SubscriptionRecord) -> SubscriptionRecord:
        """Create a new subscription record."""
        now = datetime.utcnow().isoformat()

        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO subscriptions (
                    subscription_id, subscription_schedule_id, user_id,
                    subscription_start, subscription_end, currency, price_id,
                    recurrency, customer, latest_invoice, status,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.subscription_id,
                    record.subscription_schedule_id,
                    record.user_id,
                    record.subscription_start,
                    record.subscription_end,
                    record.currency,
                    record.price_id,
                    record.recurrency,
                    json.dumps(record.customer),
                    json.dumps(record.latest_invoice or {}),
                    _status_value(record.status),
                    now,
                    now,
                ),
            )
            conn.commit()

        return self.get_by_subscription_id(record.subscription_id)

    def get_by_subscription_id(self, subscription_id: str) -> Optional[SubscriptionRecord]:
        """Get subscription by Stripe subscription ID."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT * FROM subscriptions WHERE subscription_id = ?",
                (subscription_id,),
            )
            row = cursor.fetchone()

        if not row:
            return None

        return self._row_to_subscription(row)

    def get_by_payment_intent_id(self, payment_intent_id: str) -> Optional[SubscriptionRecord]:
        """Get the subscription whose latest invoice carries this payment intent."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                f"SELECT * FROM subscriptions WHERE {_PAYMENT_INTENT_MATCH}",
                (payment_intent_id, payment_intent_id),
            )
            row = cursor.fetchone()

        if not row:
            return None

        return self._row_to_subscription(row)

    def list_by_user_id(self, user_id: int) -> List[SubscriptionRecord]:
        """List all subscriptions for a user."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                """
                SELECT * FROM subscriptions
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,),
            )
            rows = cursor.fetchall()

        return [self._row_to_subscription(row) for row in rows]

    def update(self, subscription_id: str, **fields: Any) -> Optional[SubscriptionRecord]:
        """Overwrite the given fields; returns None when no record matches."""
        unknown = set(fields) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update subscription fields: {', '.join(sorted(unknown))}")
        if not fields:
            return self.get_by_subscription_id(subscription_id)

        assignments = []
        values: List[Any] = []
        for name, value in fields.items():
            if name in self.JSON_FIELDS:
                value = json.dumps(value)
            elif name == "status":
                value = _status_value(value)
            assignments.append(f"{name} = ?")
            values.append(value)
        assignments.append("updated_at = ?")
        values.append(datetime.utcnow().isoformat())
        values.append(subscription_id)

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE subscriptions SET {', '.join(assignments)} WHERE subscription_id = ?",
                values,
            )
            conn.commit()
            updated = cursor.rowcount

        if not updated:
            return None

        return self.get_by_subscription_id(subscription_id)

    def update_from_payment_intent(
        self, payment_intent: Dict[str, Any]
    ) -> Optional[SubscriptionRecord]:
        """Store a payment intent on the subscription it correlates to.

        The latest invoice keeps its other keys; only its payment intent and
        the record status are overwritten.
        """
        payment_intent_id = payment_intent["id"]
        now = datetime.utcnow().isoformat()

        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                f"SELECT subscription_id, latest_invoice, status FROM subscriptions WHERE {_PAYMENT_INTENT_MATCH}",
                (payment_intent_id, payment_intent_id),
            ).fetchone()
            if not row:
                return None

            latest_invoice = _load_json(row["latest_invoice"]) or {}
            latest_invoice["payment_intent"] = payment_intent
            conn.execute(
                """
                UPDATE subscriptions
                SET latest_invoice = ?, status = ?, updated_at = ?
                WHERE subscription_id = ?
                """,
                (
                    json.dumps(latest_invoice),
                    payment_intent.get("status") or row["status"],
                    now,
                    row["subscription_id"],
                ),
            )
            conn.commit()
            subscription_id = row["subscription_id"]

        return self.get_by_subscription_id(subscription_id)

    def cancel(self, subscription_id: str) -> Optional[SubscriptionRecord]:
        """Mark a subscription as canceled. Canceling twice is a no-op."""
        return self.update(subscription_id, status=SubscriptionStatus.canceled)

    def _row_to_subscription(self, row: sqlite3.Row) -> SubscriptionRecord:
        """Convert database row to SubscriptionRecord entity."""
        return SubscriptionRecord(
            subscription_id=row["subscription_id"],
            subscription_schedule_id=row["subscription_schedule_id"],
            user_id=row["user_id"],
            subscription_start=row["subscription_start"],
            subscription_end=row["subscription_end"],
            currency=row["currency"],
            price_id=row["price_id"],
            recurrency=row["recurrency"],
            customer=_load_json(row["customer"]),
            latest_invoice=_load_json(row["latest_invoice"]) or {},
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


def _status_value(status: Any) -> Optional[str]:
    if isinstance(status, SubscriptionStatus):
        return status.value
    return status


def _load_json(value: Optional[str]) -> Any:
    if value is None:
        return None
    return json.loads(value)
