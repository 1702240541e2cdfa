"""SQLite database layer for events, profiles and match decisions."""

import json
import sqlite3
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from src.core.schemas import Candidate, Decision, Item

_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS events (
    id                  TEXT PRIMARY KEY,
    title               TEXT NOT NULL,
    description         TEXT NOT NULL DEFAULT '',
    category            TEXT NOT NULL,
    date                TEXT NOT NULL,
    venue_name          TEXT NOT NULL DEFAULT '',
    price               REAL NOT NULL DEFAULT 0.0,
    available_capacity  INTEGER NOT NULL DEFAULT 0,
    status              TEXT NOT NULL DEFAULT 'active'
);
"""

_PROFILES_TABLE = """
CREATE TABLE IF NOT EXISTS profiles (
    id          TEXT PRIMARY KEY,
    username    TEXT,
    first_name  TEXT,
    last_name   TEXT,
    photo_url   TEXT,
    bio         TEXT,
    interests   TEXT NOT NULL DEFAULT '[]'
);
"""

_DECISIONS_TABLE = """
CREATE TABLE IF NOT EXISTS decisions (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    sender_id   TEXT NOT NULL,
    receiver_id TEXT NOT NULL,
    status      TEXT NOT NULL,
    decided_at  TEXT NOT NULL,
    UNIQUE(sender_id, receiver_id)
);
"""

# Stored match status per decision, as the matches table of the app expects.
DECISION_STATUS: dict[Decision, str] = {
    Decision.ACCEPT: "pending",
    Decision.REJECT: "disliked",
}


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_EVENTS_TABLE)
    conn.execute(_PROFILES_TABLE)
    conn.execute(_DECISIONS_TABLE)
    conn.commit()
    return conn


def upsert_event(conn: sqlite3.Connection, item: Item) -> None:
    """Insert an event or replace the stored row with the same id."""
    conn.execute(
        """
        INSERT OR REPLACE INTO events
            (id, title, description, category, date, venue_name,
             price, available_capacity, status)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            item.id,
            item.title,
            item.description,
            item.category.value,
            item.date.isoformat(),
            item.venue_name,
            item.price,
            item.available_capacity,
            item.status,
        ),
    )
    conn.commit()


def fetch_active_events(conn: sqlite3.Connection) -> list[Item]:
    """Return active events with seats left, earliest first."""
    rows = conn.execute(
        """
        SELECT * FROM events
        WHERE status = 'active' AND available_capacity > 0
        ORDER BY date ASC, id ASC
        """
    ).fetchall()
    return [Item.model_validate(dict(row)) for row in rows]


def upsert_profile(conn: sqlite3.Connection, candidate: Candidate) -> None:
    """Insert a profile or replace the stored row with the same id."""
    conn.execute(
        """
        INSERT OR REPLACE INTO profiles
            (id, username, first_name, last_name, photo_url, bio, interests)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            candidate.id,
            candidate.username,
            candidate.first_name,
            candidate.last_name,
            candidate.photo_url,
            candidate.bio,
            json.dumps(sorted(candidate.interests)),
        ),
    )
    conn.commit()


def fetch_next_profile(
    conn: sqlite3.Connection,
    excluding: Iterable[str],
) -> Candidate | None:
    """Return the first stored profile whose id is not excluded, or None."""
    excluded = sorted(set(excluding))
    query = "SELECT * FROM profiles"
    if excluded:
        placeholders = ", ".join("?" for _ in excluded)
        query += f" WHERE id NOT IN ({placeholders})"
    query += " ORDER BY rowid LIMIT 1"
    row = conn.execute(query, excluded).fetchone()
    if row is None:
        return None
    data = dict(row)
    data["interests"] = frozenset(json.loads(data["interests"] or "[]"))
    return Candidate.model_validate(data)


def insert_decision(
    conn: sqlite3.Connection,
    sender_id: str,
    receiver_id: str,
    outcome: Decision,
    decided_at: datetime | None = None,
) -> bool:
    """Record a decision, ignoring repeats of the same (sender, receiver) pair.

    Returns True if a new row was inserted, False if it was a duplicate.
    """
    try:
        conn.execute(
            """
            INSERT INTO decisions (sender_id, receiver_id, status, decided_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                sender_id,
                receiver_id,
                DECISION_STATUS[outcome],
                (decided_at or datetime.now()).isoformat(),
            ),
        )
        conn.commit()
        return True
    except sqlite3.IntegrityError:
        return False


def get_decided_ids(conn: sqlite3.Connection, sender_id: str) -> set[str]:
    """Return ids of every profile this sender has already decided on."""
    rows = conn.execute(
        "SELECT receiver_id FROM decisions WHERE sender_id = ?",
        (sender_id,),
    ).fetchall()
    return {row["receiver_id"] for row in rows}
