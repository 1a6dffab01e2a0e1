"""
Session persistence and JSON import/export.

Provides:
- ``SessionData``: the exported document (nodes, edges, syllabus text).
- ``export_data`` / ``import_data``: JSON round trip preserving node ids.
- A ``Sessions`` SQLite table holding named session snapshots, with
  lock-retry on writes.
"""

import logging
import os
import sqlite3
import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from eduorbit.models import DependencyEdge, TopicNode

logger = logging.getLogger(__name__)

EXPORT_VERSION = "2.0"
DEFAULT_SESSION_KEY = "eduorbit-data"


class StorageError(Exception):
    """Raised when a session document cannot be read back."""


class SessionData(BaseModel):
    """A full snapshot of the graph plus the syllabus it came from."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = EXPORT_VERSION
    exported_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="exportedAt",
    )
    nodes: List[TopicNode]
    edges: List[DependencyEdge]
    syllabus_text: str = Field(default="", alias="syllabusText")


# =========================================================================
# JSON import / export
# =========================================================================


def export_data(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
    syllabus_text: str = "",
) -> str:
    """Serialise the graph to pretty JSON (camelCase keys)."""
    doc = SessionData(nodes=nodes, edges=edges, syllabus_text=syllabus_text)
    return doc.model_dump_json(by_alias=True, indent=2)


def import_data(json_string: str) -> SessionData:
    """Parse an exported document.

    Raises:
        StorageError: invalid JSON, missing ``nodes``/``edges``, or
            records that fail validation.
    """
    try:
        doc = SessionData.model_validate_json(json_string)
    except ValidationError as exc:
        raise StorageError(f"Invalid session document: {exc}") from exc
    logger.info(
        "Imported session v%s: %d topic(s), %d edge(s).",
        doc.version, len(doc.nodes), len(doc.edges),
    )
    return doc


# =========================================================================
# Schema
# =========================================================================

_CREATE_SESSIONS = """\
CREATE TABLE IF NOT EXISTS Sessions (
    key       TEXT PRIMARY KEY,
    payload   TEXT NOT NULL,
    saved_at  TIMESTAMP
);
"""


# =========================================================================
# Connection helper
# =========================================================================


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a new SQLite connection with WAL mode and row-factory enabled."""
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn


def migrate_db(db_path: str) -> None:
    """Create (or verify) the ``Sessions`` table."""
    conn = get_connection(db_path)
    try:
        conn.execute(_CREATE_SESSIONS)
        conn.commit()
        logger.info("Session store migration OK at %s", os.path.abspath(db_path))
    finally:
        conn.close()


# =========================================================================
# Lock-retry helper
# =========================================================================

_SQLITE_LOCK_RETRIES = 5
_SQLITE_LOCK_BASE_DELAY = 0.1


def _retry_on_lock(fn, *args, **kwargs):  # type: ignore[no-untyped-def]
    """Wrap *fn* with SQLite-lock retry."""
    for attempt in range(1, _SQLITE_LOCK_RETRIES + 1):
        try:
            return fn(*args, **kwargs)
        except sqlite3.OperationalError as exc:
            if "locked" in str(exc).lower() and attempt < _SQLITE_LOCK_RETRIES:
                delay = _SQLITE_LOCK_BASE_DELAY * (2 ** (attempt - 1))
                logger.warning(
                    "SQLite locked (attempt %d/%d), retrying in %.2fs",
                    attempt, _SQLITE_LOCK_RETRIES, delay,
                )
                time.sleep(delay)
            else:
                raise


# =========================================================================
# Session CRUD
# =========================================================================


def save_session(
    conn: sqlite3.Connection,
    data: SessionData,
    key: str = DEFAULT_SESSION_KEY,
) -> None:
    """Insert or replace the snapshot stored under *key*."""
    payload = data.model_dump_json(by_alias=True)
    now = datetime.now(timezone.utc).isoformat()

    def _do_save() -> None:
        conn.execute(
            """INSERT OR REPLACE INTO Sessions (key, payload, saved_at)
               VALUES (?, ?, ?)""",
            (key, payload, now),
        )
        conn.commit()

    _retry_on_lock(_do_save)
    logger.info(
        "Saved session %r: %d topic(s), %d edge(s).",
        key, len(data.nodes), len(data.edges),
    )


def load_session(
    conn: sqlite3.Connection,
    key: str = DEFAULT_SESSION_KEY,
) -> Optional[SessionData]:
    """Return the snapshot stored under *key*, or ``None``."""
    row = conn.execute(
        "SELECT payload FROM Sessions WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return import_data(row["payload"])


def delete_session(conn: sqlite3.Connection, key: str = DEFAULT_SESSION_KEY) -> bool:
    """Remove the snapshot under *key*; ``True`` if one existed."""

    def _do_delete() -> int:
        cursor = conn.execute("DELETE FROM Sessions WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount

    removed = _retry_on_lock(_do_delete) > 0
    logger.info("Session %r reset (existed=%s).", key, removed)
    return removed


def list_sessions(conn: sqlite3.Connection) -> List[str]:
    """Return stored session keys ordered by most recent save."""
    rows = conn.execute(
        "SELECT key FROM Sessions ORDER BY saved_at DESC"
    ).fetchall()
    return [r["key"] for r in rows]
