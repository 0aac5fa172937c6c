#!/usr/bin/env python3
"""SQLite‑backed chat history keyed by message id.

Every operation is non‑fatal: failures are turned into a human‑readable
``status`` string (also logged) and the chat keeps running.
"""

from __future__ import annotations

import sqlite3                                  # Durable history store
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .protocol import Message
from .util import LOG

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chat_history (
    id           INTEGER PRIMARY KEY,
    ip           TEXT NOT NULL,
    message_text TEXT NOT NULL
)
"""

STATUS_READY = "DB: ready."
STATUS_OFFLINE = "DB! offline"
STATUS_APPENDED = "DB: appended."
STATUS_CLEARED = "DB: cleared."


class HistoryStore:
    """Append log of ``(ip, text)`` rows, queryable by message id.

    Passing ``None`` as *db_path* gives an offline store: reads come back
    empty and writes are silently skipped.
    """

    def __init__(self, db_path: Union[str, Path, None]) -> None:
        self.path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        if db_path is None:
            self.status = STATUS_OFFLINE
        else:
            try:
                self._conn = sqlite3.connect(str(db_path))
                self.status = STATUS_READY
            except sqlite3.Error as exc:
                self.status = f"DB! {exc}"
        LOG.info("%s", self.status)

    @property
    def online(self) -> bool:
        return self._conn is not None

    # ---------------------------------------------------------------- writes
    def create(self) -> str:
        """Create the history table if missing."""
        if self._conn is None:
            return self.status
        try:
            with self._conn:
                self._conn.execute(_SCHEMA)
            self.status = STATUS_READY
        except sqlite3.Error as exc:
            self.status = f"DB! {exc}"
            LOG.warning("%s", self.status)
        return self.status

    def append(self, ip: str, message: Message) -> str:
        """Store *message* under its id. Duplicate ids fail (status only)."""
        if self._conn is None:
            return self.status
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO chat_history (id, ip, message_text) VALUES (?, ?, ?)",
                    (message.id, ip, message.read_text()),
                )
            self.status = STATUS_APPENDED
            LOG.debug("%s", self.status)
        except sqlite3.Error as exc:
            self.status = f"DB! {exc}"
            LOG.warning("%s", self.status)
        return self.status

    def clear(self) -> str:
        """Drop every stored row."""
        if self._conn is None:
            return self.status
        try:
            with self._conn:
                self._conn.execute("DROP TABLE IF EXISTS chat_history")
                self._conn.execute(_SCHEMA)
            self.status = STATUS_CLEARED
            LOG.info("%s", self.status)
        except sqlite3.Error as exc:
            self.status = f"DB! {exc}"
            LOG.warning("%s", self.status)
        return self.status

    # ----------------------------------------------------------------- reads
    def get_all(self) -> List[Tuple[str, str]]:
        """Return every stored ``(ip, text)`` pair ordered by id."""
        if self._conn is None:
            return []
        try:
            rows = self._conn.execute(
                "SELECT ip, message_text FROM chat_history ORDER BY id"
            ).fetchall()
        except sqlite3.Error as exc:
            self.status = f"DB! {exc}"
            LOG.warning("%s", self.status)
            return []
        return [(ip, text) for ip, text in rows]

    def get_by_id(self, msg_id: int) -> Optional[str]:
        if self._conn is None:
            return None
        try:
            row = self._conn.execute(
                "SELECT message_text FROM chat_history WHERE id = ?", (msg_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            self.status = f"DB! {exc}"
            LOG.warning("%s", self.status)
            return None
        return row[0] if row else None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
