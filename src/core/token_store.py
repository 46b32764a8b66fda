"""SQLite-backed OAuth token store, one row per Replit user."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS oauth_tokens (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT UNIQUE,
    access_token TEXT NOT NULL,
    refresh_token TEXT,
    expires_at INTEGER,
    created_at INTEGER DEFAULT (strftime('%s', 'now')),
    updated_at INTEGER DEFAULT (strftime('%s', 'now'))
)
"""


@dataclass(frozen=True)
class OAuthToken:
    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < int(now if now is not None else time.time())


class TokenStore:
    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        with self._lock, self._conn:
            self._conn.execute(SCHEMA)

    def save(
        self,
        user_id: str,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in: Optional[int] = None,
    ) -> OAuthToken:
        expires_at = int(time.time()) + int(expires_in) if expires_in else None
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO oauth_tokens
                (user_id, access_token, refresh_token, expires_at, updated_at)
                VALUES (?, ?, ?, ?, strftime('%s', 'now'))
                """,
                (user_id, access_token, refresh_token, expires_at),
            )
        logger.info("Token stored successfully", extra={"user_id": user_id})
        return OAuthToken(user_id, access_token, refresh_token, expires_at)

    def get(self, user_id: str) -> Optional[OAuthToken]:
        with self._lock:
            row = self._conn.execute(
                "SELECT user_id, access_token, refresh_token, expires_at FROM oauth_tokens WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return OAuthToken(
            user_id=row["user_id"],
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            expires_at=row["expires_at"],
        )

    def close(self) -> None:
        with self._lock:
            self._conn.close()
