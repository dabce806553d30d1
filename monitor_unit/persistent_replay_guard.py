"""
Persistent replay guard using SQLite for state management
Keeps used codes across restarts and across processes sharing the same file
"""
import sqlite3
import time
import os
from typing import Optional
import threading
from contextlib import contextmanager

from monitor_unit.replay_guard import ReplayGuard, validate_retention


class SqliteReplayGuard(ReplayGuard):
    def __init__(self, db_path: Optional[str] = None, retention_buckets: Optional[int] = None):
        self.db_path = db_path or os.getenv("OTP_REPLAY_DB_PATH") or os.path.join(os.getcwd(), "used_codes.db")
        self.retention_buckets = validate_retention(retention_buckets)
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        """Initialize the used codes database"""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS used_codes (
                    bucket INTEGER NOT NULL,
                    code TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    used_at REAL,
                    PRIMARY KEY (bucket, code, user_id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_used_codes_bucket
                ON used_codes(bucket)
            """)

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper cleanup"""
        conn = sqlite3.connect(self.db_path, timeout=10.0)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def is_used(self, bucket: int, code: str, user_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT 1 FROM used_codes WHERE bucket = ? AND code = ? AND user_id = ?",
                (bucket, code, user_id or "")
            )
            return cursor.fetchone() is not None

    def mark_used(self, bucket: int, code: str, user_id: str) -> None:
        self.claim(bucket, code, user_id)

    def claim(self, bucket: int, code: str, user_id: str) -> bool:
        """
        Insert the triple unless present. The primary key makes this a single
        atomic check-and-set even for other processes using the same file.
        """
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO used_codes (bucket, code, user_id, used_at) VALUES (?, ?, ?, ?)",
                    (bucket, code, user_id or "", time.time())
                )
                claimed = cursor.rowcount == 1

                if claimed and self.retention_buckets is not None:
                    self._cleanup_expired(conn)
                return claimed

    def _cleanup_expired(self, conn):
        """Remove codes that no verification window can reach anymore"""
        newest = conn.execute("SELECT MAX(bucket) FROM used_codes").fetchone()[0]
        if newest is not None:
            conn.execute(
                "DELETE FROM used_codes WHERE bucket < ?",
                (newest - self.retention_buckets,)
            )

    def prune(self, oldest_bucket: int) -> int:
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("DELETE FROM used_codes WHERE bucket < ?", (oldest_bucket,))
                return cursor.rowcount

    def count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM used_codes").fetchone()[0]
