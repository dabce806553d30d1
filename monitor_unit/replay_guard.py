"""
Replay tracking for accepted one-time codes.
A code accepted for (interval, user) is recorded so it cannot be accepted again.
"""
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Set, Tuple

from auth_control.otp_errors import InvalidConfigurationError


def validate_retention(retention_buckets: Optional[int]) -> Optional[int]:
    if retention_buckets is None:
        return None
    if isinstance(retention_buckets, bool) or not isinstance(retention_buckets, int) or retention_buckets < 0:
        raise InvalidConfigurationError("retention_buckets has to be a non-negative integer")
    return retention_buckets


class ReplayGuard(ABC):
    """Storage-agnostic record of (bucket, code, user_id) triples already accepted."""

    @abstractmethod
    def is_used(self, bucket: int, code: str, user_id: str) -> bool:
        """Checks whether the triple was already accepted. No side effects."""

    @abstractmethod
    def mark_used(self, bucket: int, code: str, user_id: str) -> None:
        """Records the triple. Recording it twice is not an error."""

    @abstractmethod
    def claim(self, bucket: int, code: str, user_id: str) -> bool:
        """
        Atomically records the triple if it is unused.
        Returns True if this call recorded it, False if it was already used.
        """

    @abstractmethod
    def prune(self, oldest_bucket: int) -> int:
        """Drops records for buckets older than oldest_bucket. Returns how many were dropped."""

    @abstractmethod
    def count(self) -> int:
        """Number of records currently held."""


class InMemoryReplayGuard(ReplayGuard):
    """
    Process-local guard. Without retention_buckets it grows for the lifetime
    of the process, so pair it with prune() or pass a retention.
    """

    def __init__(self, retention_buckets: Optional[int] = None):
        self.retention_buckets = validate_retention(retention_buckets)
        self._lock = threading.Lock()
        self._used: Dict[int, Set[Tuple[str, str]]] = {}
        self._newest_bucket: Optional[int] = None

    def is_used(self, bucket: int, code: str, user_id: str) -> bool:
        with self._lock:
            return (code, user_id or "") in self._used.get(bucket, ())

    def mark_used(self, bucket: int, code: str, user_id: str) -> None:
        self.claim(bucket, code, user_id)

    def claim(self, bucket: int, code: str, user_id: str) -> bool:
        key = (code, user_id or "")
        with self._lock:
            codes = self._used.setdefault(bucket, set())
            if key in codes:
                return False
            codes.add(key)
            self._expire_after(bucket)
            return True

    def prune(self, oldest_bucket: int) -> int:
        with self._lock:
            return self._drop_before(oldest_bucket)

    def count(self) -> int:
        with self._lock:
            return sum(len(codes) for codes in self._used.values())

    def _expire_after(self, bucket: int):
        # Caller holds the lock
        if self._newest_bucket is None or bucket > self._newest_bucket:
            self._newest_bucket = bucket
        if self.retention_buckets is not None:
            self._drop_before(self._newest_bucket - self.retention_buckets)

    def _drop_before(self, oldest_bucket: int) -> int:
        stale = [b for b in self._used if b < oldest_bucket]
        dropped = 0
        for b in stale:
            dropped += len(self._used.pop(b))
        return dropped
