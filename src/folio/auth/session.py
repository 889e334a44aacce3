# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server-side sessions.

A session is an opaque random token bound to a user id with a fixed expiry.
The cookie carries the token signed with the shared secret; the record itself
lives in a ``SessionStore`` so it can be revoked before it expires.

Lifecycle: created on login, active while unexpired, then expired (treated as
absent and pruned) or revoked (deleted on logout).
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from itsdangerous import BadSignature, Signer

from folio.config import THIRTY_DAYS_SECONDS
from folio.core.utils import utcnow

LOGGER = logging.getLogger(__name__)

SESSION_SALT = "folio.session.v1"
TOKEN_BYTES = 32


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SessionStore(ABC):
    @abstractmethod
    def save(self, record: SessionRecord) -> None:
        ...

    @abstractmethod
    def get(self, token: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    def delete(self, token: str) -> bool:
        ...

    @abstractmethod
    def prune(self, now: datetime) -> int:
        """Remove expired records; return how many were removed."""

    @abstractmethod
    def __len__(self) -> int:
        ...


class MemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, SessionRecord] = {}

    def save(self, record: SessionRecord) -> None:
        with self._lock:
            self._records[record.token] = record

    def get(self, token: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._records.get(token)

    def delete(self, token: str) -> bool:
        with self._lock:
            return self._records.pop(token, None) is not None

    def prune(self, now: datetime) -> int:
        with self._lock:
            expired = [t for t, r in self._records.items() if r.is_expired(now)]
            for t in expired:
                del self._records[t]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class SessionManager:
    def __init__(
        self,
        store: SessionStore,
        secret_key: str,
        *,
        max_age: int = THIRTY_DAYS_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret_key:
            raise RuntimeError("A session secret is required")
        self.store = store
        self.max_age = int(max_age)
        self._clock = clock
        self._signer = Signer(secret_key, salt=SESSION_SALT)

    def _unsign(self, cookie_value: str) -> Optional[str]:
        if not cookie_value:
            return None
        try:
            return self._signer.unsign(cookie_value).decode("utf-8")
        except (BadSignature, UnicodeError):
            return None

    def create(self, user_id: str) -> Tuple[SessionRecord, str]:
        """Mint a session for user_id. Returns (record, signed cookie value)."""
        now = self._clock()
        record = SessionRecord(
            token=secrets.token_urlsafe(TOKEN_BYTES),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(seconds=self.max_age),
        )
        self.store.save(record)
        return record, self._signer.sign(record.token).decode("utf-8")

    def lookup(self, cookie_value: str) -> Optional[SessionRecord]:
        token = self._unsign(cookie_value)
        if not token:
            return None
        record = self.store.get(token)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            self.store.delete(token)
            return None
        return record

    def resolve(self, cookie_value: str) -> Optional[str]:
        """User id for a live session; None for absent, tampered, expired or revoked tokens."""
        record = self.lookup(cookie_value)
        return record.user_id if record else None

    def revoke(self, cookie_value: str) -> bool:
        token = self._unsign(cookie_value)
        if not token:
            return False
        return self.store.delete(token)

    def prune(self) -> int:
        return self.store.prune(self._clock())


async def prune_periodically(manager: SessionManager, interval_seconds: int) -> None:
    """Sweep expired sessions every interval until cancelled."""
    interval = max(1, int(interval_seconds))
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await asyncio.to_thread(manager.prune)
        except Exception:
            LOGGER.exception("Session sweep failed")
            continue
        if removed:
            LOGGER.info("Session sweep removed %d expired session(s)", removed)
