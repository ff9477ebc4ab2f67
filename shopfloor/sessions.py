from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Dict, Iterable, Optional, Tuple
from uuid import uuid4

from .errors import InvalidInput, Unauthorized
from .models import Session
from .timeutil import Clock, utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


class KeyValueStore(ABC):
    """Where sessions live. Swap for a shared cache without touching callers."""

    @abstractmethod
    def put(self, key: str, value: Session) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[Session]:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def items(self) -> Iterable[Tuple[str, Session]]:
        ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: Session) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> Optional[Session]:
        with self._lock:
            return self._data.get(key)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def items(self) -> Iterable[Tuple[str, Session]]:
        with self._lock:
            return list(self._data.items())


class SessionStore:
    """Fixed-lifetime bearer tokens. Expiry is detected lazily in validate()."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock = utcnow,
    ):
        self.store = store if store is not None else InMemoryKeyValueStore()
        self.ttl = ttl
        self.clock = clock

    def issue(self, operator_id: str) -> str:
        if not operator_id:
            raise InvalidInput("operator_id is required", field="operator_id")
        now = self.clock()
        token = uuid4().hex
        self.store.put(token, Session(
            token=token,
            operator_id=operator_id,
            issued_at=now,
            expires_at=now + self.ttl,
        ))
        logger.info("session issued for operator %s", operator_id)
        return token

    def validate(self, token: Optional[str]) -> str:
        if not token:
            raise Unauthorized("MISSING")
        session = self.store.get(token)
        if session is None:
            raise Unauthorized("NOT_FOUND")
        if self.clock() >= session.expires_at:
            self.store.delete(token)
            logger.warning("expired session purged for operator %s", session.operator_id)
            raise Unauthorized("EXPIRED")
        return session.operator_id

    def revoke(self, token: str) -> bool:
        return self.store.delete(token)

    def sweep(self) -> int:
        """Purge every expired entry. Never runs on its own."""
        now = self.clock()
        expired = [k for k, s in self.store.items() if now >= s.expires_at]
        for k in expired:
            self.store.delete(k)
        if expired:
            logger.info("session sweep removed %d expired entries", len(expired))
        return len(expired)
