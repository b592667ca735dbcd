"""
Typed session values.

Django sessions store JSON. Each SessionValue knows its key and how to turn
a stored payload back into a Python object, so callers get either a typed
value or None (or a SessionMissingError from require()) instead of casting
whatever happens to be in the session.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

from django.contrib.sessions.backends.base import SessionBase

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionMissingError(LookupError):
    """Expected session value is absent or unreadable."""

    def __init__(self, key: str):
        super().__init__(f"can't get {key} from session")
        self.key = key


def _identity(value: Any) -> Any:
    return value


class SessionValue(Generic[T]):
    """Accessor for a single session key."""

    def __init__(
        self,
        key: str,
        *,
        load: Callable[[Any], T] = _identity,
        dump: Callable[[T], Any] = _identity,
    ):
        self.key = key
        self._load = load
        self._dump = dump

    def get(self, session: SessionBase) -> T | None:
        raw = session.get(self.key)
        if raw is None:
            return None
        try:
            return self._load(raw)
        except (TypeError, ValueError, KeyError) as exc:
            logger.warning(f"Discarding unreadable session value {self.key}: {exc}")
            return None

    def require(self, session: SessionBase) -> T:
        value = self.get(session)
        if value is None:
            raise SessionMissingError(self.key)
        return value

    def put(self, session: SessionBase, value: T) -> None:
        session[self.key] = self._dump(value)

    def pop(self, session: SessionBase) -> T | None:
        value = self.get(session)
        session.pop(self.key, None)
        return value

    def remove(self, session: SessionBase) -> None:
        session.pop(self.key, None)


class KeyedSessionValue(Generic[T]):
    """Family of session values sharing a prefix, e.g. block_map_<roomID>."""

    def __init__(
        self,
        prefix: str,
        *,
        load: Callable[[Any], T] = _identity,
        dump: Callable[[T], Any] = _identity,
    ):
        self.prefix = prefix
        self._load = load
        self._dump = dump

    def for_key(self, suffix: Any) -> SessionValue[T]:
        return SessionValue(f"{self.prefix}{suffix}", load=self._load, dump=self._dump)
