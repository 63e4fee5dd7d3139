# Key/value storage for per-user progress.
#
# Values are plain JSON-compatible structures. SqlStorage never commits: the
# request that owns the session decides when everything lands together.

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Optional, Protocol

from sqlalchemy import delete, event
from sqlalchemy.orm import Session

from models import ProgressEntry

_DELETED = object()


class ProgressStorage(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    """Process-local storage for offline/local mode and tests.

    When bound to a SQLAlchemy ``Session``, writes are staged and only land
    once that session commits; a rollback drops them.
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        db: Optional[Session] = None,
        on_clear: Optional[Callable[[], None]] = None,
    ):
        self._data = data if data is not None else {}
        self._on_clear = on_clear
        self._staged = db is not None
        self._pending: Dict[str, Any] = {}
        self._cleared = False
        if db is not None:
            event.listen(db, "after_commit", self._apply)
            event.listen(db, "after_soft_rollback", self._discard)

    def get(self, key: str) -> Optional[Any]:
        # hand out copies so callers can't mutate stored state in place
        if key in self._pending:
            value = self._pending[key]
            return None if value is _DELETED else copy.deepcopy(value)
        if self._cleared:
            return None
        return copy.deepcopy(self._data.get(key))

    def put(self, key: str, value: Any) -> None:
        if self._staged:
            self._pending[key] = copy.deepcopy(value)
        else:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        if self._staged:
            self._pending[key] = _DELETED
        else:
            self._data.pop(key, None)

    def clear(self) -> None:
        if self._staged:
            self._pending.clear()
            self._cleared = True
        else:
            self._wipe()

    def _wipe(self) -> None:
        self._data.clear()
        if self._on_clear is not None:
            self._on_clear()

    def _apply(self, session: Session) -> None:
        if self._cleared:
            self._data.clear()
        for key, value in self._pending.items():
            if value is _DELETED:
                self._data.pop(key, None)
            else:
                self._data[key] = value
        if self._cleared and not self._data and self._on_clear is not None:
            self._on_clear()
        self._discard(session)

    def _discard(self, session: Session, previous_transaction=None) -> None:
        self._pending = {}
        self._cleared = False


class SqlStorage:
    """Rows of ``progress_entries`` for a single user."""

    def __init__(self, db: Session, user_id: str):
        self._db = db
        self.user_id = user_id

    def get(self, key: str) -> Optional[Any]:
        row = self._db.get(ProgressEntry, (self.user_id, key))
        return None if row is None else row.value

    def put(self, key: str, value: Any) -> None:
        row = self._db.get(ProgressEntry, (self.user_id, key))
        if row is None:
            self._db.add(ProgressEntry(user_id=self.user_id, key=key, value=value))
        else:
            row.value = value
        self._db.flush()

    def delete(self, key: str) -> None:
        self._db.execute(
            delete(ProgressEntry).where(
                ProgressEntry.user_id == self.user_id, ProgressEntry.key == key
            )
        )

    def clear(self) -> None:
        self._db.execute(delete(ProgressEntry).where(ProgressEntry.user_id == self.user_id))
