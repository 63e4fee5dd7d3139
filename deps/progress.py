import os
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from progress import UserProgressStore
from storage import MemoryStorage, SqlStorage

# "db" (default) keeps progress in progress_entries; "memory" keeps it in-process
# for local/offline runs.
PROGRESS_STORAGE = os.getenv("PROGRESS_STORAGE", "db").strip().lower()

_memory: Dict[str, Dict[str, Any]] = {}


def progress_store_for(db: Optional[Session], user_id: str) -> UserProgressStore:
    if PROGRESS_STORAGE == "memory":
        # writes follow the request's db transaction; a reset drops the user entirely
        storage = MemoryStorage(
            _memory.setdefault(user_id, {}),
            db=db,
            on_clear=lambda: _memory.pop(user_id, None),
        )
    else:
        storage = SqlStorage(db, user_id)
    return UserProgressStore(storage, user_id)


def get_progress_factory():
    """Dependency returning the (db, user_id) -> UserProgressStore factory."""
    return progress_store_for
