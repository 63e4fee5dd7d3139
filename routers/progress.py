from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

import achievements as ach
from db import get_db
from deps.progress import get_progress_factory
from progress import new_user_id
from schemas.progress import ProgressOut
from sessions import ProgressFactory

router = APIRouter(prefix="/progress", tags=["progress"])


@router.post("/session")
def start_session(
    db: Session = Depends(get_db),
    progress_for: ProgressFactory = Depends(get_progress_factory),
):
    """Issue a fresh user id; the client keeps it and sends it with every action."""
    user_id = new_user_id()
    session = progress_for(db, user_id).touch_session()
    db.commit()
    return {"ok": True, "userId": user_id, "session": session.model_dump(mode="json")}


@router.get("/{user_id}", response_model=ProgressOut)
def get_progress(
    user_id: str = Path(min_length=1, max_length=64),
    db: Session = Depends(get_db),
    progress_for: ProgressFactory = Depends(get_progress_factory),
):
    store = progress_for(db, user_id)
    session = store.touch_session()
    db.commit()
    return ProgressOut(
        session=session,
        stats=store.stats(),
        achievements=ach.describe(store.achievements()),
    )


@router.delete("/{user_id}")
def reset_progress(
    user_id: str = Path(min_length=1, max_length=64),
    db: Session = Depends(get_db),
    progress_for: ProgressFactory = Depends(get_progress_factory),
):
    """Forget stats, achievements, history and session for this user."""
    progress_for(db, user_id).clear()
    db.commit()
    return {"ok": True}
