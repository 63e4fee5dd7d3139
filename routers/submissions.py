# routers/submissions.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from db import get_db
from models import Submission
from schemas.submissions import SubmissionOut

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.get("/recent-list")
def submissions_recent(
    user_id: Optional[str] = Query(default=None, max_length=64),
    limit: int = 20,
    db: Session = Depends(get_db),
):
    limit = max(1, min(limit, 100))

    stmt = select(Submission).order_by(Submission.created_at.desc(), Submission.id.desc())
    if user_id:
        stmt = stmt.where(Submission.user_id == user_id)
    items = db.scalars(stmt.limit(limit)).all()

    # exclude potentially long feedback text in list views
    rows = [
        SubmissionOut.model_validate(s).model_dump(mode="json", exclude={"feedback_text"})
        for s in items
    ]
    return {"ok": True, "items": rows, "count": len(rows)}


@router.get("/{submission_id}", response_model=SubmissionOut)
def get_submission(submission_id: int, db: Session = Depends(get_db)):
    s = db.get(Submission, submission_id)
    if not s:
        raise HTTPException(status_code=404, detail="Submission not found")
    return SubmissionOut.model_validate(s)
