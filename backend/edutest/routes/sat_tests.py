"""
SAT test API routes - section-grouped view and submission.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from edutest.auth import CurrentUser, get_current_user
from edutest.clock import get_clock
from edutest.config import Settings, get_app_settings
from edutest.database import get_db
from edutest.services.attempts import submit_sat_test
from edutest.services.review import load_sat_details

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class SatAnswerIn(BaseModel):
    """One SAT answer. `isMarked` is a client-side review flag and is not stored."""
    question_id: int
    option_id: Optional[Union[int, str]] = None
    isMarked: Optional[bool] = None


class SatSubmitRequest(BaseModel):
    """Answers keyed by section name."""
    answers: Dict[str, List[SatAnswerIn]] = Field(default_factory=dict)

    def pairs_by_section(self):
        return {
            section: [(a.question_id, a.option_id) for a in answers]
            for section, answers in self.answers.items()
        }


@router.get("/api/satTests/{test_id}/details")
def sat_test_details(
    test_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """SAT test questions grouped by section."""
    return load_sat_details(db, settings, user, test_id, clock())


@router.post("/api/satTests/{test_id}/submit")
def submit_sat(
    test_id: int,
    body: SatSubmitRequest,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """
    Grade and record a SAT attempt.

    Returns one score per section plus `totalScore`.
    """
    result = submit_sat_test(db, settings, user, test_id, body.pairs_by_section(), clock())
    return {"sat_attempt_id": result.attempt_id, "scores": result.scores}
