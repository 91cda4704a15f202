"""
Generic test API routes - taking, suspending and submitting a test.

Provides endpoints for:
- Viewing a test before submission
- Suspending in-progress answers and continuing later
- Submitting a graded attempt
- Per-user status (draft pending, attempts left)
"""

from datetime import datetime
from typing import Callable, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from edutest.auth import CurrentUser, get_current_user
from edutest.clock import get_clock
from edutest.config import Settings, get_app_settings
from edutest.database import get_db
from edutest.services import attempts as attempt_service
from edutest.services import suspend as suspend_service
from edutest.services.review import load_take_view

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class AnswerIn(BaseModel):
    """One answer: an option id, or free text for writing questions."""
    question_id: int
    answer: Optional[Union[int, str]] = None


class TestAnswersRequest(BaseModel):
    """Body shared by submit and suspend."""
    answers: List[AnswerIn] = Field(default_factory=list)
    startTime: Optional[Union[int, float, str]] = None

    def pairs(self):
        return [(a.question_id, a.answer) for a in self.answers]


@router.get("/api/tests/{test_id}/take")
def take_test(
    test_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """Questions and options of a test; answers are not revealed to students."""
    return load_take_view(db, settings, user, test_id, clock())


@router.post("/api/tests/{test_id}/submit")
def submit_test(
    test_id: int,
    body: TestAnswersRequest,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """
    Grade and record one attempt.

    Returns the number of correct answers and the seconds elapsed since
    the client-reported start time.
    """
    result = attempt_service.submit_test(
        db, settings, user, test_id, body.startTime, body.pairs(), clock()
    )
    return {
        "attempt_id": result.attempt_id,
        "score": result.score,
        "timeTaken": result.time_taken,
    }


@router.post("/api/tests/{test_id}/suspend")
def suspend_test(
    test_id: int,
    body: TestAnswersRequest,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """Save in-progress answers, replacing any earlier draft of this test."""
    stored = suspend_service.suspend_test(
        db, settings, user, test_id, body.startTime, body.pairs(), clock()
    )
    return {"message": "Test suspended successfully!", "saved_answers": stored}


@router.get("/api/tests/{test_id}/continue")
def continue_test(
    test_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """The suspended draft as a test view with the saved answers selected."""
    return suspend_service.resume_test(db, settings, user, test_id, clock())


@router.get("/api/tests/{test_id}/status")
def test_status(
    test_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return suspend_service.attempt_status(db, user, test_id)
