"""
Attempts API routes - history and review of generic test attempts.

Provides endpoints for:
- Listing a user's attempts
- Reviewing one attempt with correct options and explanations

Students may only read their own attempts; teachers and admins read any.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from edutest.auth import CurrentUser, get_current_user
from edutest.config import Settings, get_app_settings
from edutest.database import get_db
from edutest.logging_config import get_logger, log_with_context
from edutest.services.review import list_user_attempts, load_attempt_review

router = APIRouter()
logger = get_logger("http")


@router.get("/api/attempts/user/{user_id}")
def user_attempts(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    """All attempts of a user, newest first."""
    results = list_user_attempts(db, settings, user, user_id)
    log_with_context(logger, "INFO", f"Listed {len(results)} attempts",
        context={"user_id": user_id},
        extra_data={"requested_by": user.user_id})
    return results


@router.get("/api/attempts/{attempt_id}/answers")
def attempt_answers(
    attempt_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    """Stored answers of an attempt, graded, with explanations."""
    return load_attempt_review(db, settings, user, attempt_id)
