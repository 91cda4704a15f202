"""
SAT attempt API routes - history, review and removal of SAT attempts.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from edutest.auth import CurrentUser, get_current_user, require_roles
from edutest.config import Settings, get_app_settings
from edutest.database import get_db
from edutest.services.attempts import delete_sat_attempt
from edutest.services.review import list_user_sat_attempts, load_sat_attempt_detail

router = APIRouter()


@router.get("/api/satAttempts/user/{user_id}")
def user_sat_attempts(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    return list_user_sat_attempts(db, settings, user, user_id)


@router.get("/api/satAttempts/{attempt_id}/user/{user_id}/answers")
def sat_attempt_answers(
    attempt_id: int,
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    """
    A SAT attempt with its answers, correct options and section scores.

    Scores are recomputed from the stored answers on every call; nothing is
    written back.
    """
    return load_sat_attempt_detail(db, settings, user, attempt_id, user_id)


@router.delete("/api/satAttempts/{attempt_id}")
def remove_sat_attempt(
    attempt_id: int,
    user: CurrentUser = Depends(require_roles("admin")),
    db: Session = Depends(get_db)
):
    delete_sat_attempt(db, attempt_id)
    return {"message": "Attempt was deleted successfully!"}
