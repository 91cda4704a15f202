"""
Suspend Service - saves and restores in-progress answers of a generic test.

- suspend: replaces the caller's whole draft for the test (delete, then
  insert) inside one transaction; answers to questions outside the test
  are skipped
- resume: rebuilds the pre-submission test view with the saved answers
  filled in and the matching options marked `selected`
- status: whether the caller has a draft ("continue") or finished attempts

Drafts are deleted by the final submission (see attempts.submit_test).
"""

import time
from datetime import datetime
from typing import List, Tuple

from sqlalchemy.orm import Session

from edutest.auth import CurrentUser
from edutest.config import Settings
from edutest.database import run_in_transaction
from edutest.errors import NotFoundError, ValidationError
from edutest.logging_config import get_logger, log_with_context
from edutest.services.attempts import collect_answers, parse_start_time
from edutest.services.eligibility import check_eligibility, enforce
from edutest.services.repository import (
    AttemptRepository, SuspendRepository, TestRepository, to_test_record
)
from edutest.services.review import isoformat, question_view

# Channel logger for suspend/resume operations
logger = get_logger("suspend")


def suspend_test(db: Session, settings: Settings, user: CurrentUser, test_id: int,
                 start_time_raw, submitted: List[Tuple[int, object]],
                 now: datetime) -> int:
    """Store the caller's in-progress answers; returns the number of saved rows."""
    start = time.time()
    context = {"test_id": test_id, "user_id": user.user_id}
    tests = TestRepository(db)
    drafts = SuspendRepository(db)

    def work() -> int:
        test = tests.load(test_id)
        if test is None:
            raise NotFoundError("Cannot find Test with id={}.".format(test_id))
        start_time = parse_start_time(start_time_raw)
        if not submitted:
            raise ValidationError("Answers cannot be empty.")

        used = AttemptRepository(db).count(test_id, user.user_id)
        enforce(check_eligibility(
            test.window, user.role, now,
            attempt_count=used, max_attempts=test.max_attempts,
            student_role=settings.STUDENT_ROLE,
        ))
        answers = collect_answers(test, submitted)
        return drafts.replace(test_id, user.user_id, start_time, now, answers)

    stored = run_in_transaction(db, work, logger, context=context,
                                retries=settings.SUBMIT_RETRIES)

    duration_ms = (time.time() - start) * 1000
    log_with_context(logger, "INFO", "Test suspended with {} saved answers".format(stored),
                     context=context, extra_data={"duration_ms": round(duration_ms, 2)})
    return stored


def resume_test(db: Session, settings: Settings, user: CurrentUser, test_id: int,
                now: datetime) -> dict:
    """Pre-submission view of the test with the caller's draft filled in."""
    test = TestRepository(db).get(test_id)
    if test is None:
        raise NotFoundError("Cannot find Test with id={}.".format(test_id))
    enforce(check_eligibility(to_test_record(test).window, user.role, now,
                              student_role=settings.STUDENT_ROLE))

    rows = SuspendRepository(db).load(test_id, user.user_id)
    if not rows:
        raise NotFoundError("No suspended answers found for this test.")

    saved = {row.question_id: row.student_answer for row in rows}
    log_with_context(logger, "INFO", "Test resumed from draft",
                     context={"test_id": test_id, "user_id": user.user_id},
                     extra_data={"saved_answers": len(saved)})

    return {
        "test_id": test.id,
        "name": test.name,
        "time_open": isoformat(test.time_open),
        "duration_minutes": test.duration_minutes,
        "max_attempts": test.max_attempts,
        "start_time": isoformat(rows[0].start_time),
        "suspend_time": isoformat(max(row.suspend_time for row in rows)),
        "questions": [
            question_view(q, saved=saved.get(q.id), with_selection=True)
            for q in test.questions
        ],
    }


def attempt_status(db: Session, user: CurrentUser, test_id: int) -> dict:
    """Draft and attempt status of one test for the caller."""
    test = TestRepository(db).get(test_id)
    if test is None:
        raise NotFoundError("Cannot find Test with id={}.".format(test_id))

    used = AttemptRepository(db).count(test_id, user.user_id)
    has_draft = SuspendRepository(db).has_draft(test_id, user.user_id)
    attempts_left = None
    if test.max_attempts is not None:
        attempts_left = max(0, test.max_attempts - used)

    return {
        "test_id": test.id,
        "continue": has_draft,
        "is_completed": used > 0 and not has_draft,
        "attempts_used": used,
        "max_attempts": test.max_attempts,
        "attempts_left": attempts_left,
    }
