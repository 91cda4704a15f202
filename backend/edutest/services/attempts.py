"""
Attempt Service - records graded submissions of generic and SAT tests.

Submission pipeline (one transaction):
1. Load the test with its questions and answer options
2. Run the eligibility gate (time window, attempt cap)
3. Keep only answers to questions of this test (last answer per question wins)
4. Grade and score them
5. Store the attempt and its answers
6. Drop the caller's suspended draft of this test (generic tests only)

Any failure rolls back steps 5-6, so no partial attempt survives.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from edutest.auth import CurrentUser
from edutest.config import Settings
from edutest.database import run_in_transaction
from edutest.errors import NotFoundError, ValidationError
from edutest.logging_config import get_logger, log_with_context
from edutest.services.eligibility import check_eligibility, enforce, is_overtime, resolve_window
from edutest.services.records import AnswerRecord, TestRecord
from edutest.services.repository import (
    AttemptRepository, SatAttemptRepository, SatTestRepository, SuspendRepository, TestRepository
)
from edutest.services.scoring import compute_score, compute_section_scores, total_score, with_total

# Channel logger for attempt operations
logger = get_logger("attempts")


@dataclass(frozen=True)
class SubmissionResult:
    attempt_id: int
    score: int
    time_taken: int


@dataclass(frozen=True)
class SatSubmissionResult:
    attempt_id: int
    scores: Dict[str, int]


def parse_start_time(value) -> datetime:
    """
    Parse a client-supplied start time into a naive UTC datetime.

    Accepts ISO 8601 strings (a trailing "Z" included) and epoch timestamps
    in milliseconds, the two forms browsers send. Raises ValidationError
    otherwise.
    """
    if value is None or isinstance(value, bool) or value == "":
        raise ValidationError("startTime is required.")
    try:
        if isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        else:
            ts_str = str(value).strip()
            if ts_str.endswith("Z"):
                ts_str = ts_str[:-1] + "+00:00"
            dt = datetime.fromisoformat(ts_str)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        log_with_context(logger, "WARNING", "Failed to parse startTime: {}".format(value),
                         extra_data={"error": str(e)})
        raise ValidationError("Invalid startTime: {}".format(value))
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def collect_answers(test: TestRecord, submitted: Iterable[Tuple[int, object]]) -> List[AnswerRecord]:
    """
    Keep the answers that refer to questions of `test`.

    Unknown question ids are dropped silently; for a question answered more
    than once the last value wins. Values are stored as text.
    """
    by_question: Dict[int, AnswerRecord] = {}
    skipped = 0
    for question_id, value in submitted:
        if test.question(question_id) is None:
            skipped += 1
            continue
        by_question[question_id] = AnswerRecord(
            question_id=question_id,
            value=None if value is None else str(value),
        )
    if skipped:
        log_with_context(logger, "INFO",
            "Skipped {} answers to questions outside the test".format(skipped),
            context={"test_id": test.id})
    return list(by_question.values())


def submit_test(db: Session, settings: Settings, user: CurrentUser, test_id: int,
                start_time_raw, submitted: List[Tuple[int, object]],
                now: datetime) -> SubmissionResult:
    """Grade and store one attempt of a generic test."""
    start = time.time()
    context = {"test_id": test_id, "user_id": user.user_id}
    tests = TestRepository(db)
    attempts = AttemptRepository(db)

    def work() -> Tuple[SubmissionResult, int]:
        test = tests.load(test_id)
        if test is None:
            raise NotFoundError("Cannot find Test with id={}.".format(test_id))
        start_time = parse_start_time(start_time_raw)
        if not submitted:
            raise ValidationError("Answers cannot be empty.")

        used = attempts.count(test_id, user.user_id)
        enforce(check_eligibility(
            test.window, user.role, now,
            attempt_count=used, max_attempts=test.max_attempts,
            student_role=settings.STUDENT_ROLE,
        ))

        answers = collect_answers(test, submitted)
        score = compute_score(test, answers)
        attempt = attempts.save(test_id, user.user_id, used + 1, start_time, now, score, answers)
        cleared = SuspendRepository(db).clear(test_id, user.user_id)

        if is_overtime(start_time, now, test.duration_minutes):
            log_with_context(logger, "WARNING", "Submission after the allotted time",
                context={**context, "attempt_id": attempt.id},
                extra_data={"duration_minutes": test.duration_minutes,
                            "elapsed_seconds": (now - start_time).total_seconds()})

        return SubmissionResult(
            attempt_id=attempt.id,
            score=score,
            time_taken=max(0, int((now - start_time).total_seconds())),
        ), cleared

    result, cleared = run_in_transaction(db, work, logger, context=context,
                                         retries=settings.SUBMIT_RETRIES)

    duration_ms = (time.time() - start) * 1000
    log_with_context(logger, "INFO",
        "Attempt {} submitted: score={}".format(result.attempt_id, result.score),
        context={**context, "attempt_id": result.attempt_id},
        extra_data={"duration_ms": round(duration_ms, 2),
                    "time_taken": result.time_taken,
                    "draft_rows_cleared": cleared})
    return result


def submit_sat_test(db: Session, settings: Settings, user: CurrentUser, test_id: int,
                    submitted: Dict[str, List[Tuple[int, object]]],
                    now: datetime) -> SatSubmissionResult:
    """
    Grade and store one attempt of a SAT test.

    The body groups answers by section, but every answer is scored under
    its question's own section.
    """
    start = time.time()
    context = {"sat_test_id": test_id, "user_id": user.user_id}
    tests = SatTestRepository(db)
    attempts = SatAttemptRepository(db)

    def work() -> SatSubmissionResult:
        test = tests.load(test_id)
        if test is None:
            raise NotFoundError("Test not found")
        flat = [pair for section_answers in submitted.values() for pair in section_answers]
        if not flat:
            raise ValidationError("Answers cannot be empty.")

        window = resolve_window(test.window, tests.deadlines_for_user(test_id, user.user_id), now)
        enforce(check_eligibility(window, user.role, now, student_role=settings.STUDENT_ROLE))

        answers = collect_answers(test, flat)
        section_scores = compute_section_scores(test, answers, settings.DEFAULT_SECTION)
        attempt = attempts.save(test_id, user.user_id, now, now,
                                total_score(section_scores), answers)
        return SatSubmissionResult(attempt_id=attempt.id, scores=with_total(section_scores))

    result = run_in_transaction(db, work, logger, context=context)

    duration_ms = (time.time() - start) * 1000
    log_with_context(logger, "INFO",
        "SAT attempt {} submitted: {}".format(result.attempt_id, result.scores),
        context={**context, "sat_attempt_id": result.attempt_id},
        extra_data={"duration_ms": round(duration_ms, 2)})
    return result


def delete_sat_attempt(db: Session, attempt_id: int) -> int:
    """Delete a SAT attempt and its answers."""
    attempts = SatAttemptRepository(db)

    def work():
        attempt = attempts.get(attempt_id)
        if attempt is None:
            raise NotFoundError(
                "Cannot delete Attempt with id={}. Maybe Attempt was not found!".format(attempt_id))
        db.delete(attempt)
        return attempt_id

    deleted = run_in_transaction(db, work, logger, context={"sat_attempt_id": attempt_id})
    log_with_context(logger, "INFO", "SAT attempt {} deleted".format(attempt_id),
                     context={"sat_attempt_id": attempt_id})
    return deleted
