"""
Review Service - read views of tests and attempts.

Two kinds of views:
- pre-submission (taking, resuming): `is_correct` and explanations are never
  included, and writing questions carry no options since their only option
  is the canonical answer
- post-submission (attempt review): correctness, explanations and the
  recomputed scores are shown

Nothing here writes to the database.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from edutest.auth import CurrentUser, ensure_self_or_privileged
from edutest.config import Settings
from edutest.errors import NotFoundError
from edutest.models.question import Question
from edutest.models.sat_attempt import SatAttempt
from edutest.models.sat_question import SatQuestion
from edutest.models.sat_test import SatTest
from edutest.models.test import Test
from edutest.services.eligibility import check_eligibility, enforce, resolve_window
from edutest.services.grading import WRITING, grade, parse_option_id
from edutest.services.records import AnswerRecord
from edutest.services.repository import (
    AttemptRepository, SatAttemptRepository, SatTestRepository, TestRepository,
    to_sat_test_record, to_test_record
)
from edutest.services.scoring import compute_section_scores, with_total


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _is_selected(saved: Optional[str], option_id: int) -> bool:
    return saved is not None and parse_option_id(saved) == option_id


def question_view(question: Question, reveal: bool = False,
                  saved: Optional[str] = None, with_selection: bool = False) -> dict:
    """Serialize a generic question, optionally with a saved answer marked."""
    hide_options = question.question_type == WRITING and not reveal
    options = []
    if not hide_options:
        for option in question.answer_options:
            item = {"option_id": option.id, "option_text": option.option_text}
            if reveal:
                item["is_correct"] = bool(option.is_correct)
            if with_selection:
                item["selected"] = _is_selected(saved, option.id)
            options.append(item)

    view = {
        "question_id": question.id,
        "question_text": question.question_text,
        "hint": question.hint,
        "image": question.image,
        "question_type": question.question_type,
        "answer_options": options,
    }
    if reveal:
        view["explanation"] = question.explanation
        view["explanation_image"] = question.explanation_image
    if with_selection:
        view["student_answer"] = saved
    return view


def test_view(test: Test, reveal: bool = False) -> dict:
    return {
        "test_id": test.id,
        "group_id": test.group_id,
        "name": test.name,
        "time_open": isoformat(test.time_open),
        "duration_minutes": test.duration_minutes,
        "max_attempts": test.max_attempts,
        "questions": [question_view(q, reveal=reveal) for q in test.questions],
    }


def sat_question_view(question: SatQuestion, reveal: bool = False,
                      saved: Optional[str] = None, with_selection: bool = False) -> dict:
    hide_options = question.question_type == WRITING and not reveal
    options = []
    if not hide_options:
        for option in question.sat_answer_options:
            item = {"sat_answer_option_id": option.id, "option_text": option.option_text}
            if reveal:
                item["is_correct"] = bool(option.is_correct)
            if with_selection:
                item["selected"] = _is_selected(saved, option.id)
            options.append(item)

    view = {
        "sat_question_id": question.id,
        "question_text": question.question_text,
        "hint": question.hint,
        "image": question.image,
        "section": question.section,
        "question_type": question.question_type,
        "sat_answer_options": options,
    }
    if reveal:
        view["explanation"] = question.explanation
        view["explanation_image"] = question.explanation_image
    if with_selection:
        view["student_answer"] = saved
    return view


def attempt_summary(attempt) -> dict:
    return {
        "attempt_id": attempt.id,
        "test_id": attempt.test_id,
        "user_id": attempt.user_id,
        "attempt_number": attempt.attempt_number,
        "start_time": isoformat(attempt.start_time),
        "end_time": isoformat(attempt.end_time),
        "score": attempt.score,
        "time_taken": attempt.time_taken_seconds,
    }


def sat_attempt_summary(attempt: SatAttempt) -> dict:
    return {
        "sat_attempt_id": attempt.id,
        "test_id": attempt.test_id,
        "user_id": attempt.user_id,
        "start_time": isoformat(attempt.start_time),
        "end_time": isoformat(attempt.end_time),
        "status": attempt.status,
        "total_score": attempt.total_score,
    }


def load_take_view(db: Session, settings: Settings, user: CurrentUser,
                   test_id: int, now: datetime) -> dict:
    """Pre-submission view of a generic test; students must be inside its window."""
    test = TestRepository(db).get(test_id)
    if test is None:
        raise NotFoundError("Cannot find Test with id={}.".format(test_id))
    privileged = user.role in settings.PRIVILEGED_ROLES
    if not privileged:
        enforce(check_eligibility(to_test_record(test).window, user.role, now,
                                  student_role=settings.STUDENT_ROLE))
    return test_view(test, reveal=privileged)


def load_attempt_review(db: Session, settings: Settings, user: CurrentUser,
                        attempt_id: int) -> dict:
    """A submitted generic attempt with per-question correctness and explanations."""
    attempt = AttemptRepository(db).get(attempt_id)
    if attempt is None:
        raise NotFoundError("No attempt found with id={}.".format(attempt_id))
    ensure_self_or_privileged(user, attempt.user_id, settings.PRIVILEGED_ROLES)

    test = TestRepository(db).get(attempt.test_id)
    record = to_test_record(test)
    saved: Dict[int, Optional[str]] = {a.question_id: a.student_answer for a in attempt.answers}

    questions = []
    for question in test.questions:
        view = question_view(question, reveal=True,
                             saved=saved.get(question.id), with_selection=True)
        view["answered"] = question.id in saved
        view["is_answer_correct"] = (
            question.id in saved and grade(record.question(question.id), saved[question.id])
        )
        questions.append(view)

    return {
        "attempt": attempt_summary(attempt),
        "test": {"test_id": test.id, "name": test.name},
        "questions": questions,
    }


def list_user_attempts(db: Session, settings: Settings, user: CurrentUser,
                       user_id: int) -> List[dict]:
    ensure_self_or_privileged(user, user_id, settings.PRIVILEGED_ROLES)
    return [attempt_summary(a) for a in AttemptRepository(db).for_user(user_id)]


def load_sat_details(db: Session, settings: Settings, user: CurrentUser,
                     test_id: int, now: datetime) -> dict:
    """SAT test grouped by section; students get the stripped view inside their window."""
    tests = SatTestRepository(db)
    test: Optional[SatTest] = tests.get(test_id)
    if test is None:
        raise NotFoundError("SAT test not found")
    privileged = user.role in settings.PRIVILEGED_ROLES
    if not privileged:
        window = resolve_window(to_sat_test_record(test).window,
                                tests.deadlines_for_user(test_id, user.user_id), now)
        enforce(check_eligibility(window, user.role, now, student_role=settings.STUDENT_ROLE))

    by_section: Dict[str, List[dict]] = {}
    for question in test.sat_questions:
        section = question.section or settings.DEFAULT_SECTION
        by_section.setdefault(section, []).append(sat_question_view(question, reveal=privileged))

    return {
        "sat_test_id": test.id,
        "name": test.name,
        "opens": isoformat(test.opens),
        "due": isoformat(test.due),
        "questionsBySection": by_section,
    }


def list_user_sat_attempts(db: Session, settings: Settings, user: CurrentUser,
                           user_id: int) -> List[dict]:
    ensure_self_or_privileged(user, user_id, settings.PRIVILEGED_ROLES)
    result = []
    for attempt in SatAttemptRepository(db).for_user(user_id):
        item = sat_attempt_summary(attempt)
        item["sat_test"] = {
            "sat_test_id": attempt.sat_test.id,
            "name": attempt.sat_test.name,
            "group_id": attempt.sat_test.group_id,
        } if attempt.sat_test else None
        result.append(item)
    return result


def load_sat_attempt_detail(db: Session, settings: Settings, user: CurrentUser,
                            attempt_id: int, user_id: int) -> dict:
    """
    A submitted SAT attempt with section scores recomputed from its answers.

    The recomputed scores are returned only; the stored `total_score` is
    reported as it was written at submission.
    """
    ensure_self_or_privileged(user, user_id, settings.PRIVILEGED_ROLES)
    attempt = SatAttemptRepository(db).get_for_user(attempt_id, user_id)
    if attempt is None:
        raise NotFoundError("No attempt found with this id for the user.")

    test = SatTestRepository(db).get(attempt.test_id)
    if test is None or not test.sat_questions:
        raise NotFoundError("No questions found for the test associated with this attempt.")

    answers = [AnswerRecord(question_id=a.question_id, value=a.selected_option)
               for a in attempt.sat_answers]
    section_scores = compute_section_scores(to_sat_test_record(test), answers,
                                            settings.DEFAULT_SECTION)
    saved = {a.question_id: a.value for a in answers}

    return {
        "attempt": sat_attempt_summary(attempt),
        "scores": with_total(section_scores),
        "sat_test": {
            "sat_test_id": test.id,
            "group_id": test.group_id,
            "name": test.name,
            "opens": isoformat(test.opens),
            "due": isoformat(test.due),
            "sat_questions": [
                sat_question_view(q, reveal=True, saved=saved.get(q.id), with_selection=True)
                for q in test.sat_questions
            ],
        },
    }
