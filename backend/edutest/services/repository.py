"""
Repositories - the only place the scoring core touches the ORM.

Each repository wraps a Session, loads ORM rows and hands back the plain
records from `records.py`. Writes are flushed, never committed: the
calling service owns the transaction.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from edutest.models.answer import Answer
from edutest.models.attempt import Attempt
from edutest.models.deadline import Deadline
from edutest.models.group_membership import GroupMembership
from edutest.models.question import Question
from edutest.models.sat_answer import SatAnswer
from edutest.models.sat_attempt import SatAttempt
from edutest.models.sat_question import SatQuestion
from edutest.models.sat_test import SatTest
from edutest.models.suspend_answer import SuspendAnswer
from edutest.models.test import Test
from edutest.services.records import (
    AnswerRecord, DeadlineRecord, OptionRecord, QuestionRecord, TestRecord, Window
)


def _question_record(question: Question) -> QuestionRecord:
    return QuestionRecord(
        id=question.id,
        question_type=question.question_type or "single",
        options=tuple(
            OptionRecord(id=o.id, text=o.option_text, is_correct=bool(o.is_correct))
            for o in question.answer_options
        ),
    )


def _sat_question_record(question: SatQuestion) -> QuestionRecord:
    return QuestionRecord(
        id=question.id,
        question_type=question.question_type or "single",
        section=question.section,
        options=tuple(
            OptionRecord(id=o.id, text=o.option_text, is_correct=bool(o.is_correct))
            for o in question.sat_answer_options
        ),
    )


def to_test_record(test: Test) -> TestRecord:
    return TestRecord(
        id=test.id,
        name=test.name,
        window=Window(opens=test.time_open),
        duration_minutes=test.duration_minutes,
        max_attempts=test.max_attempts,
        questions=tuple(_question_record(q) for q in test.questions),
    )


def to_sat_test_record(test: SatTest) -> TestRecord:
    return TestRecord(
        id=test.id,
        name=test.name,
        window=Window(opens=test.opens, due=test.due),
        questions=tuple(_sat_question_record(q) for q in test.sat_questions),
    )


class TestRepository:
    """Generic tests with their question bank."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, test_id: int) -> Optional[Test]:
        return self.db.query(Test).options(
            selectinload(Test.questions).selectinload(Question.answer_options)
        ).filter(Test.id == test_id).first()

    def load(self, test_id: int) -> Optional[TestRecord]:
        test = self.get(test_id)
        return to_test_record(test) if test else None


class SatTestRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, test_id: int) -> Optional[SatTest]:
        return self.db.query(SatTest).options(
            selectinload(SatTest.sat_questions).selectinload(SatQuestion.sat_answer_options)
        ).filter(SatTest.id == test_id).first()

    def load(self, test_id: int) -> Optional[TestRecord]:
        test = self.get(test_id)
        return to_sat_test_record(test) if test else None

    def deadlines_for_user(self, test_id: int, user_id: int) -> List[DeadlineRecord]:
        """Deadlines of this test that belong to any group the user is in."""
        rows = self.db.query(Deadline).join(
            GroupMembership, GroupMembership.group_id == Deadline.group_id
        ).filter(
            Deadline.test_id == test_id,
            GroupMembership.user_id == user_id,
        ).all()
        return [DeadlineRecord(group_id=d.group_id, open=d.open, due=d.due) for d in rows]


class AttemptRepository:
    """Generic attempts and their answers."""

    def __init__(self, db: Session):
        self.db = db

    def count(self, test_id: int, user_id: int) -> int:
        return self.db.query(func.count(Attempt.id)).filter(
            Attempt.test_id == test_id,
            Attempt.user_id == user_id,
        ).scalar() or 0

    def save(self, test_id: int, user_id: int, attempt_number: int,
             start_time: datetime, end_time: datetime, score: int,
             answers: Iterable[AnswerRecord]) -> Attempt:
        attempt = Attempt(
            test_id=test_id,
            user_id=user_id,
            attempt_number=attempt_number,
            start_time=start_time,
            end_time=end_time,
            score=score,
        )
        self.db.add(attempt)
        self.db.flush()
        for answer in answers:
            self.db.add(Answer(
                attempt_id=attempt.id,
                question_id=answer.question_id,
                user_id=user_id,
                student_answer=answer.value,
                submitted_at=end_time,
            ))
        self.db.flush()
        return attempt

    def for_user(self, user_id: int) -> List[Attempt]:
        return self.db.query(Attempt).filter(
            Attempt.user_id == user_id
        ).order_by(Attempt.end_time.desc(), Attempt.id.desc()).all()

    def get(self, attempt_id: int) -> Optional[Attempt]:
        return self.db.query(Attempt).options(
            selectinload(Attempt.answers),
        ).filter(Attempt.id == attempt_id).first()


class SatAttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    def save(self, test_id: int, user_id: int, start_time: datetime, end_time: datetime,
             total: int, answers: Iterable[AnswerRecord]) -> SatAttempt:
        attempt = SatAttempt(
            test_id=test_id,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            status="completed",
            total_score=total,
        )
        self.db.add(attempt)
        self.db.flush()
        for answer in answers:
            self.db.add(SatAnswer(
                attempt_id=attempt.id,
                question_id=answer.question_id,
                user_id=user_id,
                selected_option=answer.value,
                submitted_at=end_time,
            ))
        self.db.flush()
        return attempt

    def for_user(self, user_id: int) -> List[SatAttempt]:
        return self.db.query(SatAttempt).options(
            selectinload(SatAttempt.sat_test)
        ).filter(
            SatAttempt.user_id == user_id
        ).order_by(SatAttempt.end_time.desc(), SatAttempt.id.desc()).all()

    def get_for_user(self, attempt_id: int, user_id: int) -> Optional[SatAttempt]:
        return self.db.query(SatAttempt).options(
            selectinload(SatAttempt.sat_answers),
        ).filter(
            SatAttempt.id == attempt_id,
            SatAttempt.user_id == user_id,
        ).first()

    def get(self, attempt_id: int) -> Optional[SatAttempt]:
        return self.db.query(SatAttempt).filter(SatAttempt.id == attempt_id).first()


class SuspendRepository:
    """Draft answers keyed by (user, test)."""

    def __init__(self, db: Session):
        self.db = db

    def clear(self, test_id: int, user_id: int) -> int:
        return self.db.query(SuspendAnswer).filter(
            SuspendAnswer.test_id == test_id,
            SuspendAnswer.user_id == user_id,
        ).delete(synchronize_session=False)

    def replace(self, test_id: int, user_id: int, start_time: datetime,
                suspend_time: datetime, answers: Iterable[AnswerRecord]) -> int:
        """Delete the current draft and store `answers` in its place."""
        self.clear(test_id, user_id)
        stored = 0
        for answer in answers:
            self.db.add(SuspendAnswer(
                test_id=test_id,
                question_id=answer.question_id,
                user_id=user_id,
                student_answer=answer.value,
                start_time=start_time,
                suspend_time=suspend_time,
            ))
            stored += 1
        self.db.flush()
        return stored

    def load(self, test_id: int, user_id: int) -> List[SuspendAnswer]:
        return self.db.query(SuspendAnswer).filter(
            SuspendAnswer.test_id == test_id,
            SuspendAnswer.user_id == user_id,
        ).order_by(SuspendAnswer.question_id).all()

    def has_draft(self, test_id: int, user_id: int) -> bool:
        return self.db.query(SuspendAnswer.id).filter(
            SuspendAnswer.test_id == test_id,
            SuspendAnswer.user_id == user_id,
        ).first() is not None
