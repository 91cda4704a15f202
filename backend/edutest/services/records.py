"""
Plain records passed between the repositories and the scoring core.

Grading, eligibility and aggregation only ever see these frozen dataclasses,
never ORM objects, so they can be exercised without a database.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class OptionRecord:
    id: int
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class QuestionRecord:
    id: int
    question_type: str = "single"
    options: Tuple[OptionRecord, ...] = ()
    section: Optional[str] = None

    @property
    def correct_options(self) -> Tuple[OptionRecord, ...]:
        return tuple(o for o in self.options if o.is_correct)


@dataclass(frozen=True)
class Window:
    """Time window in which students may act on a test. Either bound may be open."""
    opens: Optional[datetime] = None
    due: Optional[datetime] = None


@dataclass(frozen=True)
class DeadlineRecord:
    group_id: int
    open: datetime
    due: datetime


@dataclass(frozen=True)
class TestRecord:
    """Read model of a generic or SAT test with its question bank."""

    id: int
    name: str
    window: Window = field(default_factory=Window)
    duration_minutes: Optional[int] = None
    max_attempts: Optional[int] = None
    questions: Tuple[QuestionRecord, ...] = ()

    def question(self, question_id) -> Optional[QuestionRecord]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


@dataclass(frozen=True)
class AnswerRecord:
    question_id: int
    value: Optional[str]
