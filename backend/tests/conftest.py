"""
Pytest configuration and shared fixtures.

Every test gets a fresh app on an in-memory SQLite database and a frozen
server clock.
"""

import os

# Importing edutest.main builds the module-level app; keep it off disk.
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from edutest import models  # noqa: E402
from edutest.clock import get_clock  # noqa: E402
from edutest.config import Settings  # noqa: E402
from edutest.main import create_app  # noqa: E402

JWT_SECRET = "test-secret"
NOW = datetime(2026, 3, 2, 10, 0, 0)

STUDENT_ID = 101
OTHER_STUDENT_ID = 102
TEACHER_ID = 201
ADMIN_ID = 1


class FrozenClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def make_token(user_id: int, role: str, secret: str = JWT_SECRET) -> str:
    return jwt.encode({"user_id": user_id, "role": role}, secret, algorithm="HS256")


def headers_for(user_id: int, role: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET=JWT_SECRET,
        LOG_LEVEL="WARNING",
        SUBMIT_RETRIES=2,
    )


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def app(settings, clock):
    application = create_app(settings)
    application.dependency_overrides[get_clock] = lambda: clock
    yield application
    application.dependency_overrides.clear()
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def student_headers():
    return headers_for(STUDENT_ID, "student")


@pytest.fixture
def other_student_headers():
    return headers_for(OTHER_STUDENT_ID, "student")


@pytest.fixture
def teacher_headers():
    return headers_for(TEACHER_ID, "teacher")


@pytest.fixture
def admin_headers():
    return headers_for(ADMIN_ID, "admin")


@pytest.fixture
def generic_test(db_session):
    """
    Open test with one question of each type and two attempts allowed.

    Returns the ids needed to build answers:
    single (A correct, B wrong), multiply (C, D correct, E wrong),
    writing (canonical answer "Paris").
    """
    test = models.Test(
        name="Geography quiz",
        group_id=1,
        time_open=NOW - timedelta(days=1),
        duration_minutes=30,
        max_attempts=2,
    )
    single = models.Question(question_text="Pick A", question_type="single",
                             explanation="A is the answer")
    single.answer_options = [
        models.AnswerOption(option_text="A", is_correct=True),
        models.AnswerOption(option_text="B", is_correct=False),
    ]
    multiply = models.Question(question_text="Pick C and D", question_type="multiply")
    multiply.answer_options = [
        models.AnswerOption(option_text="C", is_correct=True),
        models.AnswerOption(option_text="D", is_correct=True),
        models.AnswerOption(option_text="E", is_correct=False),
    ]
    writing = models.Question(question_text="Capital of France?", question_type="writing")
    writing.answer_options = [models.AnswerOption(option_text="Paris", is_correct=True)]
    test.questions = [single, multiply, writing]

    db_session.add(test)
    db_session.flush()
    ids = {
        "test_id": test.id,
        "single": single.id,
        "A": single.answer_options[0].id,
        "B": single.answer_options[1].id,
        "multiply": multiply.id,
        "C": multiply.answer_options[0].id,
        "D": multiply.answer_options[1].id,
        "E": multiply.answer_options[2].id,
        "writing": writing.id,
    }
    db_session.commit()
    return ids


@pytest.fixture
def sat_test(db_session):
    """
    SAT test open around NOW with a verbal, a math and an unsectioned question.
    """
    test = models.SatTest(
        name="SAT practice 1",
        group_id=7,
        opens=NOW - timedelta(days=1),
        due=NOW + timedelta(days=1),
    )
    verbal = models.SatQuestion(section="verbal", question_text="Synonym of big",
                                explanation="Large means big")
    verbal.sat_answer_options = [
        models.SatAnswerOption(option_text="large", is_correct=True),
        models.SatAnswerOption(option_text="tiny", is_correct=False),
    ]
    math = models.SatQuestion(section="math", question_text="2 + 2")
    math.sat_answer_options = [
        models.SatAnswerOption(option_text="4", is_correct=True),
        models.SatAnswerOption(option_text="5", is_correct=False),
    ]
    math_writing = models.SatQuestion(section="math", question_text="Type ten",
                                      question_type="writing")
    math_writing.sat_answer_options = [models.SatAnswerOption(option_text="Ten", is_correct=True)]
    loose = models.SatQuestion(section=None, question_text="Unsectioned")
    loose.sat_answer_options = [
        models.SatAnswerOption(option_text="yes", is_correct=True),
        models.SatAnswerOption(option_text="no", is_correct=False),
    ]
    test.sat_questions = [verbal, math, math_writing, loose]

    db_session.add(test)
    db_session.flush()
    ids = {
        "test_id": test.id,
        "verbal": verbal.id,
        "verbal_right": verbal.sat_answer_options[0].id,
        "verbal_wrong": verbal.sat_answer_options[1].id,
        "math": math.id,
        "math_right": math.sat_answer_options[0].id,
        "math_wrong": math.sat_answer_options[1].id,
        "math_writing": math_writing.id,
        "loose": loose.id,
        "loose_right": loose.sat_answer_options[0].id,
    }
    db_session.commit()
    return ids
