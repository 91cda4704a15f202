"""
Grading Service - decides whether one submitted answer is correct.

Rules by question type:
1. single / multiply: correct iff the submitted option id equals the id of
   any option marked correct. For multiply this does NOT check that every
   correct option was selected; a single matching id is enough.
2. writing: correct iff the submitted text equals the correct option's text
   after trimming and lowercasing both sides. No partial credit.

Questions that are not part of the test are never graded; callers skip them.
"""

from typing import Optional, Union

from edutest.services.records import QuestionRecord

SINGLE = "single"
MULTIPLY = "multiply"
WRITING = "writing"


def parse_option_id(value: Union[str, int, None]) -> Optional[int]:
    """
    Parse a submitted option identifier.

    Clients send option ids as numbers or numeric strings; anything else
    cannot match an option.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def normalize_text(value) -> str:
    return str(value).strip().lower()


def grade(question: QuestionRecord, submitted) -> bool:
    """Return True when `submitted` is a correct answer to `question`."""
    if submitted is None:
        return False

    if question.question_type == WRITING:
        correct = next(iter(question.correct_options), None)
        if correct is None:
            return False
        return normalize_text(submitted) == normalize_text(correct.text)

    # single, multiply, and anything unrecognised are graded by option id
    option_id = parse_option_id(submitted)
    if option_id is None:
        return False
    return any(option.id == option_id for option in question.correct_options)
