"""
Scoring Service - turns graded answers into scores.

1. Generic tests: score = number of correctly answered questions
2. SAT tests: one counter per section, discovered from the questions
   themselves; total = sum of all section counters

Answers referring to a question outside the test are skipped, neither
counted as wrong nor raised as an error.
"""

import time
from typing import Dict, Iterable

from edutest.logging_config import get_logger, log_with_context
from edutest.services.grading import grade
from edutest.services.records import AnswerRecord, TestRecord

# Channel logger for scoring operations
logger = get_logger("grading")

TOTAL_KEY = "totalScore"


def compute_score(test: TestRecord, answers: Iterable[AnswerRecord]) -> int:
    """Count correct answers of a generic test submission."""
    score = 0
    for answer in answers:
        question = test.question(answer.question_id)
        if question is None:
            continue
        if grade(question, answer.value):
            score += 1
    return score


def compute_section_scores(test: TestRecord, answers: Iterable[AnswerRecord],
                           default_section: str = "general") -> Dict[str, int]:
    """
    Per-section correct counts for a SAT submission.

    Every section present in the test starts at 0, so sections the caller
    left blank still appear in the result.
    """
    start_time = time.time()

    scores: Dict[str, int] = {}
    for question in test.questions:
        scores.setdefault(question.section or default_section, 0)

    graded = 0
    for answer in answers:
        question = test.question(answer.question_id)
        if question is None:
            continue
        graded += 1
        if grade(question, answer.value):
            scores[question.section or default_section] += 1

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "DEBUG",
        "Section scores computed: {}".format(scores),
        context={"test_id": test.id},
        extra_data={"duration_ms": round(duration_ms, 2), "graded": graded})

    return scores


def total_score(section_scores: Dict[str, int]) -> int:
    return sum(section_scores.values())


def with_total(section_scores: Dict[str, int]) -> Dict[str, int]:
    """
    Section scores plus the grand total under `totalScore`.

    `totalScore` is reserved: SatQuestion refuses it as a section label.
    """
    return {**section_scores, TOTAL_KEY: total_score(section_scores)}
