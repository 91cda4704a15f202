from edutest.models.test import Test
from edutest.models.question import Question
from edutest.models.answer_option import AnswerOption
from edutest.models.attempt import Attempt
from edutest.models.answer import Answer
from edutest.models.suspend_answer import SuspendAnswer
from edutest.models.group_membership import GroupMembership
from edutest.models.sat_test import SatTest
from edutest.models.sat_question import SatQuestion
from edutest.models.sat_answer_option import SatAnswerOption
from edutest.models.sat_attempt import SatAttempt
from edutest.models.sat_answer import SatAnswer
from edutest.models.deadline import Deadline

__all__ = [
    "Test", "Question", "AnswerOption", "Attempt", "Answer", "SuspendAnswer",
    "GroupMembership", "SatTest", "SatQuestion", "SatAnswerOption", "SatAttempt",
    "SatAnswer", "Deadline",
]
