"""
Question model - one question of a generic Test.

`question_type` is one of:
- single: one correct option
- multiply: several options may be marked correct
- writing: free text compared against the single correct option's text
"""

from sqlalchemy import Column, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import relationship, validates
from edutest.database import Base

QUESTION_TYPES = ("single", "multiply", "writing")


class Question(Base):
    """SQLAlchemy model for the questions table."""
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Unique question identifier")
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False,
                     doc="Owning test")
    question_text = Column(Text, nullable=False)
    hint = Column(Text, nullable=True)
    image = Column(Text, nullable=True,
                   doc="Object storage URL of the question image")
    explanation = Column(Text, nullable=True,
                         doc="Worked explanation, never shown before submission")
    explanation_image = Column(Text, nullable=True)
    question_type = Column(Text, nullable=False, default="single",
                           doc="single | multiply | writing")

    test = relationship("Test", back_populates="questions")
    answer_options = relationship("AnswerOption", back_populates="question",
                                  cascade="all, delete-orphan", order_by="AnswerOption.id")

    __table_args__ = (
        Index("ix_questions_test_id", "test_id"),
    )

    @validates("question_type")
    def validate_question_type(self, key, value):
        if value is not None and value not in QUESTION_TYPES:
            raise ValueError(f"question_type must be one of {QUESTION_TYPES}")
        return value

    def __repr__(self):
        return f"<Question(id={self.id}, test={self.test_id}, type='{self.question_type}')>"
