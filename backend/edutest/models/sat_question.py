"""
SatQuestion model - a question of a SAT test, tagged with a section.

Sections are free-form labels ("math", "verbal", ...) and are scored
independently; there is no fixed list of sections.
"""

from sqlalchemy import Column, Integer, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship, validates
from edutest.database import Base
from edutest.models.question import QUESTION_TYPES
from edutest.services.scoring import TOTAL_KEY


class SatQuestion(Base):
    """SQLAlchemy model for the sat_questions table."""
    __tablename__ = "sat_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_id = Column(Integer, ForeignKey("sat_tests.id", ondelete="CASCADE"), nullable=False)
    section = Column(Text, nullable=True,
                     doc="Section label used to bucket scores")
    question_text = Column(Text, nullable=False)
    hint = Column(Text, nullable=True)
    image = Column(Text, nullable=True)
    explanation = Column(Text, nullable=True)
    explanation_image = Column(Text, nullable=True)
    question_type = Column(Text, nullable=False, default="single",
                           doc="single | multiply | writing")

    sat_test = relationship("SatTest", back_populates="sat_questions")
    sat_answer_options = relationship("SatAnswerOption", back_populates="sat_question",
                                      cascade="all, delete-orphan", order_by="SatAnswerOption.id")

    __table_args__ = (
        Index("ix_sat_questions_test_id", "test_id"),
        CheckConstraint(f"section IS NULL OR section <> '{TOTAL_KEY}'",
                        name="ck_sat_questions_section_not_total"),
    )

    @validates("question_type")
    def validate_question_type(self, key, value):
        if value is not None and value not in QUESTION_TYPES:
            raise ValueError(f"question_type must be one of {QUESTION_TYPES}")
        return value

    @validates("section")
    def validate_section(self, key, value):
        # score maps carry the grand total under this key
        if value == TOTAL_KEY:
            raise ValueError(f"section label '{TOTAL_KEY}' is reserved")
        return value

    def __repr__(self):
        return f"<SatQuestion(id={self.id}, test={self.test_id}, section='{self.section}')>"
