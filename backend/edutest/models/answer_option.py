"""AnswerOption model - a selectable option (or canonical text) of a Question."""

from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from edutest.database import Base


class AnswerOption(Base):
    __tablename__ = "answer_options"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Option identifier, the value students submit")
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False,
                        doc="Server-side only; stripped from every pre-submission view")

    question = relationship("Question", back_populates="answer_options")

    __table_args__ = (
        Index("ix_answer_options_question_id", "question_id"),
    )

    def __repr__(self):
        return f"<AnswerOption(id={self.id}, question={self.question_id}, correct={self.is_correct})>"
