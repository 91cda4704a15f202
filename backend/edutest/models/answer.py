"""Answer model - the raw value a user submitted for one question of an Attempt."""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from edutest.database import Base


class Answer(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    attempt_id = Column(Integer, ForeignKey("attempts.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    student_answer = Column(Text, nullable=True,
                            doc="Option id as text, or free text for writing questions")
    submitted_at = Column(DateTime, nullable=False)

    attempt = relationship("Attempt", back_populates="answers")
    question = relationship("Question")

    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_answers_attempt_question"),
    )

    def __repr__(self):
        return f"<Answer(id={self.id}, attempt={self.attempt_id}, question={self.question_id})>"
