from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from edutest.database import Base


class SatAnswer(Base):
    __tablename__ = "sat_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    attempt_id = Column(Integer, ForeignKey("sat_attempts.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("sat_questions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    selected_option = Column(Text, nullable=True,
                             doc="Selected option id as text, or free text for writing questions")
    submitted_at = Column(DateTime, nullable=False)

    sat_attempt = relationship("SatAttempt", back_populates="sat_answers")
    sat_question = relationship("SatQuestion")

    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_sat_answers_attempt_question"),
    )

    def __repr__(self):
        return f"<SatAnswer(id={self.id}, attempt={self.attempt_id}, question={self.question_id})>"
