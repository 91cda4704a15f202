from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from edutest.database import Base


class SatAnswerOption(Base):
    __tablename__ = "sat_answer_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("sat_questions.id", ondelete="CASCADE"), nullable=False)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    sat_question = relationship("SatQuestion", back_populates="sat_answer_options")

    __table_args__ = (
        Index("ix_sat_answer_options_question_id", "question_id"),
    )

    def __repr__(self):
        return f"<SatAnswerOption(id={self.id}, question={self.question_id}, correct={self.is_correct})>"
