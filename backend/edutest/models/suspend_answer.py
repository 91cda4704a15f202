"""
SuspendAnswer model - a saved, not yet submitted answer (draft).

One row per (user, test, question). A suspend call replaces the whole set
for (user, test); a final submission deletes it. The presence of any row
marks the test as "continue" for that user.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from edutest.database import Base


class SuspendAnswer(Base):
    """SQLAlchemy model for the suspend_test_answers table."""
    __tablename__ = "suspend_test_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    student_answer = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False,
                        doc="Start of the in-progress attempt, carried over on every save")
    suspend_time = Column(DateTime, nullable=False,
                          doc="When this draft was last saved")

    question = relationship("Question")

    __table_args__ = (
        UniqueConstraint("user_id", "test_id", "question_id", name="uq_suspend_user_test_question"),
        Index("ix_suspend_user_test", "user_id", "test_id"),
    )

    def __repr__(self):
        return f"<SuspendAnswer(user={self.user_id}, test={self.test_id}, question={self.question_id})>"
