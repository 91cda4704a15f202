"""
Attempt model - one completed, graded submission of a generic Test.

Attempts are created together with their Answer rows in a single
transaction at submission time. `attempt_number` counts a user's attempts
on a test from 1; the unique constraint on (test_id, user_id,
attempt_number) makes two racing submissions collide instead of both
slipping past the max-attempts check.
"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from edutest.database import Base


class Attempt(Base):
    """SQLAlchemy model for the attempts table."""
    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Unique attempt identifier")
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False,
                     doc="Reference to the attempted test")
    user_id = Column(Integer, nullable=False,
                     doc="User who submitted (identity managed outside this service)")
    attempt_number = Column(Integer, nullable=False,
                            doc="1-based ordinal of this attempt for (test, user)")
    start_time = Column(DateTime, nullable=False,
                        doc="Client-reported start of the attempt (UTC)")
    end_time = Column(DateTime, nullable=False,
                      doc="Server time of submission (UTC)")
    score = Column(Integer, nullable=False, default=0,
                   doc="Number of correctly answered questions")

    test = relationship("Test", back_populates="attempts")
    answers = relationship("Answer", back_populates="attempt",
                           cascade="all, delete-orphan", order_by="Answer.id")

    __table_args__ = (
        UniqueConstraint("test_id", "user_id", "attempt_number", name="uq_attempts_test_user_number"),
        Index("ix_attempts_user_id", "user_id"),
    )

    @property
    def time_taken_seconds(self) -> int:
        return max(0, int((self.end_time - self.start_time).total_seconds()))

    def __repr__(self):
        return f"<Attempt(id={self.id}, test={self.test_id}, user={self.user_id}, score={self.score})>"
