"""
SatAttempt model - one completed submission of a SAT test.

Only the grand total is stored; per-section scores are recomputed from
the attempt's SatAnswer rows whenever they are needed. `total_score` is
written once, at submission.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from edutest.database import Base


class SatAttempt(Base):
    """SQLAlchemy model for the sat_attempts table."""
    __tablename__ = "sat_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_id = Column(Integer, ForeignKey("sat_tests.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(Text, nullable=False, default="completed")
    total_score = Column(Integer, nullable=False, default=0,
                         doc="Sum of all section scores at submission time")

    sat_test = relationship("SatTest", back_populates="sat_attempts")
    sat_answers = relationship("SatAnswer", back_populates="sat_attempt",
                               cascade="all, delete-orphan", order_by="SatAnswer.id")

    __table_args__ = (
        Index("ix_sat_attempts_user_id", "user_id"),
        Index("ix_sat_attempts_test_id", "test_id"),
    )

    def __repr__(self):
        return f"<SatAttempt(id={self.id}, test={self.test_id}, user={self.user_id}, total={self.total_score})>"
