"""
SatTest model - a sectioned SAT-style assessment.

A SAT test is not capped by attempt count. Its own `opens`/`due` window
applies unless the caller's group has a Deadline for it.
"""

from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.orm import relationship
from edutest.database import Base


class SatTest(Base):
    """SQLAlchemy model for the sat_tests table."""
    __tablename__ = "sat_tests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    group_id = Column(Integer, nullable=True,
                      doc="Optional owning group; access windows come from deadlines")
    opens = Column(DateTime, nullable=True,
                   doc="Default opening time when no group deadline applies")
    due = Column(DateTime, nullable=True,
                 doc="Default due time when no group deadline applies")

    sat_questions = relationship("SatQuestion", back_populates="sat_test",
                                 cascade="all, delete-orphan", order_by="SatQuestion.id")
    sat_attempts = relationship("SatAttempt", back_populates="sat_test")
    deadlines = relationship("Deadline", back_populates="sat_test",
                             cascade="all, delete-orphan")

    def __repr__(self):
        return f"<SatTest(id={self.id}, name='{self.name}')>"
