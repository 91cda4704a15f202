"""
Test model - a generic group assessment.

A Test is authored by teachers/admins for one group. Students may attempt it
from `time_open` on, at most `max_attempts` times; `duration_minutes` is the
allotted time measured from each attempt's own start.
"""

from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.orm import relationship
from edutest.database import Base


class Test(Base):
    """SQLAlchemy model for the tests table."""
    __tablename__ = "tests"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Unique test identifier")
    group_id = Column(Integer, nullable=True,
                      doc="Owning group (managed outside this service)")
    name = Column(Text, nullable=False,
                  doc="Display name")
    time_open = Column(DateTime, nullable=True,
                       doc="When students may start submitting (NULL = always open)")
    duration_minutes = Column(Integer, nullable=True,
                              doc="Allotted minutes from the attempt's start")
    max_attempts = Column(Integer, nullable=True,
                          doc="Maximum completed attempts per user (NULL = unlimited)")

    questions = relationship("Question", back_populates="test",
                             cascade="all, delete-orphan", order_by="Question.id")
    attempts = relationship("Attempt", back_populates="test")

    def __repr__(self):
        return f"<Test(id={self.id}, name='{self.name}', max_attempts={self.max_attempts})>"
