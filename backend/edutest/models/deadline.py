"""
Deadline model - the open/due window of a SAT test for one group.

At most one deadline exists per (test, group), and `due` must be strictly
after `open`. Deadlines are authored elsewhere; the check below holds for
every write path that goes through the ORM.
"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship, validates
from edutest.database import Base


class Deadline(Base):
    """SQLAlchemy model for the deadlines table."""
    __tablename__ = "deadlines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_id = Column(Integer, ForeignKey("sat_tests.id", ondelete="CASCADE"), nullable=False)
    group_id = Column(Integer, nullable=False)
    open = Column(DateTime, nullable=False)
    due = Column(DateTime, nullable=False)

    sat_test = relationship("SatTest", back_populates="deadlines")

    __table_args__ = (
        UniqueConstraint("test_id", "group_id", name="uq_deadlines_test_group"),
        CheckConstraint("due > open", name="ck_deadlines_due_after_open"),
    )

    @validates("open", "due")
    def validate_window(self, key, value):
        other = self.due if key == "open" else self.open
        if value is not None and other is not None:
            opens, due = (value, other) if key == "open" else (other, value)
            if due <= opens:
                raise ValueError("due must be after open")
        return value

    def __repr__(self):
        return f"<Deadline(test={self.test_id}, group={self.group_id}, open={self.open}, due={self.due})>"
