"""
GroupMembership model - read-only view of which groups a user belongs to.

Memberships are managed by the group service; the SAT eligibility check
only reads them to pick the caller's deadline.
"""

from sqlalchemy import Column, Integer, UniqueConstraint
from edutest.database import Base


class GroupMembership(Base):
    __tablename__ = "group_memberships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, nullable=False)
    user_id = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_memberships_group_user"),
    )

    def __repr__(self):
        return f"<GroupMembership(group={self.group_id}, user={self.user_id})>"
