from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from socialnet.database import Base
from datetime import datetime, timezone
import uuid


class Group(Base):
    """A named group of users owned by its author."""
    __tablename__ = "groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, unique=True, index=True)
    author_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    author = relationship("User", back_populates="authored_groups")
    memberships = relationship(
        "GroupMembership",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMembership.joined_at",
    )

    @property
    def member_ids(self) -> list[str]:
        return [m.user_id for m in self.memberships]

    def __repr__(self):
        return f"<Group id={self.id} name={self.name}>"


class GroupMembership(Base):
    """Association between a group and one of its members."""
    __tablename__ = "group_memberships"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), server_default=func.now())

    group = relationship("Group", back_populates="memberships")
    user = relationship("User", back_populates="group_memberships")

    __table_args__ = (
        UniqueConstraint('group_id', 'user_id', name='unique_group_member'),
    )

    def __repr__(self):
        return f"<GroupMembership group={self.group_id} user={self.user_id}>"
