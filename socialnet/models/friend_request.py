from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from socialnet.database import Base
import enum
import uuid

class FriendRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class FriendRequest(Base):
    """Directed friend request. Accepted and rejected rows are terminal history."""
    __tablename__ = "friend_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    requester_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, default=FriendRequestStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    requester = relationship("User", foreign_keys=[requester_id])
    recipient = relationship("User", foreign_keys=[recipient_id])

    # No unique constraint on the ordered pair: a rejected pair may be re-requested.
    # "At most one pending per unordered pair" is enforced by the friending engine.
    __table_args__ = (
        Index("ix_friend_requests_pair_status", "requester_id", "recipient_id", "status"),
    )

    def __repr__(self):
        return f"<FriendRequest id={self.id} requester={self.requester_id} recipient={self.recipient_id} status={self.status}>"
