from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from socialnet.database import Base
import uuid

class User(Base):
    """User model for accounts created with a password or first seen through a Firebase token."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))  # UUID or Firebase UID
    username = Column(String, unique=True, index=True, nullable=True)  # Firebase users pick one later
    password_hash = Column(String, nullable=True)  # None for Firebase-only accounts
    email = Column(String, unique=True, index=True, nullable=True)
    display_name = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships - one to many
    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")
    filters = relationship("Filter", back_populates="author", cascade="all, delete-orphan")
    quizzes = relationship("Quiz", back_populates="author", cascade="all, delete-orphan")
    authored_groups = relationship("Group", back_populates="author", cascade="all, delete-orphan")
    group_memberships = relationship("GroupMembership", back_populates="user", cascade="all, delete-orphan")

    # Friend requests and friendships are owned by the friending engine and are
    # purged through it before an account is deleted; no ORM cascade here.

    def __repr__(self):
        return f"<User id={self.id} username={self.username}>"
