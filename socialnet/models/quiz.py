from sqlalchemy import Column, String, DateTime, ForeignKey, Text, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from socialnet.database import Base
import uuid


class Quiz(Base):
    """A multiple-choice question written by a user."""
    __tablename__ = "quizzes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False, unique=True)  # Questions are assumed unique
    options = Column(JSON, nullable=False, default=list)
    answer = Column(String, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    author = relationship("User", back_populates="quizzes")

    def __repr__(self):
        return f"<Quiz id={self.id} author_id={self.author_id}>"
