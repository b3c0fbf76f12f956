from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from socialnet.database import Base
import uuid


class Filter(Base):
    """A named tag filter that can be applied to the post feed."""
    __tablename__ = "filters"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    author = relationship("User", back_populates="filters")

    def __repr__(self) -> str:
        return f"<Filter id={self.id} name={self.name}>"
