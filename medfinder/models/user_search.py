from sqlalchemy import JSON, Column, DateTime, Index, String

from .base import Base, new_id, utcnow


class UserSearch(Base):
    __tablename__ = "user_searches"
    __table_args__ = (
        Index("ix_user_searches_user_created", "user_id", "created_at"),
        Index("ix_user_searches_session_created", "session_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String, nullable=True)
    session_id = Column(String, nullable=True)
    query = Column(String, nullable=False)
    results = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


__all__ = ["UserSearch"]
