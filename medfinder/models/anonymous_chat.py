"""Weekly chat allowance for anonymous sessions."""
from sqlalchemy import Column, DateTime, Integer, String

from .base import Base, new_id, utcnow


class AnonymousChatUsage(Base):
    __tablename__ = "anonymous_chat_usage"

    id = Column(String(36), primary_key=True, default=new_id)
    session_id = Column(String, nullable=False, unique=True)
    ip_address = Column(String)
    chat_count = Column(Integer, nullable=False, server_default="0")
    week_start = Column(DateTime(timezone=True), nullable=False)  # UTC instant of the week boundary
    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_used_at = Column(DateTime(timezone=True), default=utcnow)


__all__ = ["AnonymousChatUsage"]
