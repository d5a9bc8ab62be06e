from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from .base import Base, new_id, utcnow


class ChatMessage(Base):
    """One immutable turn of a chat thread.

    Exactly one of ``user_id`` (accounts) or ``session_id`` (anonymous
    visitors) identifies the owner.
    """

    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("ix_chat_messages_user_created", "user_id", "created_at"),
        Index("ix_chat_messages_session_created", "session_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String, nullable=True)
    session_id = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    is_from_bot = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


__all__ = ["ChatMessage"]
