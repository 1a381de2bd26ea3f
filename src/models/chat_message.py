from sqlalchemy import Column, Integer, String

from .base import Base


class ChatMessageModel(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(String, index=True, nullable=False)
    sender_name = Column(String, nullable=False)
    sender_type = Column(String, nullable=False)
    receiver_id = Column(String, index=True, nullable=False)
    message = Column(String, nullable=False)
    created_at = Column(String, index=True, nullable=False)
