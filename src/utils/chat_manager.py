"""Direct-message chat between a student and a teacher.

Clients poll ``list_conversation`` with the timestamp of the last message
they hold; nothing is pushed.
"""

import logging
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from models.chat_message import ChatMessageModel

logger = logging.getLogger(__name__)


class ChatManager:
    """Manages chat messages."""

    def __init__(self, db: Session):
        self.db = db

    def send_message(
        self,
        sender_id: str,
        sender_name: str,
        sender_type: str,
        receiver_id: str,
        message: str,
    ) -> ChatMessageModel:
        """Store a message.

        Raises:
            ValueError: If the message is blank.
        """
        text = message.strip()
        if not text:
            raise ValueError("Message cannot be empty")
        model = ChatMessageModel(
            sender_id=sender_id,
            sender_name=sender_name,
            sender_type=sender_type,
            receiver_id=receiver_id,
            message=text,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Chat message %s from %s to %s", model.id, sender_id, receiver_id)
        return model

    def list_conversation(
        self, user_a: str, user_b: str, after: Optional[datetime] = None
    ) -> List[ChatMessageModel]:
        """List both directions of a conversation, oldest first.

        Args:
            user_a: One participant.
            user_b: The other participant.
            after: Only return messages created strictly after this instant.
        """
        query = self.db.query(ChatMessageModel).filter(
            or_(
                and_(
                    ChatMessageModel.sender_id == user_a,
                    ChatMessageModel.receiver_id == user_b,
                ),
                and_(
                    ChatMessageModel.sender_id == user_b,
                    ChatMessageModel.receiver_id == user_a,
                ),
            )
        )
        if after is not None:
            if after.tzinfo is None:
                after = pytz.utc.localize(after)
            query = query.filter(
                ChatMessageModel.created_at > after.astimezone(pytz.utc).isoformat()
            )
        return query.order_by(ChatMessageModel.created_at, ChatMessageModel.id).all()
