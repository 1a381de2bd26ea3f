"""Comment thread management utilities."""

import logging
import secrets
from datetime import datetime
from typing import List

import pytz
from sqlalchemy.orm import Session, selectinload

from config import USER_TYPES
from models.comment import CommentModel, CommentResponseModel

logger = logging.getLogger(__name__)


class CommentNotFoundError(Exception):
    """Exception raised when a comment is not found."""

    pass


def _check_user_type(user_type: str) -> None:
    if user_type not in USER_TYPES:
        raise ValueError("Invalid userType")


class CommentManager:
    """Manages question comments and their one level of responses."""

    def __init__(self, db: Session):
        self.db = db

    def add_comment(
        self,
        question_id: str,
        question_theme: str,
        question_text: str,
        user_id: str,
        user_name: str,
        user_type: str,
        message: str,
    ) -> CommentModel:
        """Add a comment on a question.

        Raises:
            ValueError: If ``user_type`` is unknown or the message is blank.
        """
        _check_user_type(user_type)
        if not message.strip():
            raise ValueError("Message cannot be empty")
        model = CommentModel(
            comment_id=secrets.token_hex(10),
            question_id=question_id,
            question_theme=question_theme,
            question_text=question_text,
            user_id=user_id,
            user_name=user_name,
            user_type=user_type,
            message=message,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Comment %s added by %s on question %s",
            model.comment_id, user_id, question_id,
        )
        return model

    def add_response(
        self,
        comment_id: str,
        user_id: str,
        user_name: str,
        user_type: str,
        message: str,
    ) -> CommentResponseModel:
        """Answer a comment.

        Raises:
            ValueError: If ``user_type`` is unknown or the message is blank.
            CommentNotFoundError: If the comment does not exist.
        """
        _check_user_type(user_type)
        if not message.strip():
            raise ValueError("Message cannot be empty")
        comment = (
            self.db.query(CommentModel)
            .filter(CommentModel.comment_id == comment_id)
            .first()
        )
        if not comment:
            raise CommentNotFoundError(comment_id)
        model = CommentResponseModel(
            response_id=secrets.token_hex(10),
            comment_id=comment_id,
            user_id=user_id,
            user_name=user_name,
            user_type=user_type,
            message=message,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Response %s added by %s to comment %s", model.response_id, user_id, comment_id)
        return model

    def list_comments_by_users(self, user_ids: List[str]) -> List[CommentModel]:
        """List comments written by any of ``user_ids``, oldest first."""
        if not user_ids:
            return []
        return (
            self.db.query(CommentModel)
            .options(selectinload(CommentModel.responses))
            .filter(CommentModel.user_id.in_(user_ids))
            .order_by(CommentModel.created_at)
            .all()
        )

    def list_student_comments(self, student_id: str) -> List[CommentModel]:
        return self.list_comments_by_users([student_id])

    def list_question_comments(self, question_id: str) -> List[CommentModel]:
        return (
            self.db.query(CommentModel)
            .options(selectinload(CommentModel.responses))
            .filter(CommentModel.question_id == question_id)
            .order_by(CommentModel.created_at)
            .all()
        )
