"""Question management utilities."""

import logging
import secrets
from datetime import datetime
from typing import Iterable, List, Optional

import pytz
from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import QUESTION_VISIBILITIES
from core.exceptions import PermissionDeniedError
from models.question import QuestionModel
from schemas.question import QuestionRequest

logger = logging.getLogger(__name__)


class QuestionNotFoundError(Exception):
    """Exception raised when a question is not found."""

    pass


def validate_question(req: QuestionRequest) -> None:
    """Check the fields pydantic cannot express on its own.

    Raises:
        ValueError: With a message suitable for a 400 response.
    """
    if not req.theme.strip() or not req.question.strip():
        raise ValueError("theme and question cannot be empty")
    if len(req.options) < 2:
        raise ValueError("A question needs at least two options")
    if any(not option.strip() for option in req.options):
        raise ValueError("Options cannot be empty")
    if not 0 <= req.correct_option_index < len(req.options):
        raise ValueError("correctOptionIndex is out of range")
    if not req.feedback.title.strip() or not req.feedback.text.strip():
        raise ValueError("feedback.title and feedback.text are required")
    if req.visibility is not None and req.visibility not in QUESTION_VISIBILITIES:
        raise ValueError('visibility must be "public" or "private"')


class QuestionManager:
    """Manages multiple-choice questions."""

    def __init__(self, db: Session):
        self.db = db

    def create_question(self, req: QuestionRequest, created_by: str) -> QuestionModel:
        """Create a question authored by ``created_by``.

        Raises:
            ValueError: If the request is invalid.
        """
        validate_question(req)
        model = QuestionModel(
            question_id=secrets.token_hex(10),
            created_by=created_by,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self._apply(model, req)
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created question %s by %s", model.question_id, created_by)
        return model

    def create_questions(
        self, reqs: Iterable[QuestionRequest], created_by: str
    ) -> List[QuestionModel]:
        """Create several questions in one transaction.

        Nothing is stored unless every request is valid.

        Raises:
            ValueError: If any request is invalid.
        """
        reqs = list(reqs)
        for req in reqs:
            validate_question(req)
        now = datetime.now(pytz.utc).isoformat()
        models = []
        for req in reqs:
            model = QuestionModel(
                question_id=secrets.token_hex(10),
                created_by=created_by,
                created_at=now,
            )
            self._apply(model, req)
            self.db.add(model)
            models.append(model)
        self.db.commit()
        logger.info("Imported %d questions by %s", len(models), created_by)
        return models

    def get_question(self, question_id: str) -> QuestionModel:
        model = (
            self.db.query(QuestionModel)
            .filter(QuestionModel.question_id == question_id)
            .first()
        )
        if not model:
            raise QuestionNotFoundError(question_id)
        return model

    def update_question(
        self, question_id: str, req: QuestionRequest, user_id: str
    ) -> QuestionModel:
        """Replace the content of a question.

        Raises:
            QuestionNotFoundError: If the question does not exist.
            PermissionDeniedError: If ``user_id`` is not the author.
            ValueError: If the request is invalid.
        """
        model = self.get_question(question_id)
        self._check_author(model, user_id)
        validate_question(req)
        self._apply(model, req)
        model.updated_at = datetime.now(pytz.utc).isoformat()
        model.updated_by = user_id
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated question %s", question_id)
        return model

    def set_visibility(self, question_id: str, visibility: str, user_id: str) -> QuestionModel:
        if visibility not in QUESTION_VISIBILITIES:
            raise ValueError('visibility must be "public" or "private"')
        model = self.get_question(question_id)
        self._check_author(model, user_id)
        model.visibility = visibility
        model.updated_at = datetime.now(pytz.utc).isoformat()
        model.updated_by = user_id
        self.db.commit()
        logger.info("Question %s visibility -> %s", question_id, visibility)
        return model

    def delete_question(self, question_id: str, user_id: str) -> None:
        model = self.get_question(question_id)
        self._check_author(model, user_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted question %s by %s", question_id, user_id)

    def list_visible(
        self,
        user_id: str,
        linked_teacher_ids: Iterable[str] = (),
        theme: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> List[QuestionModel]:
        """List the questions ``user_id`` may see.

        That is every public question, the user's own questions, and private
        questions written by ``linked_teacher_ids``.
        """
        allowed_authors = set(linked_teacher_ids) | {user_id}
        query = self.db.query(QuestionModel).filter(
            or_(
                QuestionModel.visibility == "public",
                QuestionModel.created_by.in_(allowed_authors),
            )
        )
        if theme:
            query = query.filter(QuestionModel.theme == theme.lower().strip())
        if created_by:
            query = query.filter(QuestionModel.created_by == created_by)
        return query.order_by(QuestionModel.created_at).all()

    def is_visible(
        self, model: QuestionModel, user_id: str, linked_teacher_ids: Iterable[str] = ()
    ) -> bool:
        if model.visibility == "public" or model.created_by == user_id:
            return True
        return model.created_by in set(linked_teacher_ids)

    def list_themes(self) -> List[str]:
        rows = self.db.query(QuestionModel.theme).distinct().all()
        return sorted(theme for (theme,) in rows)

    @staticmethod
    def _apply(model: QuestionModel, req: QuestionRequest) -> None:
        model.theme = req.theme.lower().strip()
        model.question_text = req.question
        model.options = list(req.options)
        model.correct_option_index = req.correct_option_index
        model.feedback_title = req.feedback.title
        model.feedback_text = req.feedback.text
        model.feedback_illustration = req.feedback.illustration or ""
        model.visibility = req.visibility or "public"

    @staticmethod
    def _check_author(model: QuestionModel, user_id: str) -> None:
        if model.created_by != user_id:
            raise PermissionDeniedError("Only the author can change this question")
