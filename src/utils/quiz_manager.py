"""Quiz drawing and answer checking."""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from config import DEFAULT_QUIZ_SIZE, MAX_QUIZ_SIZE
from models.question import QuestionModel
from schemas.user import User
from utils.question_manager import QuestionManager, QuestionNotFoundError
from utils.relationship_manager import RelationshipManager
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


@dataclass
class AnswerOutcome:
    question: QuestionModel
    correct: bool
    score: Optional[int] = None
    rank: Optional[str] = None


class QuizManager:
    """Draws quizzes from the questions a user may see and scores answers."""

    def __init__(
        self,
        question_manager: QuestionManager,
        relationship_manager: RelationshipManager,
        user_manager: UserManager,
        rng: Optional[random.Random] = None,
    ):
        self.questions = question_manager
        self.relations = relationship_manager
        self.users = user_manager
        self.rng = rng or random.Random()

    def _linked_teacher_ids(self, user: User) -> List[str]:
        if not user.is_student:
            return []
        return self.relations.list_teacher_ids_for_student(user.user_id)

    def draw(
        self,
        user: User,
        teacher_id: Optional[str] = None,
        theme: Optional[str] = None,
        limit: int = DEFAULT_QUIZ_SIZE,
    ) -> List[QuestionModel]:
        """Draw up to ``limit`` shuffled questions.

        Args:
            user: The user taking the quiz.
            teacher_id: Restrict the pool to one teacher's questions. Private
                ones are only included when the user is linked to that teacher.
            theme: Restrict the pool to one theme.
            limit: Maximum number of questions.

        Raises:
            ValueError: If ``limit`` is out of range.
        """
        if not 1 <= limit <= MAX_QUIZ_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_QUIZ_SIZE}")
        pool = self.questions.list_visible(
            user.user_id,
            linked_teacher_ids=self._linked_teacher_ids(user),
            theme=theme,
            created_by=teacher_id,
        )
        self.rng.shuffle(pool)
        return pool[:limit]

    def answer(self, user: User, question_id: str, selected_option_index: int) -> AnswerOutcome:
        """Check an answer and score it for students.

        Raises:
            QuestionNotFoundError: If the question does not exist or is not
                visible to the user.
            ValueError: If the selected index is out of range.
        """
        question = self.questions.get_question(question_id)
        if not self.questions.is_visible(
            question, user.user_id, self._linked_teacher_ids(user)
        ):
            raise QuestionNotFoundError(question_id)
        if not 0 <= selected_option_index < len(question.options or []):
            raise ValueError("selectedOptionIndex is out of range")

        correct = selected_option_index == question.correct_option_index
        outcome = AnswerOutcome(question=question, correct=correct)
        if user.is_student:
            if correct:
                outcome.score, outcome.rank = self.users.add_points(user.user_id, 1)
            else:
                outcome.score, outcome.rank = user.score or 0, user.rank
        logger.info(
            "User %s answered %s: %s", user.user_id, question_id,
            "correct" if correct else "wrong",
        )
        return outcome
