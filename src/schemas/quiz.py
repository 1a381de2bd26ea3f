"""Quiz schema definitions."""

from typing import Optional

from schemas.common import CamelModel
from schemas.question import Feedback


class AnswerRequest(CamelModel):
    question_id: str
    selected_option_index: int


class AnswerResult(CamelModel):
    correct: bool
    correct_option_index: int
    feedback: Feedback
    score: Optional[int] = None
    rank: Optional[str] = None
