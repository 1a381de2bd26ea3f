"""Question schema definitions."""

from typing import List, Optional

from schemas.common import CamelModel


class Feedback(CamelModel):
    """Feedback shown after a question is answered."""

    title: str
    text: str
    illustration: str = ""


class QuestionRequest(CamelModel):
    """Body for creating or replacing a question."""

    theme: str
    question: str
    options: List[str]
    correct_option_index: int
    feedback: Feedback
    visibility: Optional[str] = None


class QuestionInfo(CamelModel):
    id: str
    theme: str
    question: str
    options: List[str]
    correct_option_index: int
    feedback: Feedback
    created_by: str
    visibility: str
    created_at: str
    updated_at: Optional[str] = None


class UpdateVisibilityRequest(CamelModel):
    visibility: str


class VisibilityResponse(CamelModel):
    message: str
    question_id: str
    visibility: str


class UploadQuestionsResponse(CamelModel):
    message: str
    created: int
    ids: List[str]
