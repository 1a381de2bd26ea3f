"""Quiz routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.routes.auth import get_current_user
from config import DEFAULT_QUIZ_SIZE
from core.dependencies import QuizManagerDep
from schemas.question import QuestionInfo
from schemas.quiz import AnswerRequest, AnswerResult
from schemas.user import User
from utils.converters import question_feedback, question_to_info
from utils.question_manager import QuestionNotFoundError

router = APIRouter(prefix="/api/quiz", tags=["Quiz"])


@router.get("/questions", response_model=List[QuestionInfo], summary="Draw a quiz")
def draw_quiz(
    quiz_manager: QuizManagerDep,
    teacher_id: Optional[str] = Query(default=None, alias="teacherId"),
    theme: Optional[str] = Query(default=None),
    limit: int = Query(default=DEFAULT_QUIZ_SIZE),
    current_user: User = Depends(get_current_user),
) -> List[QuestionInfo]:
    try:
        models = quiz_manager.draw(
            current_user, teacher_id=teacher_id, theme=theme, limit=limit
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return [question_to_info(m) for m in models]


@router.post("/answer", response_model=AnswerResult, summary="Answer a quiz question")
def answer_question(
    req: AnswerRequest,
    quiz_manager: QuizManagerDep,
    current_user: User = Depends(get_current_user),
) -> AnswerResult:
    """Check an answer and, for students, award a point when it is right.

    Args:
        req: Question id and the chosen option index.
        quiz_manager: Injected QuizManager instance.
        current_user: Current authenticated user.

    Returns:
        AnswerResult with the correct option, the feedback and the student's
        score and rank after the answer.

    Raises:
        HTTPException: 404 if the question is missing or hidden from the
            caller, 400 if the option index is out of range.
    """
    try:
        outcome = quiz_manager.answer(
            current_user, req.question_id, req.selected_option_index
        )
    except QuestionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Question {req.question_id} not found",
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return AnswerResult(
        correct=outcome.correct,
        correct_option_index=outcome.question.correct_option_index,
        feedback=question_feedback(outcome.question),
        score=outcome.score,
        rank=outcome.rank,
    )
