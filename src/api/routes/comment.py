"""Question comment routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from api.routes.auth import get_current_user
from core.dependencies import CommentManagerDep, RelationshipManagerDep
from schemas.comment import (
    CommentListResponse,
    CreateCommentRequest,
    CreateCommentResponseRequest,
)
from schemas.common import CreatedResponse
from schemas.user import User
from utils.comment_manager import CommentNotFoundError
from utils.converters import comment_to_info
from utils.relationship_manager import is_valid_id

router = APIRouter(prefix="/api", tags=["Comment"])


def _check_caller(path_id: str, current_user: User, name: str) -> None:
    if not is_valid_id(path_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}",
        )
    if path_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )


@router.post(
    "/comments",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a question",
)
def create_comment(
    req: CreateCommentRequest,
    comment_manager: CommentManagerDep,
    current_user: User = Depends(get_current_user),
) -> CreatedResponse:
    try:
        model = comment_manager.add_comment(
            question_id=req.question_id,
            question_theme=req.question_theme,
            question_text=req.question_text,
            user_id=current_user.user_id,
            user_name=req.user_name or current_user.nome_completo,
            user_type=req.user_type,
            message=req.message,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return CreatedResponse(message="Comment created", id=model.comment_id)


@router.get(
    "/teacher-comments/{teacher_id}",
    response_model=CommentListResponse,
    summary="Comments written by a teacher's students",
)
def list_teacher_comments(
    teacher_id: str,
    comment_manager: CommentManagerDep,
    relationship_manager: RelationshipManagerDep,
    current_user: User = Depends(get_current_user),
) -> CommentListResponse:
    """List the comments of every student linked to the caller.

    Args:
        teacher_id: Must be the caller's own id.
        comment_manager: Injected CommentManager instance.
        relationship_manager: Injected RelationshipManager instance.
        current_user: Current authenticated user.

    Returns:
        CommentListResponse ordered by creation time, responses included.
    """
    _check_caller(teacher_id, current_user, "teacherId")
    student_ids = relationship_manager.list_student_ids_for_teacher(teacher_id)
    models = comment_manager.list_comments_by_users(student_ids)
    return CommentListResponse(comments=[comment_to_info(m) for m in models])


@router.get(
    "/student-comments/{student_id}",
    response_model=CommentListResponse,
    summary="Comments written by a student",
)
def list_student_comments(
    student_id: str,
    comment_manager: CommentManagerDep,
    current_user: User = Depends(get_current_user),
) -> CommentListResponse:
    _check_caller(student_id, current_user, "studentId")
    models = comment_manager.list_student_comments(student_id)
    return CommentListResponse(comments=[comment_to_info(m) for m in models])


@router.get(
    "/question-comments/{question_id}",
    response_model=CommentListResponse,
    summary="Comments on a question",
)
def list_question_comments(
    question_id: str,
    comment_manager: CommentManagerDep,
    current_user: User = Depends(get_current_user),
) -> CommentListResponse:
    models = comment_manager.list_question_comments(question_id)
    return CommentListResponse(comments=[comment_to_info(m) for m in models])


@router.post(
    "/comment-response",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Answer a comment",
)
def create_comment_response(
    req: CreateCommentResponseRequest,
    comment_manager: CommentManagerDep,
    current_user: User = Depends(get_current_user),
) -> CreatedResponse:
    try:
        model = comment_manager.add_response(
            comment_id=req.comment_id,
            user_id=current_user.user_id,
            user_name=req.user_name or current_user.nome_completo,
            user_type=req.user_type,
            message=req.message,
        )
    except CommentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return CreatedResponse(message="Response created", id=model.response_id)
