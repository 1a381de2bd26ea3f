"""Question bank routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from api.routes.auth import get_current_user, require_teacher
from config import MAX_XML_UPLOAD_SIZE
from core.dependencies import QuestionManagerDep, RelationshipManagerDep
from core.exceptions import PermissionDeniedError
from schemas.common import CreatedResponse, MessageResponse
from schemas.question import (
    QuestionInfo,
    QuestionRequest,
    UpdateVisibilityRequest,
    UploadQuestionsResponse,
    VisibilityResponse,
)
from schemas.user import User
from utils.converters import question_to_info
from utils.question_manager import QuestionNotFoundError
from utils.question_xml import parse_questions_xml

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["Question"])
# The web client posts questionnaire files outside the /api prefix.
upload_router = APIRouter(tags=["Question"])


def _not_found(question_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Question {question_id} not found",
    )


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a question",
)
def create_question(
    req: QuestionRequest,
    question_manager: QuestionManagerDep,
    current_user: User = Depends(get_current_user),
) -> CreatedResponse:
    require_teacher(current_user, "create questions")
    try:
        model = question_manager.create_question(req, current_user.user_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return CreatedResponse(message="Question created", id=model.question_id)


@router.get("", response_model=List[QuestionInfo], summary="List visible questions")
def list_questions(
    question_manager: QuestionManagerDep,
    relationship_manager: RelationshipManagerDep,
    theme: Optional[str] = Query(default=None),
    created_by: Optional[str] = Query(default=None, alias="createdBy"),
    current_user: User = Depends(get_current_user),
) -> List[QuestionInfo]:
    """List every question the caller may see.

    Students additionally see the private questions of the teachers they are
    linked to.

    Args:
        question_manager: Injected QuestionManager instance.
        relationship_manager: Injected RelationshipManager instance.
        theme: Optional theme filter.
        created_by: Optional author filter.
        current_user: Current authenticated user.

    Returns:
        List of QuestionInfo, oldest first.
    """
    linked = []
    if current_user.is_student:
        linked = relationship_manager.list_teacher_ids_for_student(current_user.user_id)
    models = question_manager.list_visible(
        current_user.user_id,
        linked_teacher_ids=linked,
        theme=theme,
        created_by=created_by,
    )
    return [question_to_info(m) for m in models]


@router.get("/themes", response_model=List[str], summary="List question themes")
def list_themes(
    question_manager: QuestionManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[str]:
    return question_manager.list_themes()


@router.put("/{question_id}", response_model=CreatedResponse, summary="Update a question")
def update_question(
    question_id: str,
    req: QuestionRequest,
    question_manager: QuestionManagerDep,
    current_user: User = Depends(get_current_user),
) -> CreatedResponse:
    require_teacher(current_user, "edit questions")
    try:
        model = question_manager.update_question(question_id, req, current_user.user_id)
    except QuestionNotFoundError:
        raise _not_found(question_id)
    except PermissionDeniedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return CreatedResponse(message="Question updated", id=model.question_id)


@router.delete("/{question_id}", response_model=MessageResponse, summary="Delete a question")
def delete_question(
    question_id: str,
    question_manager: QuestionManagerDep,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    require_teacher(current_user, "delete questions")
    try:
        question_manager.delete_question(question_id, current_user.user_id)
    except QuestionNotFoundError:
        raise _not_found(question_id)
    except PermissionDeniedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        )
    return MessageResponse(message="Question deleted")


@router.patch(
    "/{question_id}/visibility",
    response_model=VisibilityResponse,
    summary="Change question visibility",
)
def update_visibility(
    question_id: str,
    req: UpdateVisibilityRequest,
    question_manager: QuestionManagerDep,
    current_user: User = Depends(get_current_user),
) -> VisibilityResponse:
    """Switch a question between public and private.

    Raises:
        HTTPException: 400 for an unknown visibility, 403 for non-authors,
            404 if the question does not exist.
    """
    require_teacher(current_user, "change question visibility")
    try:
        model = question_manager.set_visibility(
            question_id, req.visibility, current_user.user_id
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    except QuestionNotFoundError:
        raise _not_found(question_id)
    except PermissionDeniedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        )
    return VisibilityResponse(
        message="Visibility updated",
        question_id=model.question_id,
        visibility=model.visibility,
    )


@upload_router.post(
    "/upload_questions_xml",
    response_model=UploadQuestionsResponse,
    summary="Import questions from an XML questionnaire",
)
async def upload_questions_xml(
    question_manager: QuestionManagerDep,
    file: UploadFile = File(..., description="Questionnaire XML file"),
    current_user: User = Depends(get_current_user),
) -> UploadQuestionsResponse:
    """Create every question of an uploaded questionnaire.

    The import is all or nothing: one invalid question rejects the file.

    Raises:
        HTTPException: 400 for malformed or invalid content, 403 for students,
            413 if the file is too large, 415 for non-XML files.
    """
    require_teacher(current_user, "upload questionnaires")

    if not (file.filename or "").lower().endswith(".xml"):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only .xml files are accepted",
        )
    content_bytes = await file.read()
    if len(content_bytes) > MAX_XML_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"XML file size exceeds maximum allowed size of {MAX_XML_UPLOAD_SIZE / 1024 / 1024}MB",
        )

    try:
        requests = parse_questions_xml(content_bytes)
        models = question_manager.create_questions(requests, current_user.user_id)
    except ValueError as exc:
        logger.info("Rejected questionnaire %s: %s", file.filename, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return UploadQuestionsResponse(
        message=f"{len(models)} questions imported successfully",
        created=len(models),
        ids=[m.question_id for m in models],
    )
