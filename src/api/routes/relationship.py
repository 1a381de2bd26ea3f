"""Teacher link code and teacher/student relation routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from api.routes.auth import get_current_user, require_student, require_teacher
from core.dependencies import RelationshipManagerDep, UserManagerDep
from core.exceptions import PermissionDeniedError
from schemas.relationship import (
    GenerateTeacherCodeRequest,
    LinkStudentRequest,
    LinkStudentResponse,
    RelationInfo,
    StudentDataInfo,
    TeacherCodeLookupResponse,
    TeacherCodeResponse,
    UnlinkResponse,
)
from schemas.user import User
from utils.converters import relation_to_info
from utils.relationship_manager import (
    AlreadyLinkedError,
    InvalidTeacherCodeError,
    RelationNotFoundError,
    TeacherCodeConflictError,
    is_valid_id,
)

router = APIRouter(prefix="/api", tags=["Relationship"])


def _check_id(value: str, name: str) -> None:
    if not is_valid_id(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}",
        )


@router.post("/teacher-code", response_model=TeacherCodeResponse, summary="Generate a link code")
def generate_teacher_code(
    req: GenerateTeacherCodeRequest,
    relationship_manager: RelationshipManagerDep,
    current_user: User = Depends(get_current_user),
) -> TeacherCodeResponse:
    """Generate the code a teacher hands out to students.

    Any previous code of the teacher stops working.

    Args:
        req: Request with the teacher id and an optional custom code.
        relationship_manager: Injected RelationshipManager instance.
        current_user: Current authenticated user.

    Returns:
        TeacherCodeResponse with the code and its expiry.

    Raises:
        HTTPException: 400 for a bad id or code format, 403 for students,
            409 if the code value is taken by another teacher.
    """
    require_teacher(current_user, "generate link codes")
    _check_id(req.teacher_id, "teacherId")
    if req.teacher_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="teacherId does not match the authenticated user",
        )
    try:
        model = relationship_manager.generate_teacher_code(
            current_user.user_id, code=req.link_code
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    except TeacherCodeConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        )
    return TeacherCodeResponse(
        link_code=model.code,
        expires_at=model.expires_at,
        message="Code generated successfully",
    )


@router.get(
    "/teacher-code/{teacher_id}",
    response_model=TeacherCodeLookupResponse,
    summary="Get the active link code of a teacher",
)
def get_teacher_code(
    teacher_id: str,
    relationship_manager: RelationshipManagerDep,
) -> TeacherCodeLookupResponse:
    _check_id(teacher_id, "teacherId")
    model = relationship_manager.get_active_code(teacher_id)
    return TeacherCodeLookupResponse(code=model.code if model else None)


@router.post("/link-student", response_model=LinkStudentResponse, summary="Link to a teacher")
def link_student(
    req: LinkStudentRequest,
    relationship_manager: RelationshipManagerDep,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> LinkStudentResponse:
    """Link the calling student to the teacher owning a code.

    Raises:
        HTTPException: 400 if the code cannot be used or the pair is already
            linked, 403 for teachers or for another student's id.
    """
    require_student(current_user, "link to a teacher")
    _check_id(req.student_id, "studentId")
    if req.student_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="studentId does not match the authenticated user",
        )
    code = (req.teacher_code or "").strip()
    if not code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="teacherCode is required",
        )
    try:
        relation = relationship_manager.link_student(
            code,
            current_user.user_id,
            req.student_name or current_user.nome_completo,
            user_manager.get_user_name,
        )
    except (InvalidTeacherCodeError, AlreadyLinkedError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return LinkStudentResponse(
        success=True,
        teacher_name=relation.teacher_name,
        relation_id=relation.relation_id,
    )


@router.get(
    "/teacher-students/{teacher_id}",
    response_model=List[RelationInfo],
    summary="List the students of a teacher",
)
def list_teacher_students(
    teacher_id: str,
    relationship_manager: RelationshipManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[RelationInfo]:
    _check_id(teacher_id, "teacherId")
    return [relation_to_info(r) for r in relationship_manager.list_teacher_students(teacher_id)]


@router.get(
    "/student-relations/{student_id}",
    response_model=List[RelationInfo],
    summary="List the teachers of a student",
)
@router.get(
    "/teacher-relations/{student_id}",
    response_model=List[RelationInfo],
    include_in_schema=False,
)
def list_student_relations(
    student_id: str,
    relationship_manager: RelationshipManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[RelationInfo]:
    _check_id(student_id, "studentId")
    return [relation_to_info(r) for r in relationship_manager.list_student_relations(student_id)]


@router.delete(
    "/unlink-student/{relation_id}",
    response_model=UnlinkResponse,
    summary="Remove a teacher/student link",
)
def unlink_student(
    relation_id: str,
    relationship_manager: RelationshipManagerDep,
    current_user: User = Depends(get_current_user),
) -> UnlinkResponse:
    _check_id(relation_id, "relationId")
    try:
        relationship_manager.unlink(relation_id, current_user.user_id)
    except RelationNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Relation not found",
        )
    except PermissionDeniedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        )
    return UnlinkResponse(success=True, message="Student unlinked successfully")


@router.get(
    "/students_data",
    response_model=List[StudentDataInfo],
    summary="Scores of the linked students",
)
def students_data(
    relationship_manager: RelationshipManagerDep,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[StudentDataInfo]:
    """List the caller's students with their quiz score and rank.

    Raises:
        HTTPException: 403 if the caller is not a teacher.
    """
    require_teacher(current_user, "view student data")
    relations = relationship_manager.list_teacher_students(current_user.user_id)
    students = {
        u.user_id: u
        for u in user_manager.get_users_by_ids([r.student_id for r in relations])
    }
    results = []
    for relation in relations:
        student = students.get(relation.student_id)
        results.append(
            StudentDataInfo(
                relation_id=relation.relation_id,
                student_id=relation.student_id,
                student_name=student.nome_completo if student else relation.student_name,
                score=(student.score or 0) if student else 0,
                rank=student.rank if student else None,
                linked_at=relation.joined_at,
            )
        )
    return results
