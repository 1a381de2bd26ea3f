"""Schemas for teacher link codes and teacher/student relations."""

from typing import Optional

from schemas.common import CamelModel


class GenerateTeacherCodeRequest(CamelModel):
    teacher_id: str
    link_code: Optional[str] = None


class TeacherCodeResponse(CamelModel):
    link_code: str
    expires_at: str
    message: str


class TeacherCodeLookupResponse(CamelModel):
    code: Optional[str] = None


class LinkStudentRequest(CamelModel):
    teacher_code: str
    student_id: str
    student_name: Optional[str] = None


class LinkStudentResponse(CamelModel):
    success: bool
    teacher_name: str
    relation_id: str


class RelationInfo(CamelModel):
    relation_id: str
    teacher_id: str
    student_id: str
    teacher_name: str
    student_name: str
    created_at: str


class StudentDataInfo(CamelModel):
    """A linked student as seen from the teacher dashboard."""

    relation_id: str
    student_id: str
    student_name: str
    score: int = 0
    rank: Optional[str] = None
    linked_at: str


class UnlinkResponse(CamelModel):
    success: bool
    message: str
