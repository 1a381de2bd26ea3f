"""Teacher link codes and teacher/student relations."""

import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import TEACHER_CODE_TTL_HOURS
from core.exceptions import PermissionDeniedError
from models.teacher_code import TeacherCodeModel
from models.teacher_student import TeacherStudentModel

logger = logging.getLogger(__name__)

LINK_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{4,32}$")
LINK_CODE_PREFIX = "PROF_"


class RelationNotFoundError(Exception):
    """Exception raised when a teacher/student relation is not found."""

    pass


class AlreadyLinkedError(Exception):
    """Exception raised when a student is already linked to the teacher."""

    pass


class InvalidTeacherCodeError(Exception):
    """Exception raised when a code is unknown, expired or already claimed."""

    pass


class TeacherCodeConflictError(Exception):
    """Exception raised when a requested code value belongs to another teacher."""

    pass


def build_relation_id(student_id: str, teacher_id: str) -> str:
    return f"{student_id}_{teacher_id}"


def is_valid_id(value: Optional[str]) -> bool:
    """Reject ids the web client sends when its state is not loaded yet."""
    return bool(value) and value != "undefined" and bool(value.strip())


def _parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class RelationshipManager:
    """Manages teacher link codes and teacher/student links."""

    def __init__(self, db: Session):
        self.db = db

    # --- Teacher codes ---

    def generate_teacher_code(
        self,
        teacher_id: str,
        code: Optional[str] = None,
        expires_in_hours: int = TEACHER_CODE_TTL_HOURS,
    ) -> TeacherCodeModel:
        """Create the active link code of a teacher.

        Older codes of the same teacher are deleted, so each teacher has at
        most one code at a time.

        Args:
            teacher_id: Teacher user_id.
            code: Optional code chosen by the client. Generated when omitted.
            expires_in_hours: Lifetime of the code.

        Raises:
            ValueError: If ``code`` has an invalid format.
            TeacherCodeConflictError: If ``code`` belongs to another teacher.
        """
        if code is None:
            code = LINK_CODE_PREFIX + secrets.token_hex(4).upper()
        else:
            code = code.strip()
            if not LINK_CODE_PATTERN.match(code):
                raise ValueError(
                    "linkCode must be 4-32 letters, digits, '_' or '-'"
                )

        existing = self._get_code(code)
        if existing and existing.teacher_id != teacher_id:
            raise TeacherCodeConflictError("This code is already in use")

        previous = (
            self.db.query(TeacherCodeModel)
            .filter(TeacherCodeModel.teacher_id == teacher_id)
            .all()
        )
        for old in previous:
            self.db.delete(old)
        # Flush the deletes first: the new code may reuse an old value.
        self.db.flush()

        now = datetime.now(pytz.utc)
        model = TeacherCodeModel(
            code=code,
            teacher_id=teacher_id,
            created_at=now.isoformat(),
            expires_at=(now + timedelta(hours=expires_in_hours)).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Generated link code for teacher %s", teacher_id)
        return model

    def get_active_code(self, teacher_id: str) -> Optional[TeacherCodeModel]:
        """Return the newest unexpired, unclaimed code of a teacher."""
        now = datetime.now(pytz.utc)
        models = (
            self.db.query(TeacherCodeModel)
            .filter(
                TeacherCodeModel.teacher_id == teacher_id,
                TeacherCodeModel.used_by.is_(None),
            )
            .order_by(TeacherCodeModel.created_at.desc())
            .all()
        )
        for model in models:
            if _parse_iso(model.expires_at) > now:
                return model
        return None

    def claim_code(self, code: str, student_id: str) -> TeacherCodeModel:
        """Mark a code as used by ``student_id`` in the current transaction.

        The claim is a conditional UPDATE on ``used_by IS NULL``; when two
        students race for the same code only one row update succeeds. The
        caller commits.

        Raises:
            InvalidTeacherCodeError: If the code is unknown, expired or
                already claimed.
        """
        model = self._get_code(code)
        if not model or model.used_by is not None:
            raise InvalidTeacherCodeError("Invalid or expired code")
        if _parse_iso(model.expires_at) <= datetime.now(pytz.utc):
            raise InvalidTeacherCodeError("Invalid or expired code")

        claimed = (
            self.db.query(TeacherCodeModel)
            .filter(
                TeacherCodeModel.code == code,
                TeacherCodeModel.used_by.is_(None),
            )
            .update(
                {
                    TeacherCodeModel.used_by: student_id,
                    TeacherCodeModel.used_at: datetime.now(pytz.utc).isoformat(),
                },
                synchronize_session=False,
            )
        )
        if claimed != 1:
            self.db.rollback()
            logger.info("Code claim by %s lost to a concurrent claim", student_id)
            raise InvalidTeacherCodeError("Invalid or expired code")
        return model

    def _get_code(self, code: str) -> Optional[TeacherCodeModel]:
        return (
            self.db.query(TeacherCodeModel)
            .filter(TeacherCodeModel.code == code)
            .first()
        )

    # --- Relations ---

    def link_student(
        self,
        code: str,
        student_id: str,
        student_name: str,
        teacher_name_lookup: Callable[[str], str],
    ) -> TeacherStudentModel:
        """Link a student to the teacher owning ``code``.

        The code claim and the new relation are committed together, so a
        failed insert leaves the code unused.

        Args:
            code: Teacher link code.
            student_id: Student user_id.
            student_name: Name stored on the relation.
            teacher_name_lookup: Callable mapping a teacher id to a name.

        Raises:
            InvalidTeacherCodeError: If the code cannot be claimed.
            AlreadyLinkedError: If the pair is already linked.
        """
        model = self._get_code(code)
        if not model:
            raise InvalidTeacherCodeError("Invalid or expired code")

        teacher_id = model.teacher_id
        relation_id = build_relation_id(student_id, teacher_id)
        if self.get_relation(relation_id):
            raise AlreadyLinkedError("You are already linked to this teacher")
        teacher_name = teacher_name_lookup(teacher_id)

        self.claim_code(code, student_id)
        relation = TeacherStudentModel(
            relation_id=relation_id,
            teacher_id=teacher_id,
            student_id=student_id,
            teacher_name=teacher_name,
            student_name=student_name,
            joined_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(relation)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Another request linked the same pair after the check above.
            self.db.rollback()
            raise AlreadyLinkedError("You are already linked to this teacher") from e
        self.db.refresh(relation)
        logger.info("Linked student %s to teacher %s", student_id, teacher_id)
        return relation

    def get_relation(self, relation_id: str) -> Optional[TeacherStudentModel]:
        return (
            self.db.query(TeacherStudentModel)
            .filter(TeacherStudentModel.relation_id == relation_id)
            .first()
        )

    def list_teacher_students(self, teacher_id: str) -> List[TeacherStudentModel]:
        return (
            self.db.query(TeacherStudentModel)
            .filter(TeacherStudentModel.teacher_id == teacher_id)
            .order_by(TeacherStudentModel.joined_at)
            .all()
        )

    def list_student_relations(self, student_id: str) -> List[TeacherStudentModel]:
        return (
            self.db.query(TeacherStudentModel)
            .filter(TeacherStudentModel.student_id == student_id)
            .order_by(TeacherStudentModel.joined_at)
            .all()
        )

    def list_teacher_ids_for_student(self, student_id: str) -> List[str]:
        return [r.teacher_id for r in self.list_student_relations(student_id)]

    def list_student_ids_for_teacher(self, teacher_id: str) -> List[str]:
        return [r.student_id for r in self.list_teacher_students(teacher_id)]

    def unlink(self, relation_id: str, user_id: str) -> None:
        """Delete a relation. Either participant may unlink.

        Raises:
            RelationNotFoundError: If the relation does not exist.
            PermissionDeniedError: If ``user_id`` is not part of the relation.
        """
        relation = self.get_relation(relation_id)
        if not relation:
            raise RelationNotFoundError(relation_id)
        if user_id not in (relation.teacher_id, relation.student_id):
            raise PermissionDeniedError("Only participants can unlink")
        self.db.delete(relation)
        self.db.commit()
        logger.info("Relation %s removed by %s", relation_id, user_id)
