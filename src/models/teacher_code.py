"""Teacher link code database model."""

from sqlalchemy import Column, String
from .base import Base


class TeacherCodeModel(Base):
    """Single-use code a teacher shares so a student can link to them."""

    __tablename__ = "teacher_codes"

    code = Column(String, primary_key=True, index=True)
    teacher_id = Column(String, index=True, nullable=False)
    created_at = Column(String, nullable=False)  # ISO format string
    expires_at = Column(String, nullable=False)  # ISO format string
    used_by = Column(String, nullable=True)  # student user_id once claimed
    used_at = Column(String, nullable=True)
