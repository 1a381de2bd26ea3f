from sqlalchemy import Column, String
from .base import Base


class TeacherStudentModel(Base):
    __tablename__ = "teacher_students"

    relation_id = Column(String, primary_key=True, index=True)  # "{student_id}_{teacher_id}"
    teacher_id = Column(String, index=True, nullable=False)
    student_id = Column(String, index=True, nullable=False)
    teacher_name = Column(String, nullable=False)
    student_name = Column(String, nullable=False)
    joined_at = Column(String, nullable=False)
