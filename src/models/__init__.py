"""Database models.

Importing this package registers every table with ``Base.metadata``.
"""

from .base import Base
from .user import UserModel
from .question import QuestionModel
from .comment import CommentModel, CommentResponseModel
from .chat_message import ChatMessageModel
from .teacher_code import TeacherCodeModel
from .teacher_student import TeacherStudentModel

__all__ = [
    "Base",
    "UserModel",
    "QuestionModel",
    "CommentModel",
    "CommentResponseModel",
    "ChatMessageModel",
    "TeacherCodeModel",
    "TeacherStudentModel",
]
