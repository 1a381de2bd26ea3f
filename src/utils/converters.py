"""Converters between database models and API schemas."""

from models.chat_message import ChatMessageModel
from models.comment import CommentModel, CommentResponseModel
from models.question import QuestionModel
from models.teacher_student import TeacherStudentModel
from models.user import UserModel
from schemas.chat import ChatMessageInfo
from schemas.comment import CommentInfo, CommentResponseInfo
from schemas.question import Feedback, QuestionInfo
from schemas.relationship import RelationInfo
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(**user.model_dump())


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        email=model.email,
        password_hash=model.password_hash,
        user_type=model.user_type,
        nome_completo=model.nome_completo,
        cpf=model.cpf or "",
        data_nascimento=model.data_nascimento,
        google_auth=bool(model.google_auth),
        score=model.score,
        rank=model.rank,
        created_at=model.created_at,
        last_login=model.last_login,
    )


def question_to_info(model: QuestionModel) -> QuestionInfo:
    return QuestionInfo(
        id=model.question_id,
        theme=model.theme,
        question=model.question_text,
        options=list(model.options or []),
        correct_option_index=model.correct_option_index,
        feedback=question_feedback(model),
        created_by=model.created_by,
        visibility=model.visibility or "public",
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def question_feedback(model: QuestionModel) -> Feedback:
    return Feedback(
        title=model.feedback_title or "",
        text=model.feedback_text or "",
        illustration=model.feedback_illustration or "",
    )


def response_to_info(model: CommentResponseModel) -> CommentResponseInfo:
    return CommentResponseInfo(
        id=model.response_id,
        comment_id=model.comment_id,
        user_id=model.user_id,
        user_name=model.user_name,
        user_type=model.user_type,
        message=model.message,
        created_at=model.created_at,
    )


def comment_to_info(model: CommentModel) -> CommentInfo:
    return CommentInfo(
        id=model.comment_id,
        question_id=model.question_id,
        question_theme=model.question_theme,
        question_text=model.question_text,
        user_id=model.user_id,
        user_name=model.user_name,
        user_type=model.user_type,
        message=model.message,
        created_at=model.created_at,
        responses=[response_to_info(r) for r in model.responses],
    )


def relation_to_info(model: TeacherStudentModel) -> RelationInfo:
    return RelationInfo(
        relation_id=model.relation_id,
        teacher_id=model.teacher_id,
        student_id=model.student_id,
        teacher_name=model.teacher_name,
        student_name=model.student_name,
        created_at=model.joined_at,
    )


def message_to_info(model: ChatMessageModel) -> ChatMessageInfo:
    return ChatMessageInfo(
        id=model.id,
        sender_id=model.sender_id,
        sender_name=model.sender_name,
        sender_type=model.sender_type,
        receiver_id=model.receiver_id,
        message=model.message,
        created_at=model.created_at,
    )
