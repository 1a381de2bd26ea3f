"""Comment thread schema definitions."""

from typing import List

from schemas.common import CamelModel


class CreateCommentRequest(CamelModel):
    question_id: str
    question_theme: str
    question_text: str
    user_name: str
    user_type: str
    message: str


class CreateCommentResponseRequest(CamelModel):
    comment_id: str
    user_name: str
    user_type: str
    message: str


class CommentResponseInfo(CamelModel):
    id: str
    comment_id: str
    user_id: str
    user_name: str
    user_type: str
    message: str
    created_at: str


class CommentInfo(CamelModel):
    id: str
    question_id: str
    question_theme: str
    question_text: str
    user_id: str
    user_name: str
    user_type: str
    message: str
    created_at: str
    responses: List[CommentResponseInfo] = []


class CommentListResponse(CamelModel):
    comments: List[CommentInfo]
