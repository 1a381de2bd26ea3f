"""Student/teacher chat routes."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.routes.auth import get_current_user
from config import USER_TYPES
from core.dependencies import ChatManagerDep
from schemas.chat import ChatMessageInfo, SendMessageRequest, SendMessageResponse
from schemas.user import User
from utils.converters import message_to_info
from utils.relationship_manager import is_valid_id

router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post(
    "",
    response_model=SendMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a chat message",
)
def send_message(
    req: SendMessageRequest,
    chat_manager: ChatManagerDep,
    current_user: User = Depends(get_current_user),
) -> SendMessageResponse:
    """Send a message from the caller to ``receiverId``.

    The sender name and type come from the stored profile, never from the
    request body.

    Raises:
        HTTPException: 400 for a blank message or receiver, 403 if the caller
            is neither a student nor a teacher.
    """
    if current_user.user_type not in USER_TYPES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only students and teachers can chat",
        )
    if not is_valid_id(req.receiver_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid receiverId",
        )
    try:
        model = chat_manager.send_message(
            sender_id=current_user.user_id,
            sender_name=current_user.nome_completo,
            sender_type=current_user.user_type,
            receiver_id=req.receiver_id,
            message=req.message,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    return SendMessageResponse(message="Message sent", id=model.id)


@router.get("", response_model=List[ChatMessageInfo], summary="Read a conversation")
def get_messages(
    chat_manager: ChatManagerDep,
    sender_id: str = Query(alias="senderId"),
    receiver_id: str = Query(alias="receiverId"),
    after: Optional[datetime] = Query(default=None),
    current_user: User = Depends(get_current_user),
) -> List[ChatMessageInfo]:
    if not is_valid_id(sender_id) or not is_valid_id(receiver_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid senderId or receiverId",
        )
    if current_user.user_id not in (sender_id, receiver_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    models = chat_manager.list_conversation(sender_id, receiver_id, after=after)
    return [message_to_info(m) for m in models]
