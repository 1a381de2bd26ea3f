"""Chat message schema definitions."""

from schemas.common import CamelModel


class SendMessageRequest(CamelModel):
    receiver_id: str
    message: str


class SendMessageResponse(CamelModel):
    message: str
    id: int


class ChatMessageInfo(CamelModel):
    id: int
    sender_id: str
    sender_name: str
    sender_type: str
    receiver_id: str
    message: str
    created_at: str
