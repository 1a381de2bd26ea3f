from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class CommentModel(Base):
    __tablename__ = "comments"

    comment_id = Column(String, primary_key=True, index=True)
    question_id = Column(String, index=True, nullable=False)
    question_theme = Column(String, nullable=False)
    question_text = Column(String, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    user_name = Column(String, nullable=False)
    user_type = Column(String, nullable=False)
    message = Column(String, nullable=False)
    created_at = Column(String, nullable=False)

    responses = relationship(
        "CommentResponseModel",
        back_populates="comment",
        cascade="all, delete-orphan",
        order_by="CommentResponseModel.created_at",
    )


class CommentResponseModel(Base):
    __tablename__ = "comment_responses"

    response_id = Column(String, primary_key=True, index=True)
    comment_id = Column(
        String, ForeignKey("comments.comment_id", ondelete="CASCADE"), index=True
    )
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    user_type = Column(String, nullable=False)
    message = Column(String, nullable=False)
    created_at = Column(String, nullable=False)

    comment = relationship("CommentModel", back_populates="responses")
