from sqlalchemy import Column, Integer, String, JSON

from .base import Base


class QuestionModel(Base):
    __tablename__ = "questions"

    question_id = Column(String, primary_key=True, index=True)
    theme = Column(String, index=True, nullable=False)
    question_text = Column(String, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    correct_option_index = Column(Integer, nullable=False)
    feedback_title = Column(String, nullable=False, default="")
    feedback_text = Column(String, nullable=False, default="")
    feedback_illustration = Column(String, nullable=False, default="")
    visibility = Column(String, nullable=False, default="public")  # 'public' or 'private'
    created_by = Column(String, index=True, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
