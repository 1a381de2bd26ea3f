"""Dependency injection module for FastAPI.

Every manager gets the request-scoped SQLAlchemy session from ``get_db``.
FastAPI caches dependencies per request, so all managers used by one handler
share the same session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.identity import IdentityProvider, build_identity_provider
from utils import chat_manager
from utils import comment_manager
from utils import question_manager
from utils import quiz_manager
from utils import relationship_manager
from utils import user_manager

# Singleton for the identity provider (holds the Firebase app when enabled)
_identity_provider_instance: IdentityProvider = None


def get_identity_provider() -> IdentityProvider:
    """Get IdentityProvider singleton instance.

    Returns:
        IdentityProvider selected by IDENTITY_PROVIDER.
    """
    global _identity_provider_instance
    if _identity_provider_instance is None:
        _identity_provider_instance = build_identity_provider()
    return _identity_provider_instance


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_question_manager(db: Session = Depends(get_db)) -> question_manager.QuestionManager:
    """Get QuestionManager instance with request-scoped DB session."""
    return question_manager.QuestionManager(db)


def get_relationship_manager(
    db: Session = Depends(get_db),
) -> relationship_manager.RelationshipManager:
    """Get RelationshipManager instance with request-scoped DB session."""
    return relationship_manager.RelationshipManager(db)


def get_comment_manager(db: Session = Depends(get_db)) -> comment_manager.CommentManager:
    """Get CommentManager instance with request-scoped DB session."""
    return comment_manager.CommentManager(db)


def get_chat_manager(db: Session = Depends(get_db)) -> chat_manager.ChatManager:
    """Get ChatManager instance with request-scoped DB session."""
    return chat_manager.ChatManager(db)


def get_quiz_manager(
    questions: question_manager.QuestionManager = Depends(get_question_manager),
    relations: relationship_manager.RelationshipManager = Depends(get_relationship_manager),
    users: user_manager.UserManager = Depends(get_user_manager),
) -> quiz_manager.QuizManager:
    """Get QuizManager built on the request-scoped managers."""
    return quiz_manager.QuizManager(questions, relations, users)


# Type aliases for dependency injection
IdentityProviderDep = Annotated[IdentityProvider, Depends(get_identity_provider)]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
QuestionManagerDep = Annotated[
    question_manager.QuestionManager, Depends(get_question_manager)
]
RelationshipManagerDep = Annotated[
    relationship_manager.RelationshipManager, Depends(get_relationship_manager)
]
CommentManagerDep = Annotated[
    comment_manager.CommentManager, Depends(get_comment_manager)
]
ChatManagerDep = Annotated[
    chat_manager.ChatManager, Depends(get_chat_manager)
]
QuizManagerDep = Annotated[
    quiz_manager.QuizManager, Depends(get_quiz_manager)
]
