"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Boolean, Column, Index, Integer, String, UniqueConstraint, text
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        # Google accounts have no cpf, so only non-empty values are unique.
        Index(
            "uq_users_cpf_type",
            "cpf",
            "user_type",
            unique=True,
            sqlite_where=text("cpf != ''"),
            postgresql_where=text("cpf != ''"),
        ),
    )

    user_id = Column(String, primary_key=True, index=True)  # identity provider uid
    email = Column(String, index=True, nullable=False)
    password_hash = Column(String, nullable=True)  # None for Google accounts
    user_type = Column(String, nullable=False)  # 'aluno' or 'professor'
    nome_completo = Column(String, nullable=False)
    cpf = Column(String, index=True, nullable=False, default="")
    data_nascimento = Column(String, nullable=True)
    google_auth = Column(Boolean, nullable=False, default=False)
    score = Column(Integer, nullable=True)  # students only
    rank = Column(String, nullable=True)  # students only
    created_at = Column(String, nullable=False)  # ISO format string
    last_login = Column(String, nullable=True)  # ISO format string
