"""User schema definitions.

This module defines the User domain model and the request/response bodies of
the authentication endpoints.
"""

from datetime import datetime
from typing import Optional

import pytz
from pydantic import BaseModel, Field

from schemas.common import CamelModel


class User(BaseModel):
    """A registered student or teacher."""

    user_id: str = Field(description="Identity provider uid, also the document id.")
    email: str
    password_hash: Optional[str] = Field(
        default=None,
        description="bcrypt hash; None for accounts created through Google sign-in.",
    )
    user_type: str = Field(description="'aluno' or 'professor'.")
    nome_completo: str
    cpf: str = ""
    data_nascimento: Optional[str] = None
    google_auth: bool = False
    score: Optional[int] = None
    rank: Optional[str] = None
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )
    last_login: Optional[str] = None

    @property
    def is_teacher(self) -> bool:
        return self.user_type == "professor"

    @property
    def is_student(self) -> bool:
        return self.user_type == "aluno"


class RegisterRequest(CamelModel):
    nome_completo: str
    cpf: str
    user_type: str
    data_nascimento: Optional[str] = None


class RegisterResponse(CamelModel):
    message: str
    user_id: str
    email: str
    password: str


class LoginRequest(CamelModel):
    email: str
    password: str


class LoginResponse(CamelModel):
    token: str
    user_id: str
    user_type: str


class GoogleAuthRequest(CamelModel):
    user_type: str
    email: str
    uid: str
    display_name: Optional[str] = None


class GoogleAuthResponse(CamelModel):
    uid: str
    email: str
    nome_completo: str
    user_type: str
    cpf: str = ""


class PasswordResetVerifyRequest(CamelModel):
    email: str
    data_nascimento: str


class PasswordResetVerifyResponse(CamelModel):
    user_id: str
    reset_token: str
    message: str


class ResetPasswordRequest(CamelModel):
    user_id: str
    new_password: str
    reset_token: str


class CurrentUserResponse(CamelModel):
    user_id: str
    user_type: str
    nome_completo: str
