"""User management utilities.

This module provides user management functionality including user storage,
password hashing, credential checks, password reset, and student scoring.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

import bcrypt
import pytz
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from config import STUDENT_TYPE
from core.logging_config import mask
from schemas.user import User
from models.user import UserModel
from utils.converters import user_to_model, model_to_user

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

UNKNOWN_USER_NAME = "Usuário Desconhecido"

# (minimum score, rank title), ascending
STUDENT_RANKS: List[Tuple[int, str]] = [
    (0, "Aluno Novo (Iniciante)"),
    (1, "Cordão Cru (Iniciante)"),
    (3, "Cordão Amarelo (Estagiário)"),
    (5, "Cordão Laranja (Graduado)"),
    (8, "Cordão Azul (Instrutor)"),
    (12, "Cordão Verde (Professor)"),
    (18, "Cordão Roxo (Mestre)"),
    (25, "Cordão Marrom (Contramestre)"),
    (35, "Cordão Vermelho (Mestre)"),
]


def rank_for_score(score: int) -> str:
    """Return the highest rank whose threshold ``score`` reaches."""
    current = STUDENT_RANKS[0][1]
    for threshold, title in STUDENT_RANKS:
        if score >= threshold:
            current = title
        else:
            break
    return current


class UserNotFoundError(Exception):
    """Exception raised when a user is not found."""

    pass


class UserAlreadyExistsError(Exception):
    """Exception raised when trying to create a user that already exists."""

    pass


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        # Truncate password if it exceeds bcrypt's 72-byte limit
        password_bytes = password.encode('utf-8')
        if len(password_bytes) > 72:
            logger.warning(
                "Password exceeds 72 bytes (%d bytes), truncating", len(password_bytes)
            )
            password_bytes = password_bytes[:72]

        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        hashed = bcrypt.hashpw(password_bytes, salt)
        return hashed.decode('utf-8')

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against. Accounts
                without a password (Google sign-in) never match.

        Returns:
            True if password matches, False otherwise.
        """
        if not hashed_password:
            return False
        password_bytes = plain_password.encode('utf-8')[:72]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def create_user(
        self,
        user_id: str,
        email: str,
        password: str,
        user_type: str,
        nome_completo: str,
        cpf: str,
        data_nascimento: Optional[str] = None,
    ) -> User:
        """Create a new password-based user.

        Args:
            user_id: Identity provider uid.
            email: Login email.
            password: Plain text password.
            user_type: 'aluno' or 'professor'.
            nome_completo: Full name.
            cpf: Eleven digit CPF.
            data_nascimento: Optional birth date, used for password reset.

        Returns:
            Created User object.

        Raises:
            UserAlreadyExistsError: If the CPF is already registered for this
                user type, or the email is taken.
        """
        if self.get_user_by_cpf(cpf, user_type):
            raise UserAlreadyExistsError(
                f"A {user_type} with this CPF is already registered"
            )

        is_student = user_type == STUDENT_TYPE
        user = User(
            user_id=user_id,
            email=email,
            password_hash=self.hash_password(password),
            user_type=user_type,
            nome_completo=nome_completo,
            cpf=cpf,
            data_nascimento=data_nascimento,
            score=0 if is_student else None,
            rank=rank_for_score(0) if is_student else None,
        )
        self._save(user)
        logger.info("Created user %s (%s, cpf=%s)", user_id, user_type, mask(cpf))
        return user

    def create_google_user(
        self, user_id: str, email: str, nome_completo: str, user_type: str
    ) -> User:
        """Create a user authenticated through Google sign-in.

        Raises:
            UserAlreadyExistsError: If the uid or email is already registered.
        """
        if self.get_user_by_id(user_id):
            raise UserAlreadyExistsError(f"User '{user_id}' already exists")

        is_student = user_type == STUDENT_TYPE
        now = datetime.now(pytz.utc).isoformat()
        user = User(
            user_id=user_id,
            email=email,
            user_type=user_type,
            nome_completo=nome_completo,
            google_auth=True,
            score=0 if is_student else None,
            rank=rank_for_score(0) if is_student else None,
            created_at=now,
            last_login=now,
        )
        self._save(user)
        logger.info("Created Google user %s (%s)", user_id, user_type)
        return user

    def _save(self, user: User) -> None:
        # Two concurrent registrations can both pass the lookups above. The
        # partial unique index on (cpf, user_type) rejects the second one, and
        # the user_id and email constraints cover Google sign-ins.
        try:
            model = user_to_model(user)
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Rejected duplicate user %s", mask(user.email, 10))
            raise UserAlreadyExistsError(
                f"A {user.user_type} with this CPF or email is already registered"
            ) from e

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self._get_model(user_id)
        if model:
            return model_to_user(model)
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.email == email).first()
        if model:
            return model_to_user(model)
        return None

    def get_user_by_email_and_type(self, email: str, user_type: str) -> Optional[User]:
        model = (
            self.db.query(UserModel)
            .filter(UserModel.email == email, UserModel.user_type == user_type)
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def get_user_by_cpf(self, cpf: str, user_type: str) -> Optional[User]:
        if not cpf:
            return None
        model = (
            self.db.query(UserModel)
            .filter(UserModel.cpf == cpf, UserModel.user_type == user_type)
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def get_users_by_ids(self, user_ids: List[str]) -> List[User]:
        if not user_ids:
            return []
        models = self.db.query(UserModel).filter(UserModel.user_id.in_(user_ids)).all()
        return [model_to_user(m) for m in models]

    def get_user_name(self, user_id: str) -> str:
        """Return the full name of a user, or a placeholder for unknown ids."""
        user = self.get_user_by_id(user_id)
        return user.nome_completo if user else UNKNOWN_USER_NAME

    def verify_credentials(self, email: str, password: str) -> Optional[User]:
        """Return the user owning ``email`` if ``password`` matches."""
        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            return None
        return user

    def verify_password_reset(self, email: str, data_nascimento: str) -> Optional[User]:
        """Return the user owning ``email`` if the birth date matches."""
        user = self.get_user_by_email(email)
        if user is None or not user.data_nascimento:
            return None
        if user.data_nascimento != data_nascimento:
            return None
        return user

    def reset_password(self, user_id: str, new_password: str) -> None:
        """Store a new password hash.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        model = self._get_model(user_id)
        if not model:
            raise UserNotFoundError(user_id)
        model.password_hash = self.hash_password(new_password)
        self.db.commit()
        logger.info("Password reset for user %s", user_id)

    def touch_last_login(self, user_id: str) -> None:
        model = self._get_model(user_id)
        if model:
            model.last_login = datetime.now(pytz.utc).isoformat()
            self.db.commit()

    def add_points(self, user_id: str, points: int = 1) -> Tuple[int, str]:
        """Add quiz points to a student and refresh their rank.

        The increment runs as a single UPDATE so concurrent answers do not
        lose points.

        Returns:
            Tuple of (new score, new rank).

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        updated = (
            self.db.query(UserModel)
            .filter(UserModel.user_id == user_id)
            .update(
                {UserModel.score: func.coalesce(UserModel.score, 0) + points},
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.rollback()
            raise UserNotFoundError(user_id)
        self.db.commit()

        model = self._get_model(user_id)
        self.db.refresh(model)
        model.rank = rank_for_score(model.score)
        self.db.commit()
        return model.score, model.rank

    def _get_model(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
