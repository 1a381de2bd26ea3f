"""Authentication routes.

This module handles HTTP endpoints for user registration, login, Google
sign-in and password reset, and provides the dependencies other routers use
to resolve the caller from the bearer token.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from config import (
    DEFAULT_GOOGLE_DISPLAY_NAME,
    EMAIL_DOMAIN,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
    MIN_PASSWORD_LENGTH,
    RESET_TOKEN_EXPIRE_MINUTES,
    USER_TYPES,
)
from core.dependencies import IdentityProviderDep, UserManagerDep
from core.exceptions import IdentityError
from core.logging_config import mask
from schemas.user import (
    CurrentUserResponse,
    GoogleAuthRequest,
    GoogleAuthResponse,
    LoginRequest,
    LoginResponse,
    PasswordResetVerifyRequest,
    PasswordResetVerifyResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    User,
)
from schemas.common import MessageResponse
from utils.user_manager import UserAlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])

CPF_PATTERN = re.compile(r"^\d{11}$")
RESET_TOKEN_PURPOSE = "password_reset"

# HTTP Bearer token security; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


def create_reset_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed token allowing one user to reset their password.

    Args:
        user_id: The user allowed to reset.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    expire = datetime.now(pytz.utc) + (
        expires_delta or timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": user_id, "purpose": RESET_TOKEN_PURPOSE, "exp": expire}
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_reset_token(token: str, user_id: str) -> bool:
    """Check that ``token`` is a live reset token issued for ``user_id``."""
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return False
    return payload.get("purpose") == RESET_TOKEN_PURPOSE and payload.get("sub") == user_id


def verify_token(
    identity: IdentityProviderDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Verify the bearer token with the identity provider.

    Args:
        identity: Injected identity provider.
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload with ``uid`` and ``email``.

    Raises:
        HTTPException: If the token is missing, invalid or expired.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token not provided",
        )
    try:
        return identity.verify_id_token(credentials.credentials)
    except IdentityError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )


def get_current_user(
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> User:
    """Get current authenticated user.

    Args:
        user_manager: Injected UserManager instance.
        token_payload: Decoded token payload.

    Returns:
        Current User object.

    Raises:
        HTTPException: If user is not found.
    """
    user = user_manager.get_user_by_id(token_payload["uid"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def require_teacher(user: User, action: str = "do this") -> None:
    if not user.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only teachers can {action}",
        )


def require_student(user: User, action: str = "do this") -> None:
    if not user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only students can {action}",
        )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a student or teacher",
)
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep,
    identity: IdentityProviderDep,
) -> RegisterResponse:
    """Register a new user.

    The login email is generated from the CPF, the user type and the current
    time, and the initial password is the CPF itself.

    Args:
        req: Registration request with name, CPF, user type and birth date.
        user_manager: Injected UserManager instance.
        identity: Injected identity provider.

    Returns:
        RegisterResponse with the generated credentials.

    Raises:
        HTTPException: If registration fails.
    """
    logger.info(
        "Registration attempt: type=%s cpf=%s", req.user_type, mask(req.cpf)
    )
    if not req.nome_completo.strip() or not req.cpf or not req.user_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields",
        )
    if req.user_type not in USER_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid userType: {req.user_type}. Must be 'aluno' or 'professor'.",
        )
    if not CPF_PATTERN.match(req.cpf):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid CPF format",
        )
    if user_manager.get_user_by_cpf(req.cpf, req.user_type):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A {req.user_type} with this CPF is already registered",
        )

    timestamp = datetime.now(pytz.utc).strftime("%Y%m%d%H%M%S%f")
    email = f"{req.cpf}_{req.user_type}_{timestamp}@{EMAIL_DOMAIN}"
    password = req.cpf

    try:
        user_id = identity.create_user(email, password)
    except IdentityError as e:
        logger.error("Identity provider refused registration: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    try:
        user_manager.create_user(
            user_id=user_id,
            email=email,
            password=password,
            user_type=req.user_type,
            nome_completo=req.nome_completo.strip(),
            cpf=req.cpf,
            data_nascimento=req.data_nascimento,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return RegisterResponse(
        message="User registered successfully",
        user_id=user_id,
        email=email,
        password=password,
    )


@router.post("/login", response_model=LoginResponse, summary="Log in with email and password")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep,
    identity: IdentityProviderDep,
) -> LoginResponse:
    """Login with email and password.

    Args:
        req: Login request with email and password.
        user_manager: Injected UserManager instance.
        identity: Injected identity provider.

    Returns:
        LoginResponse with a sign-in token, the user id and the user type.

    Raises:
        HTTPException: If login fails.
    """
    if not req.email or not req.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing email or password",
        )

    user = user_manager.verify_credentials(req.email, req.password)
    if user is None:
        logger.warning("Invalid credentials for %s", mask(req.email, 10))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = identity.create_custom_token(user.user_id, user.email)
    user_manager.touch_last_login(user.user_id)
    logger.info("Login: %s (%s)", user.user_id, user.user_type)
    return LoginResponse(token=token, user_id=user.user_id, user_type=user.user_type)


@router.post("/google-auth", response_model=GoogleAuthResponse, summary="Google sign-in")
def google_auth(
    req: GoogleAuthRequest,
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> GoogleAuthResponse:
    """Sign in with a Google-backed identity token, creating the user if needed.

    Args:
        req: Profile data sent by the client after Google sign-in.
        user_manager: Injected UserManager instance.
        token_payload: Decoded bearer token.

    Returns:
        GoogleAuthResponse with the stored profile.

    Raises:
        HTTPException: 401 if the token belongs to another uid, 409 if the
            uid or email is taken by a different profile.
    """
    if token_payload["uid"] != req.uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    if req.user_type not in USER_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid userType: {req.user_type}. Must be 'aluno' or 'professor'.",
        )

    user = user_manager.get_user_by_email_and_type(req.email, req.user_type)
    if user is not None:
        if user.user_id != req.uid:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered to another account",
            )
        user_manager.touch_last_login(user.user_id)
        logger.info("Google sign-in for existing user %s", user.user_id)
    else:
        try:
            user = user_manager.create_google_user(
                user_id=req.uid,
                email=req.email,
                nome_completo=req.display_name or DEFAULT_GOOGLE_DISPLAY_NAME,
                user_type=req.user_type,
            )
        except UserAlreadyExistsError as e:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(e),
            )

    return GoogleAuthResponse(
        uid=user.user_id,
        email=user.email,
        nome_completo=user.nome_completo,
        user_type=user.user_type,
        cpf=user.cpf or "",
    )


@router.post(
    "/verify_user_for_password_reset",
    response_model=PasswordResetVerifyResponse,
    summary="Verify identity before a password reset",
)
def verify_user_for_password_reset(
    req: PasswordResetVerifyRequest,
    user_manager: UserManagerDep,
) -> PasswordResetVerifyResponse:
    """Check email and birth date and hand out a short-lived reset token.

    Raises:
        HTTPException: 401 if the pair does not match any user.
    """
    user = user_manager.verify_password_reset(req.email, req.data_nascimento)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or dataNascimento",
        )
    logger.info("User %s verified for password reset", user.user_id)
    return PasswordResetVerifyResponse(
        user_id=user.user_id,
        reset_token=create_reset_token(user.user_id),
        message="User verified for password reset",
    )


@router.post("/reset_password", response_model=MessageResponse, summary="Reset password")
def reset_password(
    req: ResetPasswordRequest,
    user_manager: UserManagerDep,
    identity: IdentityProviderDep,
) -> MessageResponse:
    """Set a new password using the token from the verification step.

    Raises:
        HTTPException: 400 for a short password, 401 for a bad reset token,
            404 if the user no longer exists.
    """
    if len(req.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must have at least {MIN_PASSWORD_LENGTH} characters",
        )
    if not verify_reset_token(req.reset_token, req.user_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired reset token",
        )

    if user_manager.get_user_by_id(req.user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    # The local hash only changes once the identity provider accepted the password.
    try:
        identity.update_password(req.user_id, req.new_password)
    except IdentityError as e:
        logger.error("Identity provider refused password update: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    try:
        user_manager.reset_password(req.user_id, req.new_password)
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return MessageResponse(message="Password reset successfully")


@router.get("/verify-user", response_model=CurrentUserResponse, summary="Current user")
def verify_user(
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> CurrentUserResponse:
    """Get current authenticated user information.

    Raises:
        HTTPException: 404 if the token is valid but no profile exists.
    """
    user = user_manager.get_user_by_id(token_payload["uid"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return CurrentUserResponse(
        user_id=user.user_id,
        user_type=user.user_type,
        nome_completo=user.nome_completo,
    )
