"""Configuration module for the Aprender em Movimento API.

This module provides centralized configuration management, including directory
paths, API server settings, identity provider selection, and application
defaults. All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))

LOG_DIR = Path(os.getenv("LOG_DIR", str(ROOT_DIR / "logs")))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/aprender_em_movimento.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", os.getenv("PORT", "5050")))

# CORS allowed origins (comma-separated list)
# Default includes local development addresses. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"),
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Rotating file handler limits
LOG_FILE_MAX_BYTES: int = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT: int = 5

# --- Identity Provider Configuration ---

# "local" signs tokens with JWT_SECRET_KEY; "firebase" delegates to Firebase Auth
IDENTITY_PROVIDER: str = os.getenv("IDENTITY_PROVIDER", "local").lower()

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = "HS256"

# Lifetime of tokens issued by the local provider on login
CUSTOM_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("CUSTOM_TOKEN_EXPIRE_MINUTES", str(60 * 24))
)

# Lifetime of the token handed out by the password reset verification step
RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "15"))

# Path to the Firebase service account JSON file
FIREBASE_SERVICE_ACCOUNT: Optional[str] = os.getenv("FIREBASE_SERVICE_ACCOUNT")

FIREBASE_REQUIRED_FIELDS: List[str] = [
    "project_id",
    "private_key_id",
    "private_key",
    "client_email",
]

# --- Domain Configuration ---

USER_TYPES: List[str] = ["aluno", "professor"]
STUDENT_TYPE: str = "aluno"
TEACHER_TYPE: str = "professor"

QUESTION_VISIBILITIES: List[str] = ["public", "private"]

# Domain used for generated login emails
EMAIL_DOMAIN: str = os.getenv("EMAIL_DOMAIN", "aprenderemmovimento.com")

# Teacher link codes expire after this many hours
TEACHER_CODE_TTL_HOURS: int = int(os.getenv("TEACHER_CODE_TTL_HOURS", "24"))

MIN_PASSWORD_LENGTH: int = 6

DEFAULT_GOOGLE_DISPLAY_NAME: str = "Usuário Google"

# Quiz draw limits
DEFAULT_QUIZ_SIZE: int = 10
MAX_QUIZ_SIZE: int = 50

# Questionnaire XML uploads
MAX_XML_UPLOAD_SIZE: int = 1 * 1024 * 1024  # 1MB
