"""Identity provider backends.

The API never checks a bearer token itself: it asks the configured identity
provider to verify it and trusts the uid that comes back. Two backends share
the same interface:

- ``LocalIdentityProvider`` signs HS256 JWTs with JWT_SECRET_KEY. Login tokens
  are accepted directly as bearer tokens.
- ``FirebaseIdentityProvider`` delegates to Firebase Auth. Login returns a
  custom token that the web client exchanges for an ID token.
"""

import json
import logging
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import pytz
from jose import JWTError, jwt

from config import (
    CUSTOM_TOKEN_EXPIRE_MINUTES,
    FIREBASE_REQUIRED_FIELDS,
    FIREBASE_SERVICE_ACCOUNT,
    IDENTITY_PROVIDER,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
)
from core.exceptions import ConfigurationError, IdentityError

logger = logging.getLogger(__name__)


class IdentityProvider:
    """Interface every identity backend implements."""

    name = "base"

    def create_user(self, email: str, password: str) -> str:
        """Create a password credential and return the new uid."""
        raise NotImplementedError

    def create_custom_token(self, uid: str, email: Optional[str] = None) -> str:
        """Issue a sign-in token for ``uid``."""
        raise NotImplementedError

    def verify_id_token(self, token: str) -> Dict[str, Any]:
        """Verify a bearer token.

        Returns:
            Dictionary with at least ``uid`` and ``email`` (may be None).

        Raises:
            IdentityError: If the token is invalid or expired.
        """
        raise NotImplementedError

    def update_password(self, uid: str, password: str) -> None:
        """Replace the password credential of ``uid``."""
        raise NotImplementedError


class LocalIdentityProvider(IdentityProvider):
    """Self-contained provider signing its own JWTs."""

    name = "local"
    TOKEN_USE = "id"

    def __init__(
        self,
        secret_key: str = JWT_SECRET_KEY,
        algorithm: str = JWT_ALGORITHM,
        expire_minutes: int = CUSTOM_TOKEN_EXPIRE_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_user(self, email: str, password: str) -> str:
        # Passwords are verified against the hash stored with the user record.
        uid = uuid.uuid4().hex
        logger.debug("Issued local uid %s", uid)
        return uid

    def create_custom_token(self, uid: str, email: Optional[str] = None) -> str:
        expire = datetime.now(pytz.utc) + timedelta(minutes=self.expire_minutes)
        to_encode = {"sub": uid, "token_use": self.TOKEN_USE, "exp": expire}
        if email:
            to_encode["email"] = email
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_id_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise IdentityError(f"Invalid token: {e}") from e
        uid = payload.get("sub")
        if not uid or payload.get("token_use") != self.TOKEN_USE:
            raise IdentityError("Invalid token")
        return {"uid": uid, "email": payload.get("email")}

    def update_password(self, uid: str, password: str) -> None:
        return None


class FirebaseIdentityProvider(IdentityProvider):
    """Firebase Auth through the Admin SDK."""

    name = "firebase"

    def __init__(self, service_account_path: Optional[str] = FIREBASE_SERVICE_ACCOUNT):
        self.service_account_path = service_account_path
        self._app = None

    def _load_service_account(self) -> Dict[str, Any]:
        if not self.service_account_path:
            raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT is not set")
        path = Path(self.service_account_path)
        if not path.exists():
            raise ConfigurationError(f"Service account file not found: {path}")
        with path.open(encoding="utf-8") as f:
            service_account = json.load(f)
        missing = [
            field for field in FIREBASE_REQUIRED_FIELDS if not service_account.get(field)
        ]
        if missing:
            raise ConfigurationError(
                f"Invalid service account file, missing fields: {', '.join(missing)}"
            )
        return service_account

    def _get_app(self):
        if self._app is None:
            import firebase_admin
            from firebase_admin import credentials

            service_account = self._load_service_account()
            self._app = firebase_admin.initialize_app(
                credentials.Certificate(service_account)
            )
            logger.info("Firebase initialized for project %s", service_account["project_id"])
        return self._app

    def create_user(self, email: str, password: str) -> str:
        from firebase_admin import auth, exceptions

        try:
            record = auth.create_user(email=email, password=password, app=self._get_app())
        except exceptions.FirebaseError as e:
            raise IdentityError(f"Could not create credential: {e}") from e
        return record.uid

    def create_custom_token(self, uid: str, email: Optional[str] = None) -> str:
        from firebase_admin import auth

        token = auth.create_custom_token(uid, app=self._get_app())
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token

    def verify_id_token(self, token: str) -> Dict[str, Any]:
        from firebase_admin import auth, exceptions

        try:
            decoded = auth.verify_id_token(token, app=self._get_app())
        except (ValueError, exceptions.FirebaseError) as e:
            raise IdentityError(f"Invalid token: {e}") from e
        return {"uid": decoded["uid"], "email": decoded.get("email")}

    def update_password(self, uid: str, password: str) -> None:
        from firebase_admin import auth, exceptions

        try:
            auth.update_user(uid, password=password, app=self._get_app())
        except exceptions.FirebaseError as e:
            raise IdentityError(f"Could not update credential: {e}") from e


def build_identity_provider(name: str = IDENTITY_PROVIDER) -> IdentityProvider:
    """Build the identity provider selected by ``name``.

    Raises:
        ConfigurationError: If the provider name is unknown.
    """
    if name == "local":
        return LocalIdentityProvider()
    if name == "firebase":
        return FirebaseIdentityProvider()
    raise ConfigurationError(f"Unknown identity provider: {name}")
