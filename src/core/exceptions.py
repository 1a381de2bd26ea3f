"""Custom exception classes for the Aprender em Movimento API.

This module defines application-specific exceptions following Google Python
Style Guide.
"""


class AprenderError(Exception):
    """Base exception for all Aprender em Movimento errors."""

    pass


class ConfigurationError(AprenderError):
    """Raised when there is a configuration error."""

    pass


class IdentityError(AprenderError):
    """Raised when the identity provider rejects a token or a credential call."""

    pass


class PermissionDeniedError(AprenderError):
    """Raised when a user tries an operation reserved to someone else."""

    pass
