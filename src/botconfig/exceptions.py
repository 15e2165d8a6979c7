"""
Exception hierarchy for botconfig.

All exception classes live here. Callers branch on the class, never on the
message text.

Hierarchy:
    BotConfigError (base)
    ├── MissingArgumentError
    │   └── NullServiceError
    ├── NotFoundError
    ├── DuplicateServiceError
    ├── IdSpaceExhaustedError
    ├── DecodeError
    │   ├── DocumentDecodeError
    │   ├── ServiceDecodeError
    │   └── UnknownServiceTypeError
    ├── SecretError
    │   ├── MissingSecretError
    │   └── InvalidSecretError
    ├── NoLocationError
    └── CipherError

Usage:
    from botconfig.exceptions import InvalidSecretError, NotFoundError
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# ROOT
# =============================================================================


class BotConfigError(Exception):
    """
    Base exception for all botconfig errors.

    Attributes:
        message: Human-readable error description
        context: What was being done when the error happened
        details: Identifiers that help diagnose it (paths, service ids, ...)
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.context = context
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append(f"Context: {self.context}")
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"Details: {detail_str}")
        return ". ".join(parts)


# =============================================================================
# ARGUMENTS & LOOKUPS
# =============================================================================


class MissingArgumentError(BotConfigError, ValueError):
    """A required string argument was empty or absent."""

    def __init__(self, argument: str, **kwargs: Any):
        details = kwargs.pop("details", {})
        details["argument"] = argument
        super().__init__(f"Argument '{argument}' is required", details=details, **kwargs)
        self.argument = argument


class NullServiceError(MissingArgumentError):
    """connect_service() was called without a service."""

    def __init__(self, **kwargs: Any):
        super().__init__("service", **kwargs)


class NotFoundError(BotConfigError, LookupError):
    """A file, folder or connected service could not be found."""

    def __init__(
        self,
        message: str = "The requested item was not found",
        key: str | None = None,
        path: str | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if key:
            details["key"] = key
        if path:
            details["path"] = path
        super().__init__(message, details=details, **kwargs)
        self.key = key
        self.path = path


# =============================================================================
# REGISTRY
# =============================================================================


class DuplicateServiceError(BotConfigError):
    """A service with the same (type, id) pair is already connected."""

    def __init__(self, service_type: str, service_id: str | None, **kwargs: Any):
        details = kwargs.pop("details", {})
        details["type"] = service_type
        details["id"] = service_id
        super().__init__(
            f"Service with id {service_id} is already connected", details=details, **kwargs
        )
        self.service_type = service_type
        self.service_id = service_id


class IdSpaceExhaustedError(BotConfigError):
    """Every id in the allocation space is already in use."""

    def __init__(self, id_space: int, **kwargs: Any):
        details = kwargs.pop("details", {})
        details["id_space"] = id_space
        super().__init__(
            f"All {id_space} service ids are in use; disconnect a service first",
            details=details,
            **kwargs,
        )
        self.id_space = id_space


# =============================================================================
# DECODING
# =============================================================================


class DecodeError(BotConfigError):
    """The configuration text could not be turned into a document."""


class DocumentDecodeError(DecodeError):
    """The document root is not valid JSON or not a JSON object."""


class ServiceDecodeError(DecodeError):
    """A service object has a known type but invalid fields."""

    def __init__(self, message: str, service_type: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if service_type:
            details["type"] = service_type
        super().__init__(message, details=details, **kwargs)
        self.service_type = service_type


class UnknownServiceTypeError(DecodeError):
    """A service object's type tag is missing or not recognized."""

    def __init__(self, service_type: Any, **kwargs: Any):
        details = kwargs.pop("details", {})
        details["type"] = service_type
        super().__init__(f"Unknown service type {service_type}", details=details, **kwargs)
        self.service_type = service_type


# =============================================================================
# SECRETS
# =============================================================================


class SecretError(BotConfigError):
    """Base class for secret validation failures."""


class MissingSecretError(SecretError):
    """An operation needs the secret and none was supplied."""

    def __init__(
        self,
        message: str = (
            "You are attempting to perform an operation which needs access "
            "to the secret and the secret is missing"
        ),
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)


class InvalidSecretError(SecretError):
    """The supplied secret does not match the document's validator token."""

    def __init__(
        self,
        message: str = (
            "You are attempting to perform an operation which needs access "
            "to the secret and the secret is incorrect"
        ),
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)


# =============================================================================
# PERSISTENCE & CRYPTO
# =============================================================================


class NoLocationError(BotConfigError):
    """save() was called with no path and the document has no bound location."""

    def __init__(
        self,
        message: str = "No path given and the configuration has no location",
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)


class CipherError(BotConfigError):
    """Encryption or decryption failed (wrong key, bad key, corrupt value)."""
