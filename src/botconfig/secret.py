"""
Secret validation for encrypted bot files.

A bot file never stores the user's secret. Instead it stores a validator
token: a random value encrypted with the secret. A later caller proves it
holds the same secret by decrypting the token successfully.

- SecretKey: the token as an explicit two-state value (unset / established)
- SecretGuard: validates or establishes the token and drives bulk
  encrypt/decrypt of services
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from botconfig import crypto
from botconfig.exceptions import CipherError, InvalidSecretError, MissingSecretError
from botconfig.services import ConnectedService

__all__ = ["SecretKey", "SecretGuard"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SecretKey:
    """
    Validator token state.

    An unset key means no secret has been established and the document's
    sensitive fields are stored as plaintext. An established key holds the
    token ciphertext.
    """
    token: str | None = None

    @classmethod
    def unset(cls) -> SecretKey:
        return cls(None)

    @classmethod
    def established(cls, token: str) -> SecretKey:
        if not isinstance(token, str):
            raise TypeError(f"Secret key token must be a string, got {type(token).__name__}")
        if not token:
            raise ValueError("An established secret key needs a non-empty token")
        return cls(token)

    @classmethod
    def from_text(cls, text: str | None) -> SecretKey:
        """Read the "secretKey" field; empty or missing means unset."""
        return cls.established(text) if text else cls.unset()

    @property
    def is_established(self) -> bool:
        return bool(self.token)

    def to_text(self) -> str:
        """Value written to the "secretKey" field."""
        return self.token or ""


class SecretGuard:
    """
    Holds a document's validator token and checks secrets against it.

    Example:
        guard = SecretGuard(SecretKey.from_text(data.get("secretKey")))
        guard.decrypt_services(services, secret)
    """

    def __init__(self, key: SecretKey | None = None):
        self.key = key or SecretKey.unset()

    def clear(self) -> None:
        """Forget the token; the next validation establishes a new one."""
        self.key = SecretKey.unset()

    def validate(self, secret: str | None) -> None:
        """
        Prove that secret matches the token, establishing one if unset.

        Raises:
            MissingSecretError: If secret is empty or None
            InvalidSecretError: If secret does not decrypt the token, or is
                not a usable key when establishing one
        """
        if not secret:
            raise MissingSecretError()

        try:
            if not self.key.is_established:
                # Random value whose only purpose is to be decryptable later
                token = crypto.encrypt(uuid.uuid4().hex, secret)
                self.key = SecretKey.established(token)
                logger.info("Established new secret key")
            else:
                crypto.decrypt(self.key.token, secret)
        except CipherError:
            logger.warning("Secret validation failed")
            raise InvalidSecretError() from None

    def encrypt_services(self, services: Iterable[ConnectedService], secret: str | None) -> None:
        """Validate, then encrypt every service in order."""
        self.validate(secret)
        for service in services:
            service.encrypt(secret)

    def decrypt_services(self, services: Iterable[ConnectedService], secret: str | None) -> None:
        """Validate, then decrypt every service in order."""
        self.validate(secret)
        for service in services:
            service.decrypt(secret)
