"""
BotConfiguration: the in-memory form of a .bot file.

A bot configuration holds the bot's identity, its connected services and
the validator token that protects their sensitive fields on disk. It is
typically loaded from a .bot file and saved back with the same secret.

Usage:
    from botconfig import BotConfiguration, LuisService

    config = BotConfiguration.load("my.bot", secret)
    config.connect_service(LuisService(name="weather", authoring_key="..."))
    config.save(secret)
"""

from __future__ import annotations

import json
import logging
import os
import random
from typing import Any

from botconfig import crypto
from botconfig.exceptions import DocumentDecodeError
from botconfig.registry import ServiceRegistry
from botconfig.secret import SecretGuard, SecretKey
from botconfig.services import ConnectedService, decode_service
from botconfig.settings import Settings, get_settings

__all__ = ["BotConfiguration", "BOT_FILE_VERSION"]

logger = logging.getLogger(__name__)

BOT_FILE_VERSION = "2.0"


class BotConfiguration:
    """
    Configuration information for a bot.

    The in-memory services always hold plaintext. Encryption happens only
    on the copy that is written to disk (see encrypted_copy()).

    Attributes:
        name: Bot name
        description: Free-text description
        services: Connected services in file order
        secret_key: Validator token state (unset or established)
        location: Path the configuration was loaded from or last saved to
    """

    def __init__(
        self,
        name: str = "",
        description: str = "",
        services: list[ConnectedService] | None = None,
        secret_key: SecretKey | None = None,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self.name = name
        self.description = description
        self._guard = SecretGuard(secret_key)
        self._registry = ServiceRegistry(
            services,
            rng=rng,
            id_space=self._settings.ids.space,
            max_id_attempts=self._settings.ids.max_attempts,
        )
        self._location: str | None = None

    def __repr__(self) -> str:
        return (
            f"BotConfiguration(name={self.name!r}, services={len(self._registry)}, "
            f"encrypted={self.secret_key.is_established}, location={self._location!r})"
        )

    @property
    def version(self) -> str:
        return BOT_FILE_VERSION

    @property
    def services(self) -> ServiceRegistry:
        return self._registry

    @property
    def secret_key(self) -> SecretKey:
        return self._guard.key

    @property
    def location(self) -> str | None:
        return self._location

    @property
    def settings(self) -> Settings:
        return self._settings

    def _bind_location(self, path: str | os.PathLike[str]) -> None:
        self._location = os.fspath(path)

    # =========================================================================
    # SERVICES
    # =========================================================================

    def connect_service(self, service: ConnectedService) -> ConnectedService:
        """Connect a service, assigning it a new id. Returns the service."""
        return self._registry.connect(service)

    def find_service_by_name_or_id(self, name_or_id: str) -> ConnectedService | None:
        return self._registry.find_by_name_or_id(name_or_id)

    def find_service(self, service_id: str) -> ConnectedService | None:
        return self._registry.find_by_id(service_id)

    def disconnect_service_by_name_or_id(self, name_or_id: str) -> ConnectedService:
        """Remove a service by name or id; raises NotFoundError if absent."""
        return self._registry.disconnect_by_name_or_id(name_or_id)

    def disconnect_service(self, service_id: str) -> None:
        """Remove a service by id; does nothing if absent."""
        self._registry.disconnect_by_id(service_id)

    def prune_dispatch_references(self) -> None:
        self._registry.prune_dispatch_references()

    # =========================================================================
    # SECRETS
    # =========================================================================

    def validate_secret(self, secret: str | None) -> None:
        """Check secret against the validator token, establishing one if unset."""
        self._guard.validate(secret)

    def encrypt(self, secret: str | None) -> None:
        """Encrypt all sensitive values in place."""
        self._guard.encrypt_services(self._registry, secret)

    def decrypt(self, secret: str | None) -> None:
        """Decrypt all sensitive values in place."""
        self._guard.decrypt_services(self._registry, secret)

    def clear_secret(self) -> None:
        """Drop the validator token; the next save writes plaintext."""
        self._guard.clear()

    def encrypted_copy(self, secret: str | None) -> BotConfiguration:
        """
        Return a copy whose services are encrypted, leaving self untouched.

        Establishes a validator token on self first if none exists, so the
        copy and the live configuration share the same token.

        Raises:
            MissingSecretError: If secret is empty
            InvalidSecretError: If secret does not match the token
        """
        self._guard.validate(secret)
        copy = BotConfiguration(
            name=self.name,
            description=self.description,
            services=[s.model_copy(deep=True) for s in self._registry],
            secret_key=self.secret_key,
            settings=self._settings,
        )
        for service in copy.services:
            service.encrypt(secret)
        return copy

    @staticmethod
    def generate_key() -> str:
        """Generate a new key suitable for use as a secret."""
        return crypto.generate_key()

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "secretKey": self.secret_key.to_text(),
            "version": self.version,
            "services": [s.to_dict() for s in self._registry],
        }

    def to_json(self) -> str:
        """Serialize as the text of a .bot file."""
        return json.dumps(self.to_dict(), indent=self._settings.indent) + "\n"

    @classmethod
    def from_dict(
        cls,
        data: Any,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ) -> BotConfiguration:
        """
        Build a configuration from a parsed .bot document.

        Every service is decoded by its type tag; a single bad service fails
        the whole document.

        Raises:
            DocumentDecodeError: If the root, a top-level field or the services
                list is malformed
            UnknownServiceTypeError: If a service tag is missing or unknown
            ServiceDecodeError: If a service's fields are invalid
        """
        if not isinstance(data, dict):
            raise DocumentDecodeError(
                f"Bot file root must be an object, got {type(data).__name__}"
            )

        raw_services = data.get("services")
        if raw_services is None:
            raw_services = []
        elif not isinstance(raw_services, list):
            raise DocumentDecodeError(
                f"Bot file 'services' must be a list, got {type(raw_services).__name__}"
            )

        fields = {}
        for key in ("name", "description", "secretKey"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise DocumentDecodeError(
                    f"Bot file '{key}' must be a string, got {type(value).__name__}"
                )
            fields[key] = value or ""

        version = data.get("version")
        if version and version != BOT_FILE_VERSION:
            logger.warning(
                "Unexpected bot file version",
                extra={"version": version, "expected": BOT_FILE_VERSION},
            )

        return cls(
            name=fields["name"],
            description=fields["description"],
            services=[decode_service(item) for item in raw_services],
            secret_key=SecretKey.from_text(fields["secretKey"]),
            rng=rng,
            settings=settings,
        )

    @classmethod
    def from_json(
        cls,
        text: str,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ) -> BotConfiguration:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentDecodeError(f"Bot file is not valid JSON: {e.msg}") from e
        return cls.from_dict(data, rng=rng, settings=settings)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    @classmethod
    async def load_async(cls, path: str | os.PathLike[str], secret: str | None = None) -> BotConfiguration:
        from botconfig import persistence
        return await persistence.load_async(path, secret, config_type=cls)

    @classmethod
    def load(cls, path: str | os.PathLike[str], secret: str | None = None) -> BotConfiguration:
        """Load a .bot file, decrypting it if it carries a validator token."""
        from botconfig import persistence
        return persistence.load(path, secret, config_type=cls)

    @classmethod
    async def load_from_folder_async(
        cls, folder: str | os.PathLike[str], secret: str | None = None
    ) -> BotConfiguration:
        from botconfig import persistence
        return await persistence.load_from_folder_async(folder, secret, config_type=cls)

    @classmethod
    def load_from_folder(cls, folder: str | os.PathLike[str], secret: str | None = None) -> BotConfiguration:
        """Load the first .bot file found in folder."""
        from botconfig import persistence
        return persistence.load_from_folder(folder, secret, config_type=cls)

    async def save_async(self, secret: str | None = None) -> None:
        from botconfig import persistence
        await persistence.save_async(self, secret)

    def save(self, secret: str | None = None) -> None:
        """Save back to location."""
        from botconfig import persistence
        persistence.save(self, secret)

    async def save_as_async(
        self, path: str | os.PathLike[str] | None = None, secret: str | None = None
    ) -> None:
        from botconfig import persistence
        await persistence.save_as_async(self, path, secret)

    def save_as(self, path: str | os.PathLike[str] | None = None, secret: str | None = None) -> None:
        """Save to path (or location if path is None) and bind location to it."""
        from botconfig import persistence
        persistence.save_as(self, path, secret)
