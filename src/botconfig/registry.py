"""
Ordered collection of a bot's connected services.

Handles connecting, finding and disconnecting services, assigning each new
service a short numeric id that is unique within the bot file, and pruning
dispatch references to services that are gone.
"""

from __future__ import annotations

import logging
import random
from typing import Iterator

from botconfig.exceptions import (
    DuplicateServiceError,
    IdSpaceExhaustedError,
    MissingArgumentError,
    NotFoundError,
    NullServiceError,
)
from botconfig.services import ConnectedService, DispatchService

__all__ = ["ServiceRegistry", "DEFAULT_ID_SPACE", "DEFAULT_MAX_ID_ATTEMPTS"]

logger = logging.getLogger(__name__)

DEFAULT_ID_SPACE = 256
DEFAULT_MAX_ID_ATTEMPTS = 64


class ServiceRegistry:
    """
    Services in document order, with id assignment.

    Not thread-safe. The random source is passed in so id assignment can
    be made deterministic.

    Example:
        registry = ServiceRegistry(rng=random.Random(42))
        registry.connect(LuisService(name="weather"))
        registry.find_by_name_or_id("weather")
    """

    def __init__(
        self,
        services: list[ConnectedService] | None = None,
        rng: random.Random | None = None,
        id_space: int = DEFAULT_ID_SPACE,
        max_id_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
    ):
        self._services: list[ConnectedService] = list(services or [])
        self._rng = rng or random.Random()
        self.id_space = id_space
        self.max_id_attempts = max_id_attempts

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[ConnectedService]:
        return iter(self._services)

    def __getitem__(self, index: int) -> ConnectedService:
        return self._services[index]

    def ids(self) -> set[str | None]:
        return {s.id for s in self._services}

    # =========================================================================
    # CONNECT
    # =========================================================================

    def connect(self, service: ConnectedService | None) -> ConnectedService:
        """
        Append a service and give it a fresh id.

        The duplicate check uses whatever id the caller set beforehand; the
        id is then replaced by a newly allocated one.

        Raises:
            NullServiceError: If service is None
            DuplicateServiceError: If a service with the same (type, id) exists
            IdSpaceExhaustedError: If every id is already in use
        """
        if service is None:
            raise NullServiceError()

        if any(s.type == service.type and s.id == service.id for s in self._services):
            raise DuplicateServiceError(service.type.value, service.id)

        service.id = self._allocate_id()
        self._services.append(service)
        logger.debug(
            "Connected service",
            extra={"service_id": service.id, "service_type": service.type.value},
        )
        return service

    def _allocate_id(self) -> str:
        used = self.ids()
        for _ in range(self.max_id_attempts):
            candidate = str(self._rng.randrange(self.id_space))
            if candidate not in used:
                return candidate

        # Dense registry: pick uniformly from what is left instead of retrying
        free = [str(i) for i in range(self.id_space) if str(i) not in used]
        if not free:
            raise IdSpaceExhaustedError(self.id_space)
        return self._rng.choice(free)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def find_by_name_or_id(self, name_or_id: str) -> ConnectedService | None:
        """First service whose id or name equals name_or_id, or None."""
        if not name_or_id:
            raise MissingArgumentError("name_or_id")
        return next(
            (s for s in self._services if s.id == name_or_id or s.name == name_or_id),
            None,
        )

    def find_by_id(self, service_id: str) -> ConnectedService | None:
        """First service with the given id, or None."""
        if not service_id:
            raise MissingArgumentError("service_id")
        return next((s for s in self._services if s.id == service_id), None)

    # =========================================================================
    # DISCONNECT
    # =========================================================================

    def disconnect_by_name_or_id(self, name_or_id: str) -> ConnectedService:
        """
        Remove and return the first service matching name_or_id.

        Raises:
            NotFoundError: If nothing matches
        """
        service = self.find_by_name_or_id(name_or_id)
        if service is None:
            raise NotFoundError(
                f"A service with id or name of [{name_or_id}] was not found",
                key=name_or_id,
            )
        self._remove(service)
        return service

    def disconnect_by_id(self, service_id: str) -> None:
        """Remove the service with the given id; does nothing if absent."""
        service = self.find_by_id(service_id)
        if service is not None:
            self._remove(service)

    def _remove(self, service: ConnectedService) -> None:
        # Identity, not equality: two services may hold identical fields
        for index, existing in enumerate(self._services):
            if existing is service:
                del self._services[index]
                break
        logger.debug(
            "Disconnected service",
            extra={"service_id": service.id, "service_type": service.type.value},
        )

    # =========================================================================
    # DISPATCH REFERENCES
    # =========================================================================

    def prune_dispatch_references(self) -> None:
        """Drop dispatch service_ids that no longer name a connected service."""
        present = self.ids()
        for service in self._services:
            if isinstance(service, DispatchService):
                kept = [sid for sid in service.service_ids if sid in present]
                if len(kept) != len(service.service_ids):
                    logger.debug(
                        "Pruned stale dispatch references",
                        extra={
                            "service_id": service.id,
                            "removed": len(service.service_ids) - len(kept),
                        },
                    )
                service.service_ids = kept
