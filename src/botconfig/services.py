"""
Connected service models.

Each entry in a bot file's "services" list is one of ten service kinds,
tagged by its "type" field. This module defines:
- ServiceType: the ten recognized tags
- ConnectedService and one subclass per tag
- decode_service(): tag-dispatched construction from a parsed JSON object

Every service knows which of its own string fields are sensitive and
encrypts/decrypts exactly those in place.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from botconfig import crypto
from botconfig.exceptions import ServiceDecodeError, UnknownServiceTypeError

__all__ = [
    "ServiceType",
    "ConnectedService",
    "AzureService",
    "BotService",
    "AppInsightsService",
    "BlobStorageService",
    "CosmosDbService",
    "LuisService",
    "DispatchService",
    "EndpointService",
    "FileService",
    "QnAMakerService",
    "GenericService",
    "SERVICE_DECODERS",
    "decode_service",
]

_Transform = Callable[[str | None], str | None]


class ServiceType(str, Enum):
    """Tag stored in each service object's "type" field."""
    BOT = "bot"
    APP_INSIGHTS = "appInsights"
    BLOB_STORAGE = "blob"
    COSMOS_DB = "cosmosDB"
    DISPATCH = "dispatch"
    ENDPOINT = "endpoint"
    FILE = "file"
    LUIS = "luis"
    QNA = "qna"
    GENERIC = "generic"


class ConnectedService(BaseModel):
    """
    Base class for every connected service.

    Subclasses set SERVICE_TYPE and list their sensitive attributes in
    SENSITIVE_FIELDS. The type tag is a read-only property, so it cannot
    change once the object exists.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    SERVICE_TYPE: ClassVar[ServiceType]
    SENSITIVE_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str | None = None
    name: str | None = None

    @property
    def type(self) -> ServiceType:
        return self.SERVICE_TYPE

    def encrypt(self, secret: str) -> None:
        """Replace every sensitive value with its ciphertext."""
        self._transform(lambda value: crypto.encrypt(value, secret))

    def decrypt(self, secret: str) -> None:
        """Replace every sensitive value with its plaintext."""
        self._transform(lambda value: crypto.decrypt(value, secret))

    def _transform(self, fn: _Transform) -> None:
        for attr in self.SENSITIVE_FIELDS:
            setattr(self, attr, fn(getattr(self, attr)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase mapping stored on disk, type first."""
        data: dict[str, Any] = {"type": self.type.value}
        data.update(self.model_dump(by_alias=True, mode="json"))
        return data


def _transform_values(values: dict[str, str], fn: _Transform) -> dict[str, str]:
    return {k: fn(v) for k, v in values.items()}


# =============================================================================
# AZURE-HOSTED SERVICES
# =============================================================================


class AzureService(ConnectedService):
    """Fields shared by services provisioned in an Azure subscription."""

    tenant_id: str | None = None
    subscription_id: str | None = None
    resource_group: str | None = None
    service_name: str | None = None


class BotService(AzureService):
    """Azure Bot Service registration."""

    SERVICE_TYPE = ServiceType.BOT

    app_id: str | None = None


class AppInsightsService(AzureService):
    """Application Insights telemetry resource."""

    SERVICE_TYPE = ServiceType.APP_INSIGHTS
    SENSITIVE_FIELDS = ("instrumentation_key",)

    instrumentation_key: str | None = None
    application_id: str | None = None
    api_keys: dict[str, str] = Field(default_factory=dict)

    def _transform(self, fn: _Transform) -> None:
        super()._transform(fn)
        self.api_keys = _transform_values(self.api_keys, fn)


class BlobStorageService(AzureService):
    """Azure blob storage account."""

    SERVICE_TYPE = ServiceType.BLOB_STORAGE
    SENSITIVE_FIELDS = ("connection_string",)

    connection_string: str | None = None
    container: str | None = None


class CosmosDbService(AzureService):
    """Azure Cosmos DB collection."""

    SERVICE_TYPE = ServiceType.COSMOS_DB
    SENSITIVE_FIELDS = ("key",)

    endpoint: str | None = None
    key: str | None = None
    database: str | None = None
    collection: str | None = None


# =============================================================================
# LANGUAGE SERVICES
# =============================================================================


class LuisService(ConnectedService):
    """LUIS language understanding application."""

    SERVICE_TYPE = ServiceType.LUIS
    SENSITIVE_FIELDS = ("authoring_key", "subscription_key")

    app_id: str | None = None
    authoring_key: str | None = None
    subscription_key: str | None = None
    version: str | None = None
    region: str | None = None
    url: str | None = None


class DispatchService(LuisService):
    """
    LUIS dispatch model routing to other services in the same bot file.

    service_ids references other entries by id; it does not own them.
    """

    SERVICE_TYPE = ServiceType.DISPATCH

    service_ids: list[str] = Field(default_factory=list)


class QnAMakerService(ConnectedService):
    """QnA Maker knowledge base."""

    SERVICE_TYPE = ServiceType.QNA
    SENSITIVE_FIELDS = ("subscription_key", "endpoint_key")

    kb_id: str | None = None
    subscription_key: str | None = None
    hostname: str | None = None
    endpoint_key: str | None = None


# =============================================================================
# OTHER SERVICES
# =============================================================================


class EndpointService(ConnectedService):
    """Bot messaging endpoint and its app credentials."""

    SERVICE_TYPE = ServiceType.ENDPOINT
    SENSITIVE_FIELDS = ("app_password",)

    app_id: str | None = None
    app_password: str | None = None
    endpoint: str | None = None
    channel_service: str | None = None


class FileService(ConnectedService):
    """Local file attached to the bot."""

    SERVICE_TYPE = ServiceType.FILE

    path: str | None = None


class GenericService(ConnectedService):
    """Arbitrary service described by a url and a key/value configuration."""

    SERVICE_TYPE = ServiceType.GENERIC

    url: str | None = None
    configuration: dict[str, str] = Field(default_factory=dict)

    def _transform(self, fn: _Transform) -> None:
        super()._transform(fn)
        self.configuration = _transform_values(self.configuration, fn)


# =============================================================================
# DECODING
# =============================================================================

SERVICE_DECODERS: dict[str, type[ConnectedService]] = {
    ServiceType.BOT.value: BotService,
    ServiceType.APP_INSIGHTS.value: AppInsightsService,
    ServiceType.BLOB_STORAGE.value: BlobStorageService,
    ServiceType.COSMOS_DB.value: CosmosDbService,
    ServiceType.DISPATCH.value: DispatchService,
    ServiceType.ENDPOINT.value: EndpointService,
    ServiceType.FILE.value: FileService,
    ServiceType.LUIS.value: LuisService,
    ServiceType.QNA.value: QnAMakerService,
    ServiceType.GENERIC.value: GenericService,
}


def decode_service(data: Any) -> ConnectedService:
    """
    Build the concrete service for a parsed service object.

    Args:
        data: One element of the document's "services" list

    Returns:
        Instance of the subclass registered for data["type"]

    Raises:
        UnknownServiceTypeError: If the tag is missing or not recognized
        ServiceDecodeError: If the object is not a mapping or its fields are invalid
    """
    if not isinstance(data, dict):
        raise ServiceDecodeError(
            f"Service entry must be an object, got {type(data).__name__}"
        )

    tag = data.get("type")
    service_cls = SERVICE_DECODERS.get(tag) if isinstance(tag, str) else None
    if service_cls is None:
        raise UnknownServiceTypeError(tag, details={"id": data.get("id")})

    try:
        return service_cls.model_validate(data)
    except ValidationError as e:
        raise ServiceDecodeError(
            f"Invalid {tag} service: {e.error_count()} field error(s)",
            service_type=tag,
            details={"id": data.get("id")},
        ) from e
