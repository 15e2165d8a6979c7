"""
botconfig - Bot configuration files with encrypted service secrets

This package provides:
- BotConfiguration: load, edit and save .bot files
- Connected service models (LUIS, QnA Maker, blob storage, ...)
- Secret-derived AES-256-GCM encryption of sensitive service fields
"""

import logging

from botconfig.configuration import BOT_FILE_VERSION, BotConfiguration
from botconfig.crypto import generate_key
from botconfig.exceptions import (
    BotConfigError,
    CipherError,
    DecodeError,
    DocumentDecodeError,
    DuplicateServiceError,
    IdSpaceExhaustedError,
    InvalidSecretError,
    MissingArgumentError,
    MissingSecretError,
    NoLocationError,
    NotFoundError,
    NullServiceError,
    SecretError,
    ServiceDecodeError,
    UnknownServiceTypeError,
)
from botconfig.secret import SecretKey
from botconfig.services import (
    AppInsightsService,
    AzureService,
    BlobStorageService,
    BotService,
    ConnectedService,
    CosmosDbService,
    DispatchService,
    EndpointService,
    FileService,
    GenericService,
    LuisService,
    QnAMakerService,
    ServiceType,
)

__version__ = "1.0.0"

__all__ = [
    "BOT_FILE_VERSION",
    "BotConfiguration",
    "SecretKey",
    "generate_key",
    # Services
    "ServiceType",
    "ConnectedService",
    "AzureService",
    "AppInsightsService",
    "BlobStorageService",
    "BotService",
    "CosmosDbService",
    "DispatchService",
    "EndpointService",
    "FileService",
    "GenericService",
    "LuisService",
    "QnAMakerService",
    # Errors
    "BotConfigError",
    "CipherError",
    "DecodeError",
    "DocumentDecodeError",
    "DuplicateServiceError",
    "IdSpaceExhaustedError",
    "InvalidSecretError",
    "MissingArgumentError",
    "MissingSecretError",
    "NoLocationError",
    "NotFoundError",
    "NullServiceError",
    "SecretError",
    "ServiceDecodeError",
    "UnknownServiceTypeError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
