"""
Shared fixtures for botconfig tests.

Provides keys, a seeded random source, deterministic settings and one
fully-populated instance of every service kind.
"""

import random

import pytest

from botconfig import (
    AppInsightsService,
    BlobStorageService,
    BotConfiguration,
    BotService,
    CosmosDbService,
    DispatchService,
    EndpointService,
    FileService,
    GenericService,
    LuisService,
    QnAMakerService,
    generate_key,
)
from botconfig.settings import Settings


@pytest.fixture
def settings():
    """Default settings, independent of the environment and any YAML file."""
    return Settings.model_construct()


@pytest.fixture
def secret():
    return generate_key()


@pytest.fixture
def other_secret():
    return generate_key()


@pytest.fixture
def rng():
    return random.Random(1234)


def make_all_services():
    """One service of each kind, every sensitive field populated."""
    return [
        BotService(
            name="bot",
            tenant_id="tenant",
            subscription_id="sub",
            resource_group="rg",
            service_name="svc",
            app_id="bot-app",
        ),
        AppInsightsService(
            name="insights",
            instrumentation_key="ikey",
            application_id="app-id",
            api_keys={"key1": "value1", "key2": "value2"},
        ),
        BlobStorageService(
            name="blob",
            connection_string="DefaultEndpointsProtocol=https;AccountKey=abc",
            container="bots",
        ),
        CosmosDbService(
            name="cosmos",
            endpoint="https://cosmos.example.com",
            key="cosmos-key",
            database="db",
            collection="coll",
        ),
        LuisService(
            name="luis",
            app_id="luis-app",
            authoring_key="authoring",
            subscription_key="subscription",
            version="0.1",
            region="westus",
        ),
        DispatchService(
            name="dispatch",
            app_id="dispatch-app",
            authoring_key="d-authoring",
            subscription_key="d-subscription",
            version="0.1",
            region="westus",
        ),
        EndpointService(
            name="endpoint",
            app_id="endpoint-app",
            app_password="p@ssw0rd",
            endpoint="http://localhost:3978/api/messages",
        ),
        FileService(name="file", path="/tmp/readme.md"),
        QnAMakerService(
            name="qna",
            kb_id="kb",
            subscription_key="qna-sub",
            hostname="https://qna.example.com",
            endpoint_key="qna-endpoint",
        ),
        GenericService(
            name="generic",
            url="https://generic.example.com",
            configuration={"user": "me", "password": "secret-value"},
        ),
    ]


@pytest.fixture
def all_services():
    return make_all_services()


@pytest.fixture
def config(settings, rng):
    """Empty configuration with deterministic ids."""
    return BotConfiguration(name="test-bot", description="a test bot", rng=rng, settings=settings)


@pytest.fixture
def populated_config(config, all_services):
    for service in all_services:
        config.connect_service(service)
    return config
