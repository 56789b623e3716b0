"""
imagination-tools

Тонкие обертки над Google Cloud Pub/Sub, Cloud Storage и CloudEvents.
Публикация JSON, загрузка объектов с тегом Avro схемы,
распаковка CloudEvent в типизированный payload.
"""

from typing import Any, Dict, Union

from .config import PubSubConfig, StorageConfig, ToolsConfig, load_config
from .econ import event_to_message, event_to_struct
from .factory import ClientFactory
from .interfaces import (
    JSON_CONTENT_TYPE,
    SCHEMA_REF_KEY,
    ClientConfigError,
    ClientConnectionError,
    EventDecodeError,
    ImaginationToolsError,
    MessagePublishedData,
    ObjectNotFoundError,
    PublishError,
    PubsubMessage,
    SchemaMismatchError,
    SchemaProvider,
    SchemaValidationError,
    SerializationError,
    StorageClient,
    StorageReadError,
    StorageWriteError,
    UnnamedSchemaError,
)
from .simpler import GCSStorageClient, PubSubClient


# Удобные функции для быстрого создания
def create_pubsub_client(config: Union[PubSubConfig, Dict[str, Any]]) -> PubSubClient:
    """
    Создает Pub/Sub клиент

    Usage:
        client = create_pubsub_client({"project_id": "my-project"})
        client.publish_message("events", {"data": "value"})
    """
    return ClientFactory.create_pubsub_client(config)


def create_storage_client(config: Union[StorageConfig, Dict[str, Any]]) -> StorageClient:
    """
    Создает Storage клиент

    Usage:
        with create_storage_client({}) as client:
            client.upload_json_schematized("artifacts", "report.json", report)
    """
    return ClientFactory.create_storage_client(config)


__version__ = "1.0.0"
__all__ = [
    "ClientFactory",
    "GCSStorageClient",
    "PubSubClient",
    "StorageClient",
    "SchemaProvider",
    "PubsubMessage",
    "MessagePublishedData",
    "PubSubConfig",
    "StorageConfig",
    "ToolsConfig",
    "load_config",
    "event_to_message",
    "event_to_struct",
    "create_pubsub_client",
    "create_storage_client",
    "SCHEMA_REF_KEY",
    "JSON_CONTENT_TYPE",
    "ImaginationToolsError",
    "ClientConfigError",
    "ClientConnectionError",
    "SerializationError",
    "SchemaValidationError",
    "UnnamedSchemaError",
    "SchemaMismatchError",
    "PublishError",
    "StorageWriteError",
    "StorageReadError",
    "ObjectNotFoundError",
    "EventDecodeError",
]
