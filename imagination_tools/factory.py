"""
Factory для создания Pub/Sub и Storage клиентов из конфигурации
"""

import logging
import os
from typing import Any, Dict, Union

from google.auth.credentials import AnonymousCredentials
from google.cloud import storage
from pydantic import ValidationError

from .config import PubSubConfig, StorageConfig
from .interfaces import ClientConfigError, ClientConnectionError, StorageClient
from .simpler.pubsub import PubSubClient
from .simpler.storage import GCSStorageClient


logger = logging.getLogger(__name__)

# Проект по умолчанию для эмулятора storage, реальный проект там не нужен
EMULATOR_PROJECT = "emulator-project"


class ClientFactory:
    """Factory для создания клиентов"""

    @staticmethod
    def create_pubsub_client(config: Union[PubSubConfig, Dict[str, Any]]) -> PubSubClient:
        """
        Создать PubSubClient

        Args:
            config: PubSubConfig или словарь с теми же полями

        Returns:
            Экземпляр PubSubClient

        Raises:
            ClientConfigError: Если конфигурация некорректна
            ClientConnectionError: Если клиент не удалось создать
        """
        cfg = ClientFactory._coerce(config, PubSubConfig, "Pub/Sub client")
        ClientFactory._validate_config(cfg, ["project_id"], "Pub/Sub client")

        if cfg.emulator_host:
            # PublisherClient сам читает эту переменную и поднимает insecure канал
            os.environ["PUBSUB_EMULATOR_HOST"] = cfg.emulator_host
            logger.info(
                f"Using Pub/Sub emulator: {cfg.emulator_host}",
                extra={"component": "client_factory"}
            )

        return PubSubClient(
            project_id=cfg.project_id,
            credentials_file=None if cfg.emulator_host else cfg.credentials_file,
            publish_timeout=cfg.publish_timeout
        )

    @staticmethod
    def create_storage_client(config: Union[StorageConfig, Dict[str, Any]]) -> StorageClient:
        """
        Создать StorageClient

        Args:
            config: StorageConfig или словарь с теми же полями

        Returns:
            Экземпляр StorageClient

        Raises:
            ClientConfigError: Если конфигурация некорректна
            ClientConnectionError: Если клиент не удалось создать
        """
        cfg = ClientFactory._coerce(config, StorageConfig, "Storage client")

        if not cfg.emulator_host:
            return GCSStorageClient(
                project_id=cfg.project_id,
                credentials_file=cfg.credentials_file
            )

        if not cfg.emulator_host.startswith(("http://", "https://")):
            raise ClientConfigError(
                f"Storage client invalid emulator URL format: {cfg.emulator_host}"
            )

        try:
            client = storage.Client(
                project=cfg.project_id or EMULATOR_PROJECT,
                credentials=AnonymousCredentials(),
                client_options={"api_endpoint": cfg.emulator_host}
            )
        except Exception as e:
            raise ClientConnectionError(f"creating storage client: {e}") from e

        logger.info(
            f"Using Storage emulator: {cfg.emulator_host}",
            extra={"component": "client_factory"}
        )
        return GCSStorageClient(client=client)

    @staticmethod
    def _coerce(config: Any, model: type, component_name: str) -> Any:
        """Привести dict к модели конфигурации"""
        if isinstance(config, model):
            return config
        if not isinstance(config, dict):
            raise ClientConfigError(
                f"{component_name} config must be a dict or {model.__name__}, "
                f"got {type(config).__name__}"
            )
        try:
            return model(**config)
        except ValidationError as e:
            raise ClientConfigError(f"{component_name} invalid config: {e}") from e

    @staticmethod
    def _validate_config(config: Any, required_fields: list, component_name: str) -> None:
        """
        Проверить обязательные поля

        Raises:
            ClientConfigError: Если обязательные поля не заданы
        """
        missing_fields = [
            field for field in required_fields
            if not getattr(config, field, None)
        ]

        if missing_fields:
            raise ClientConfigError(
                f"{component_name} missing required fields: {missing_fields}"
            )
