"""
Google Cloud Pub/Sub: публикация JSON сообщений
"""

import logging
import time
from typing import Any, Dict, Optional

from google.cloud import pubsub_v1

from ..codec import dump_json
from ..interfaces import ClientConnectionError, PublishError, SerializationError
from ..telemetry.logger import MetricsLogger


logger = logging.getLogger(__name__)


class PubSubClient:
    """
    Тонкая обертка над pubsub_v1.PublisherClient
    Сериализует объект в JSON и ждет подтверждения публикации
    """

    def __init__(
        self,
        project_id: str,
        publisher: Optional[pubsub_v1.PublisherClient] = None,
        credentials_file: Optional[str] = None,
        publish_timeout: Optional[float] = 60.0
    ):
        """
        Инициализировать клиент

        Args:
            project_id: ID проекта GCP
            publisher: Готовый PublisherClient (если None, будет создан)
            credentials_file: Путь к JSON ключу service account
            publish_timeout: Таймаут ожидания подтверждения, секунды

        Raises:
            ClientConnectionError: Если не удалось создать PublisherClient
        """
        self.project_id = project_id
        self.publish_timeout = publish_timeout
        self.metrics = MetricsLogger()

        if publisher is None:
            try:
                if credentials_file:
                    publisher = pubsub_v1.PublisherClient.from_service_account_file(
                        credentials_file
                    )
                else:
                    publisher = pubsub_v1.PublisherClient()
            except Exception as e:
                logger.error(f"Failed to create pubsub client: {e}")
                raise ClientConnectionError(f"creating pubsub client: {e}") from e

        self.publisher = publisher

        logger.info(
            "Pub/Sub client created",
            extra={"component": "pubsub_client", "project_id": project_id}
        )

    def publish_message(
        self,
        topic_id: str,
        obj: Any,
        attributes: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> str:
        """
        Опубликовать объект как JSON в топик и дождаться подтверждения

        Args:
            topic_id: ID топика (без projects/.../topics/)
            obj: pydantic модель, dataclass или любой JSON-сериализуемый объект
            attributes: Атрибуты сообщения
            timeout: Таймаут ожидания, по умолчанию publish_timeout клиента

        Returns:
            ID опубликованного сообщения

        Raises:
            SerializationError: Если объект не сериализуется (в топик ничего не уходит)
            PublishError: Если публикация не подтверждена
        """
        try:
            data = dump_json(obj)
        except SerializationError as e:
            logger.error(
                f"Error marshaling message: {e}",
                extra={"component": "pubsub_client", "topic_id": topic_id}
            )
            raise SerializationError(f"error marshaling message: {e}") from e

        topic_path = self.publisher.topic_path(self.project_id, topic_id)
        wait = self.publish_timeout if timeout is None else timeout
        started = time.perf_counter()

        try:
            future = self.publisher.publish(topic_path, data, **(attributes or {}))
            # Ждем завершения публикации
            message_id = future.result(timeout=wait)

        except Exception as e:
            duration_ms = (time.perf_counter() - started) * 1000
            self.metrics.log_publish(
                topic_id, duration_ms, success=False, size_bytes=len(data), error=str(e)
            )
            logger.error(
                f"Publishing message failed: {e}",
                extra={
                    "component": "pubsub_client",
                    "topic_id": topic_id,
                    "error": str(e)
                }
            )
            raise PublishError(f"publishing message to topic {topic_id}: {e}") from e

        duration_ms = (time.perf_counter() - started) * 1000
        self.metrics.log_publish(
            topic_id, duration_ms, success=True, size_bytes=len(data), message_id=message_id
        )
        return message_id

    def close(self) -> None:
        """Остановить publisher, отправив накопленные батчи"""
        try:
            self.publisher.stop()
            logger.info("Pub/Sub client closed")
        except Exception as e:
            logger.error(f"Error closing pubsub client: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
