"""
Интерфейсы для imagination-tools
Типы данных, абстрактные клиенты и исключения
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, Protocol, Type, TypeVar, Union, runtime_checkable

from pydantic import BaseModel, Base64Bytes, ConfigDict, Field


# Ключ метаданных объекта со ссылкой на схему.
# Общий для upload и download, не переопределять.
SCHEMA_REF_KEY = "schema_ref"

JSON_CONTENT_TYPE = "application/json"


@runtime_checkable
class SchemaProvider(Protocol):
    """
    Любой тип, который умеет вернуть свою Avro схему

    Наследование не требуется, достаточно classmethod avro_schema()
    """

    @classmethod
    def avro_schema(cls) -> Union[Dict[str, Any], str]:
        ...


S = TypeVar("S", bound=SchemaProvider)


class PubsubMessage(BaseModel):
    """
    Pub/Sub сообщение внутри CloudEvent
    (google.events.cloud.pubsub.v1.PubsubMessage)

    data автоматически декодируется из base64
    """
    model_config = ConfigDict(extra='ignore')

    attributes: Dict[str, str] = Field(default_factory=dict)
    data: Base64Bytes = Field(default=b"")


class MessagePublishedData(BaseModel):
    """
    Обертка данных CloudEvent
    (google.events.cloud.pubsub.v1.MessagePublishedData)
    """
    model_config = ConfigDict(extra='ignore')

    message: PubsubMessage


class StorageClient(ABC):
    """Абстрактный интерфейс для работы с object storage"""

    @abstractmethod
    def upload_file(self, bucket: str, name: str, content: Union[BinaryIO, bytes]) -> None:
        """
        Загрузить файл в bucket

        Args:
            bucket: Имя bucket
            name: Имя объекта
            content: Поток байтов или bytes

        Raises:
            StorageWriteError: Если запись или финализация не удалась
        """
        pass

    @abstractmethod
    def upload_json_schematized(self, bucket: str, name: str, obj: SchemaProvider) -> None:
        """
        Загрузить объект как JSON с проверкой по Avro схеме

        Имя схемы сохраняется в метаданных объекта (SCHEMA_REF_KEY)
        для проверки при скачивании.

        Raises:
            SchemaValidationError: Если объект не соответствует своей схеме
            SerializationError: Если объект не сериализуется в JSON
            StorageWriteError: Если загрузка не удалась
        """
        pass

    @abstractmethod
    def download_file(self, bucket: str, name: str) -> bytes:
        """
        Скачать файл из bucket

        Returns:
            Содержимое объекта

        Raises:
            ObjectNotFoundError: Если объекта нет
            StorageReadError: Если чтение не удалось
        """
        pass

    @abstractmethod
    def download_json_schematized(self, bucket: str, name: str, target_type: Type[S]) -> S:
        """
        Скачать JSON объект и проверить его по Avro схеме

        Сначала сравнивает schema_ref из метаданных со схемой target_type,
        затем читает тело, декодирует и валидирует результат.

        Raises:
            SchemaMismatchError: Если schema_ref отсутствует или не совпадает
            SerializationError: Если тело не декодируется в target_type
            SchemaValidationError: Если результат не проходит валидацию
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Закрыть клиент"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# Кастомные исключения
class ImaginationToolsError(Exception):
    """Базовая ошибка библиотеки"""
    pass


class ClientConnectionError(ImaginationToolsError):
    """Ошибка создания клиента"""
    pass


class ClientConfigError(ImaginationToolsError):
    """Ошибка конфигурации"""
    pass


class SerializationError(ImaginationToolsError):
    """Ошибка сериализации/десериализации JSON"""
    pass


class SchemaValidationError(ImaginationToolsError):
    """Объект не соответствует своей схеме"""
    pass


class UnnamedSchemaError(SchemaValidationError):
    """У схемы нет имени, тегировать объект нечем"""
    pass


class SchemaMismatchError(ImaginationToolsError):
    """schema_ref объекта отсутствует или не совпадает с ожидаемой схемой"""

    def __init__(self, have: str, want: str):
        super().__init__(
            f"schema mismatch or missing schema_ref: have={have!r} want={want!r}"
        )
        self.have = have
        self.want = want


class PublishError(ImaginationToolsError):
    """Ошибка публикации сообщения"""
    pass


class StorageWriteError(ImaginationToolsError):
    """Ошибка записи в storage"""
    pass


class StorageReadError(ImaginationToolsError):
    """Ошибка чтения из storage"""
    pass


class ObjectNotFoundError(StorageReadError):
    """Объект не найден"""
    pass


class EventDecodeError(ImaginationToolsError):
    """Ошибка разбора CloudEvent"""
    pass
