"""
Google Cloud Storage: загрузка и скачивание объектов,
в том числе JSON объектов, помеченных именем Avro схемы
"""

import io
import logging
import time
from typing import BinaryIO, Dict, Optional, Type, Union

from google.api_core.exceptions import NotFound
from google.cloud import storage
from pydantic import ValidationError

from ..codec import dump_json, load_json
from ..interfaces import (
    JSON_CONTENT_TYPE,
    SCHEMA_REF_KEY,
    S,
    ClientConnectionError,
    ObjectNotFoundError,
    SchemaMismatchError,
    SchemaProvider,
    SchemaValidationError,
    SerializationError,
    StorageClient,
    StorageReadError,
    StorageWriteError,
)
from ..schemas import schema_name, validate_against_schema
from ..telemetry.logger import MetricsLogger


logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


class GCSStorageClient(StorageClient):
    """
    StorageClient поверх google.cloud.storage.Client
    """

    def __init__(
        self,
        client: Optional[storage.Client] = None,
        project_id: Optional[str] = None,
        credentials_file: Optional[str] = None
    ):
        """
        Инициализировать клиент

        Args:
            client: Готовый storage.Client (если None, будет создан)
            project_id: ID проекта GCP
            credentials_file: Путь к JSON ключу service account

        Raises:
            ClientConnectionError: Если не удалось создать storage.Client
        """
        if client is None:
            try:
                if credentials_file:
                    client = storage.Client.from_service_account_json(
                        credentials_file, project=project_id
                    )
                else:
                    client = storage.Client(project=project_id)
            except Exception as e:
                logger.error(f"Failed to create storage client: {e}")
                raise ClientConnectionError(f"creating storage client: {e}") from e

        self.client = client
        self.metrics = MetricsLogger()

    def upload_file(self, bucket: str, name: str, content: Union[BinaryIO, bytes]) -> None:
        """Загрузить файл в bucket"""
        self._upload(bucket, name, content, operation="upload")

    def upload_json_schematized(self, bucket: str, name: str, obj: SchemaProvider) -> None:
        """
        Загрузить объект как JSON с проверкой по его Avro схеме
        В метаданные объекта записывается имя схемы
        """
        started = time.perf_counter()

        # Схема без имени отклоняется до любых операций с storage
        try:
            schema_ref = schema_name(obj)
        except SchemaValidationError as e:
            self._log_failure("upload_json", bucket, name, started, e)
            raise type(e)(f"resolving schema for {bucket}/{name}: {e}") from e

        try:
            validate_against_schema(obj)
        except SchemaValidationError as e:
            logger.error(
                f"Object does not match its schema: {e}",
                extra={
                    "component": "storage_client",
                    "bucket": bucket,
                    "object_name": name,
                    "schema_ref": schema_ref
                }
            )
            raise SchemaValidationError(f"validating object against schema: {e}") from e

        try:
            data = dump_json(obj)
        except SerializationError as e:
            raise SerializationError(f"marshaling object: {e}") from e

        self._upload(
            bucket,
            name,
            data,
            content_type=JSON_CONTENT_TYPE,
            metadata={SCHEMA_REF_KEY: schema_ref},
            operation="upload_json"
        )

    def download_file(self, bucket: str, name: str) -> bytes:
        """Скачать файл из bucket"""
        started = time.perf_counter()
        blob = self.client.bucket(bucket).blob(name)

        try:
            data = self._read_object(bucket, name, blob)
        except StorageReadError as e:
            self._log_failure("download", bucket, name, started, e)
            raise

        self.metrics.log_storage_operation(
            "download", bucket, name, self._elapsed_ms(started), True, size_bytes=len(data)
        )
        return data

    def download_json_schematized(self, bucket: str, name: str, target_type: Type[S]) -> S:
        """
        Скачать JSON объект в target_type

        schema_ref из метаданных сверяется со схемой target_type
        до чтения тела объекта
        """
        started = time.perf_counter()

        try:
            want = schema_name(target_type)
        except SchemaValidationError as e:
            self._log_failure("download_json", bucket, name, started, e)
            raise type(e)(f"resolving schema for {bucket}/{name}: {e}") from e

        try:
            blob = self.client.bucket(bucket).get_blob(name)
        except Exception as e:
            self._log_failure("download_json", bucket, name, started, e)
            raise StorageReadError(f"getting attrs of {bucket}/{name}: {e}") from e

        if blob is None:
            error = ObjectNotFoundError(f"object {bucket}/{name} not found")
            self._log_failure("download_json", bucket, name, started, error)
            raise error

        have = (blob.metadata or {}).get(SCHEMA_REF_KEY, "")
        if have != want:
            error = SchemaMismatchError(have=have, want=want)
            self._log_failure("download_json", bucket, name, started, error)
            raise error

        try:
            data = self._read_object(bucket, name, blob)
        except StorageReadError as e:
            self._log_failure("download_json", bucket, name, started, e)
            raise

        try:
            obj = load_json(data, target_type)
        except ValidationError as e:
            self._log_failure("download_json", bucket, name, started, e)
            raise SerializationError(f"json: {e}") from e

        # Повторная валидация уже заполненного объекта
        try:
            validate_against_schema(obj)
        except SchemaValidationError as e:
            self._log_failure("download_json", bucket, name, started, e)
            raise SchemaValidationError(f"validate: {e}") from e

        self.metrics.log_storage_operation(
            "download_json",
            bucket,
            name,
            self._elapsed_ms(started),
            True,
            size_bytes=len(data),
            schema_ref=want
        )
        return obj

    def close(self) -> None:
        """Закрыть HTTP сессию клиента"""
        try:
            self.client.close()
            logger.info("Storage client closed")
        except Exception as e:
            logger.error(f"Error closing storage client: {e}")

    def _upload(
        self,
        bucket: str,
        name: str,
        content: Union[BinaryIO, bytes],
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        operation: str = "upload"
    ) -> None:
        """
        Записать content в bucket/name и финализировать запись

        Если задан content_type, он выставляется объекту.
        Если задан metadata, пары ключ-значение пишутся в метаданные объекта.
        Поток сначала читается целиком, затем объект создается одним
        запросом: при ошибке чтения объект не создается и не перезаписывается.
        """
        started = time.perf_counter()

        if isinstance(content, (bytes, bytearray)):
            data = bytes(content)
        else:
            try:
                data = _read_all(content)
            except Exception as e:
                self._log_failure(operation, bucket, name, started, e)
                raise StorageWriteError(f"copying file to bucket {bucket}/{name}: {e}") from e

        blob = self.client.bucket(bucket).blob(name)
        if metadata is not None:
            blob.metadata = metadata

        try:
            with io.BytesIO(data) as buffer:
                blob.upload_from_file(buffer, size=len(data), content_type=content_type)
        except Exception as e:
            self._log_failure(operation, bucket, name, started, e)
            raise StorageWriteError(f"finalizing upload to bucket {bucket}/{name}: {e}") from e

        self.metrics.log_storage_operation(
            operation,
            bucket,
            name,
            self._elapsed_ms(started),
            True,
            size_bytes=len(data),
            schema_ref=(metadata or {}).get(SCHEMA_REF_KEY)
        )

    def _read_object(self, bucket: str, name: str, blob: storage.Blob) -> bytes:
        """
        Прочитать объект целиком

        Открытие и закрытие reader собраны здесь, ошибки оборачиваются
        с указанием объекта.
        """
        try:
            reader = blob.open("rb")
        except NotFound as e:
            raise ObjectNotFoundError(f"object {bucket}/{name} not found") from e
        except Exception as e:
            raise StorageReadError(f"creating reader for {bucket}/{name}: {e}") from e

        try:
            with reader:
                return reader.read()
        except NotFound as e:
            raise ObjectNotFoundError(f"object {bucket}/{name} not found") from e
        except Exception as e:
            raise StorageReadError(f"reading file {bucket}/{name}: {e}") from e

    def _log_failure(
        self,
        operation: str,
        bucket: str,
        name: str,
        started: float,
        error: Exception
    ) -> None:
        self.metrics.log_storage_operation(
            operation, bucket, name, self._elapsed_ms(started), False, error=str(error)
        )
        logger.error(
            f"Storage {operation} failed: {error}",
            extra={
                "component": "storage_client",
                "bucket": bucket,
                "object_name": name,
                "error": str(error)
            }
        )

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return (time.perf_counter() - started) * 1000


def _read_all(src: BinaryIO) -> bytes:
    """Прочитать поток до конца"""
    chunks = []
    while True:
        chunk = src.read(COPY_CHUNK_SIZE)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)
