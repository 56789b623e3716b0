import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pytest
from google.api_core.exceptions import NotFound, ServiceUnavailable
from pydantic import BaseModel

from imagination_tools.simpler import GCSStorageClient, PubSubClient


@dataclass
class StoredObject:
    data: bytes
    content_type: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None


class FakeReader(io.RawIOBase):
    def __init__(self, blob: "FakeBlob"):
        self._blob = blob

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        store = self._blob.bucket.store
        store.body_reads += 1
        obj = store.objects.get((self._blob.bucket.name, self._blob.name))
        if obj is None:
            raise NotFound(f"No such object: {self._blob.bucket.name}/{self._blob.name}")
        return obj.data


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str):
        self.bucket = bucket
        self.name = name
        self.content_type: Optional[str] = None
        self.metadata: Optional[Dict[str, str]] = None

    def upload_from_file(self, stream, size=None, content_type=None) -> None:
        store = self.bucket.store
        store.uploads += 1
        if store.fail_upload:
            raise ServiceUnavailable("upload failed")
        data = stream.read() if size is None else stream.read(size)
        store.objects[(self.bucket.name, self.name)] = StoredObject(
            data=data,
            content_type=content_type or self.content_type,
            metadata=dict(self.metadata) if self.metadata is not None else None,
        )

    def open(self, mode: str = "r"):
        if mode == "rb":
            return FakeReader(self)
        raise ValueError(f"unsupported mode {mode}")


class FakeBucket:
    def __init__(self, store: "FakeStorage", name: str):
        self.store = store
        self.name = name

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)

    def get_blob(self, name: str) -> Optional[FakeBlob]:
        obj = self.store.objects.get((self.name, name))
        if obj is None:
            return None
        blob = FakeBlob(self, name)
        blob.content_type = obj.content_type
        blob.metadata = obj.metadata
        return blob


class FakeStorage:
    """In-memory stand-in for google.cloud.storage.Client."""

    def __init__(self):
        self.objects: Dict[Tuple[str, str], StoredObject] = {}
        self.body_reads = 0
        self.uploads = 0
        self.fail_upload = False
        self.closed = False

    def bucket(self, name: str) -> FakeBucket:
        return FakeBucket(self, name)

    def close(self) -> None:
        self.closed = True


class FakeFuture:
    def __init__(self, message_id: Optional[str] = None, error: Optional[Exception] = None):
        self.message_id = message_id
        self.error = error
        self.timeouts: List[Any] = []

    def result(self, timeout=None):
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.message_id


class FakePublisher:
    """In-memory stand-in for pubsub_v1.PublisherClient."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.next_error: Optional[Exception] = None
        self.futures: List[FakeFuture] = []
        self.stopped = False

    @staticmethod
    def topic_path(project: str, topic: str) -> str:
        return f"projects/{project}/topics/{topic}"

    def publish(self, topic, data, **attrs) -> FakeFuture:
        self.calls.append({"topic": topic, "data": data, "attributes": attrs})
        future = FakeFuture(message_id=str(len(self.calls)), error=self.next_error)
        self.futures.append(future)
        return future

    def stop(self) -> None:
        self.stopped = True


class Report(BaseModel):
    id: str
    score: int
    tags: List[str] = []

    @classmethod
    def avro_schema(cls):
        return {
            "type": "record",
            "name": "Report",
            "namespace": "tests.v1",
            "fields": [
                {"name": "id", "type": "string"},
                {"name": "score", "type": "int"},
                {"name": "tags", "type": {"type": "array", "items": "string"}, "default": []},
            ],
        }


class ReportV2(BaseModel):
    id: str
    score: int

    @classmethod
    def avro_schema(cls):
        return {
            "type": "record",
            "name": "ReportV2",
            "namespace": "tests.v2",
            "fields": [
                {"name": "id", "type": "string"},
                {"name": "score", "type": "int"},
            ],
        }


class Color(Enum):
    RED = "RED"
    BLUE = "BLUE"


class Paint(BaseModel):
    color: Color
    shades: List[Color] = []

    @classmethod
    def avro_schema(cls):
        color = {"type": "enum", "name": "Color", "symbols": ["RED", "BLUE"]}
        return {
            "type": "record",
            "name": "Paint",
            "fields": [
                {"name": "color", "type": color},
                {"name": "shades", "type": {"type": "array", "items": "Color"}, "default": []},
            ],
        }


@dataclass
class Point:
    x: float
    y: float
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def avro_schema(cls):
        return '''{
            "type": "record",
            "name": "Point",
            "fields": [
                {"name": "x", "type": "double"},
                {"name": "y", "type": "double"},
                {"name": "labels", "type": {"type": "map", "values": "string"}}
            ]
        }'''


class Plain(BaseModel):
    value: str

    @classmethod
    def avro_schema(cls):
        return "string"


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def storage_client(fake_storage) -> GCSStorageClient:
    return GCSStorageClient(client=fake_storage)


@pytest.fixture
def fake_publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def pubsub_client(fake_publisher) -> PubSubClient:
    return PubSubClient(project_id="test-project", publisher=fake_publisher, publish_timeout=5.0)


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """
    Keep config overrides from the developer's shell out of the tests.
    """
    for name in (
        "IMAGINATION_TOOLS_CONFIG",
        "GOOGLE_CLOUD_PROJECT",
        "GOOGLE_APPLICATION_CREDENTIALS",
        "PUBSUB_PROJECT_ID",
        "STORAGE_PROJECT_ID",
        "PUBSUB_EMULATOR_HOST",
        "PUBSUB_PUBLISH_TIMEOUT",
        "STORAGE_EMULATOR_HOST",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
