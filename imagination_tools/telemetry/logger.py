"""
Logging configuration for imagination-tools.
Provides structured JSON logging with correlation IDs and per-operation metrics.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Optional


# Attributes every LogRecord carries; anything else came in through `extra`
_STANDARD_FIELDS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName',
    'message', 'asctime'
})

# Google client libraries are chatty at INFO
_NOISY_LOGGERS = (
    "google",
    "google.auth",
    "google.cloud.pubsub_v1",
    "google.cloud.storage",
    "urllib3",
    "grpc",
)


class JSONFormatter(logging.Formatter):
    """
    Formats log records as one JSON object per line.
    Extra fields passed via `extra=` are merged into the entry.
    """

    def __init__(
        self,
        service_name: str = "imagination-tools",
        include_extra: bool = True
    ):
        """
        Initialize JSON formatter.

        Args:
            service_name: Name of the service for log identification
            include_extra: Whether to include extra fields from log record
        """
        super().__init__()
        self.service_name = service_name
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            for key, value in record.__dict__.items():
                if key not in _STANDARD_FIELDS and not key.startswith('_'):
                    log_entry[key] = value

        return json.dumps(log_entry, default=self._json_default)

    @staticmethod
    def _json_default(obj: Any) -> str:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, bytes):
            return f"<{len(obj)} bytes>"
        return str(obj)


class CorrelationFilter(logging.Filter):
    """
    Adds a correlation ID to every record that does not already carry one.
    """

    def __init__(self, correlation_id: Optional[str] = None, prefix: str = "imt"):
        """
        Args:
            correlation_id: Static correlation ID, or None to generate per record
            prefix: Prefix for generated IDs
        """
        super().__init__()
        self.correlation_id = correlation_id
        self.prefix = prefix

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'correlation_id'):
            record.correlation_id = self.correlation_id or self._generate_correlation_id()
        return True

    def _generate_correlation_id(self) -> str:
        return f"{self.prefix}-{int(time.time() * 1000)}"


def setup_logging(
    level: str = "INFO",
    service_name: str = "imagination-tools",
    enable_json: bool = True,
    enable_correlation: bool = True
) -> None:
    """
    Setup root logging for a service built on imagination-tools.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Service name for log identification
        enable_json: Whether to use JSON formatting
        enable_correlation: Whether to add correlation IDs

    Raises:
        ValueError: If level is not a known logging level
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if enable_json:
        formatter = JSONFormatter(service_name=service_name)
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    if enable_correlation:
        handler.addFilter(CorrelationFilter())

    logging.root.setLevel(numeric_level)
    logging.root.handlers.clear()
    logging.root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "component": "logger",
            "level": level.upper(),
            "json_enabled": enable_json,
            "correlation_enabled": enable_correlation
        }
    )


class MetricsLogger:
    """
    Emits one INFO record per client operation with timing and outcome.
    """

    def __init__(self, logger_name: str = "imagination_tools.metrics"):
        self.logger = logging.getLogger(logger_name)

    def log_publish(
        self,
        topic_id: str,
        duration_ms: float,
        success: bool,
        size_bytes: Optional[int] = None,
        message_id: Optional[str] = None,
        error: Optional[str] = None
    ) -> None:
        """
        Log Pub/Sub publish metrics.

        Args:
            topic_id: Topic the message was published to
            duration_ms: Publish duration including delivery confirmation
            success: Whether the publish was confirmed
            size_bytes: Serialized payload size
            message_id: Server-assigned message ID
            error: Error message if failed
        """
        self.logger.info(
            f"Pub/Sub publish: {topic_id}",
            extra={
                "metric_type": "pubsub_publish",
                "topic_id": topic_id,
                "duration_ms": round(duration_ms, 2),
                "success": success,
                "size_bytes": size_bytes,
                "message_id": message_id,
                "error": error
            }
        )

    def log_storage_operation(
        self,
        operation: str,
        bucket: str,
        name: str,
        duration_ms: float,
        success: bool,
        size_bytes: Optional[int] = None,
        schema_ref: Optional[str] = None,
        error: Optional[str] = None
    ) -> None:
        """
        Log storage operation metrics.

        Args:
            operation: Operation name (upload, download, upload_json, download_json)
            bucket: Bucket name
            name: Object name
            duration_ms: Operation duration in milliseconds
            success: Whether the operation succeeded
            size_bytes: Bytes written or read
            schema_ref: Schema reference for schema-tagged objects
            error: Error message if failed
        """
        self.logger.info(
            f"Storage operation: {operation}",
            extra={
                "metric_type": "storage_operation",
                "operation": operation,
                "bucket": bucket,
                "object_name": name,
                "duration_ms": round(duration_ms, 2),
                "success": success,
                "size_bytes": size_bytes,
                "schema_ref": schema_ref,
                "error": error
            }
        )
