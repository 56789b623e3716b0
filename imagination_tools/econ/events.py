"""
CloudEvents с Pub/Sub сообщениями внутри
Декодирует payload CloudEvent в пользовательские типы
"""

import logging
from typing import Any, Type, TypeVar

from cloudevents.abstract import CloudEvent
from pydantic import ValidationError

from ..codec import load_json
from ..interfaces import EventDecodeError, MessagePublishedData, PubsubMessage


logger = logging.getLogger(__name__)

T = TypeVar("T")


def event_to_message(event: CloudEvent) -> PubsubMessage:
    """
    Извлечь Pub/Sub сообщение из CloudEvent

    Args:
        event: CloudEvent с данными google.events.cloud.pubsub.v1.MessagePublishedData

    Returns:
        PubsubMessage с уже декодированным из base64 data

    Raises:
        EventDecodeError: Если данные события не похожи на MessagePublishedData
    """
    data = event.get_data()

    try:
        if isinstance(data, (bytes, bytearray, str)):
            wrapper = MessagePublishedData.model_validate_json(data)
        else:
            wrapper = MessagePublishedData.model_validate(data)
    except ValidationError as e:
        logger.error(
            f"Failed to parse pubsub message wrapper: {e}",
            extra={"component": "econ", "event_id": _event_id(event)}
        )
        raise EventDecodeError(f"failed to parse pubsub message wrapper: {e}") from e

    return wrapper.message


def event_to_struct(event: CloudEvent, target_type: Type[T]) -> T:
    """
    Декодировать JSON из Pub/Sub сообщения CloudEvent в target_type

    Usage:
        order = event_to_struct(event, Order)

    Args:
        event: CloudEvent от Pub/Sub push или Eventarc
        target_type: pydantic модель, dataclass или любой тип, понятный pydantic

    Returns:
        Экземпляр target_type

    Raises:
        EventDecodeError: Если обертка или JSON сообщения некорректны
    """
    message = event_to_message(event)

    try:
        return load_json(message.data, target_type)
    except ValidationError as e:
        logger.error(
            f"Failed to unmarshal message: {e}",
            extra={
                "component": "econ",
                "event_id": _event_id(event),
                "target_type": getattr(target_type, "__name__", str(target_type))
            }
        )
        raise EventDecodeError(f"failed to unmarshal message: {e}") from e


def _event_id(event: CloudEvent) -> Any:
    try:
        return event["id"]
    except KeyError:
        return None
