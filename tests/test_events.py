import base64
import json
from typing import Any, Dict

import pytest
from cloudevents.http import CloudEvent
from pydantic import BaseModel

from imagination_tools import EventDecodeError, event_to_message, event_to_struct


ATTRIBUTES = {
    "type": "google.cloud.pubsub.topic.v1.messagePublished",
    "source": "//pubsub.googleapis.com/projects/test-project/topics/orders",
}


class Order(BaseModel):
    id: int
    item: str
    quantity: int = 1


def make_event(raw: bytes, attributes: Dict[str, str] = None, as_bytes: bool = False) -> CloudEvent:
    data: Any = {
        "message": {
            "data": base64.b64encode(raw).decode("ascii"),
            "attributes": attributes or {},
            "messageId": "123",
        },
        "subscription": "projects/test-project/subscriptions/orders-push",
    }
    if as_bytes:
        data = json.dumps(data).encode("utf-8")
    return CloudEvent(ATTRIBUTES, data)


def test_event_to_struct_matches_direct_decode():
    raw = b'{"id": 5, "item": "lamp", "quantity": 2}'

    order = event_to_struct(make_event(raw), Order)

    assert order == Order.model_validate_json(raw)


def test_event_to_struct_with_json_bytes_data():
    raw = b'{"id": 9, "item": "desk"}'

    assert event_to_struct(make_event(raw, as_bytes=True), Order) == Order(id=9, item="desk")


def test_event_to_struct_plain_dict():
    raw = b'{"nested": {"a": [1, 2]}, "flag": true}'

    assert event_to_struct(make_event(raw), dict) == json.loads(raw)


def test_event_to_message_keeps_attributes():
    message = event_to_message(make_event(b"{}", attributes={"origin": "api"}))

    assert message.attributes == {"origin": "api"}
    assert message.data == b"{}"


def test_wrong_wrapper_shape():
    event = CloudEvent(ATTRIBUTES, {"unexpected": True})

    with pytest.raises(EventDecodeError, match="failed to parse pubsub message wrapper"):
        event_to_struct(event, Order)


def test_inner_data_is_not_json():
    with pytest.raises(EventDecodeError, match="failed to unmarshal message"):
        event_to_struct(make_event(b"not json"), Order)


def test_inner_data_does_not_fit_target_type():
    with pytest.raises(EventDecodeError, match="failed to unmarshal message"):
        event_to_struct(make_event(b'{"id": "abc"}'), Order)
