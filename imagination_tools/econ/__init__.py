"""
Helpers for CloudEvents that wrap Google Cloud Pub/Sub messages
"""

from .events import event_to_message, event_to_struct

__all__ = [
    "event_to_message",
    "event_to_struct"
]
