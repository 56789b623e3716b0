"""
High-level clients for Google Cloud Pub/Sub and Cloud Storage
"""

from .pubsub import PubSubClient
from .storage import GCSStorageClient

__all__ = [
    "PubSubClient",
    "GCSStorageClient"
]
