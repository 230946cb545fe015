"""
Adapters layer - External integrations (record store over HTTP).
"""

from .mock_record_store import MockRecordStore
from .record_store import RecordStoreClient

__all__ = ["MockRecordStore", "RecordStoreClient"]
