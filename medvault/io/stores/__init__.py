from .store import RecordStore
from .memory_store import InMemoryRecordStore
from .filesystem_store import FileSystemRecordStore

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "FileSystemRecordStore",
]
