"""Storage and encoding for the Engine (Business Layer).

This package centralizes:
- how artifact payloads are encoded for storage (base64 text)
- how keyed records are stored (RecordStore abstraction; in-memory and filesystem)

Business Layer rule of thumb:
- use-cases depend on the RecordStore protocol, never on a concrete store.
"""

from .serialization import EncodedPayload, decode_payload, encode_payload
from .stores import FileSystemRecordStore, InMemoryRecordStore, RecordStore

__all__ = [
    "EncodedPayload",
    "decode_payload",
    "encode_payload",
    "FileSystemRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
]
