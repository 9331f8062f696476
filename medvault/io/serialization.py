"""Payload encoding utilities.

Artifact payloads are opaque bytes. Records keep them in a text-safe form
(standard base64) so every record type serializes cleanly to JSON:

    payload_bytes --encode_payload--> "<base64 text>" --decode_payload--> payload_bytes

This module is Business Layer safe: it has no backend dependencies.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class EncodedPayload:
    text: str
    size: int
    sha256: str


def encode_payload(payload: Union[bytes, bytearray, memoryview]) -> EncodedPayload:
    """Encode raw bytes for storage and report their exact byte size."""

    raw = bytes(payload)
    return EncodedPayload(
        text=base64.b64encode(raw).decode("ascii"),
        size=len(raw),
        sha256=hashlib.sha256(raw).hexdigest(),
    )


def decode_payload(text: str) -> bytes:
    """Decode a stored payload. Raises ``ValueError`` on malformed input."""

    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError("Payload is not valid base64 text") from e
