"""Typed failures raised by the Business Layer.

Every engine operation either returns its success value or raises one of the
exceptions below. They carry a stable ``kind`` tag and a JSON-friendly
``to_dict()`` so boundary layers (HTTP, CLI) can translate them without
inspecting messages.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MedVaultError(Exception):
    """Base class for all classified engine failures."""

    kind: str = "MedVaultError"

    def data(self) -> Any:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "data": self.data()}


class RecordNotFoundError(MedVaultError):
    """A record that must exist for the operation is absent."""

    kind = "FileNotFound"

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"file not found: {file_id}")

    def data(self) -> Any:
        return self.file_id


class InvalidFileTypeError(MedVaultError):
    kind = "InvalidFileType"

    def __init__(self, file_type: str):
        self.file_type = file_type
        super().__init__(f"invalid file type: {file_type}")

    def data(self) -> Any:
        return self.file_type


class FileTooLargeError(MedVaultError):
    """Upload payload exceeds the ceiling of its tier."""

    kind = "FileTooLarge"

    def __init__(self, size: int, limit: Optional[int] = None):
        self.size = int(size)
        self.limit = limit
        super().__init__(f"file too large: {self.size} bytes")

    def data(self) -> Any:
        return self.size


class UnauthorizedError(MedVaultError):
    kind = "Unauthorized"

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"unauthorized access to file: {file_id}")

    def data(self) -> Any:
        return self.file_id


class InvalidAnnotationError(MedVaultError):
    """Reserved for annotation content validation (not raised yet)."""

    kind = "InvalidAnnotation"

    def __init__(self) -> None:
        super().__init__("invalid annotation data")
