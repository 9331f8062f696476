from __future__ import annotations

from dataclasses import dataclass

from ..config import DEFAULT_MAX_MODEL_BYTES, DEFAULT_MAX_SCAN_BYTES
from ..contracts.records import ModelRecord


@dataclass(frozen=True)
class SizeLimits:
    """Per-tier payload ceilings in bytes (inclusive)."""

    max_model_bytes: int = DEFAULT_MAX_MODEL_BYTES
    max_scan_bytes: int = DEFAULT_MAX_SCAN_BYTES


@dataclass(frozen=True)
class AccessPolicy:
    """Checks applied to caller-supplied identities.

    Off by default: uploader/downloader names are recorded but not enforced.
    With ``enforce_private_models`` a private model can only be downloaded by
    its uploader.
    """

    enforce_private_models: bool = False

    def may_download_model(self, model: ModelRecord, downloader: str) -> bool:
        if not self.enforce_private_models or model.is_public:
            return True
        return downloader == model.uploader
