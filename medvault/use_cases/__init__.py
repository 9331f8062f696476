from .file_service import MedicalFileService
from .metadata_tracker import METADATA_MISS_POLICIES, MetadataTracker
from .policies import AccessPolicy, SizeLimits
from .factory import build_service

__all__ = [
    "MedicalFileService",
    "METADATA_MISS_POLICIES",
    "MetadataTracker",
    "AccessPolicy",
    "SizeLimits",
    "build_service",
]
