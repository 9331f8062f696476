"""Literal-based choice types shared by the engine and the HTTP boundary."""

from __future__ import annotations

from typing import Literal, Tuple

FileTypeName = Literal["model", "scan"]
FILE_TYPES: Tuple[str, ...] = ("model", "scan")

MetadataMissPolicyName = Literal["skip", "recreate"]
StorageBackendName = Literal["memory", "filesystem"]

# Upload form vocabularies. The engine treats these fields as free-form; only
# the HTTP layer restricts them.
ScanTypeName = Literal["MRI", "CT", "PET", "Ultrasound", "X-Ray"]
BodyPartName = Literal["brain", "chest", "abdomen", "spine", "pelvis", "extremities"]
ModelTypeName = Literal[
    "tumor_classifier",
    "segmentation",
    "detection",
    "regression",
    "classification",
]

# Id prefixes. Kept stable so ids already in durable tiers stay recognisable.
MODEL_ID_PREFIX = "model"
SCAN_ID_PREFIX = "scan"
ANNOTATION_ID_PREFIX = "annotation"
