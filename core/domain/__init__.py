"""Domain layer - pure domain models and errors."""

from .entities import AttachmentStage, GuestRecord
from .enums import RecordStatus, SubmissionState
from .value_objects import RunID

__all__ = [
    "AttachmentStage",
    "GuestRecord",
    "RecordStatus",
    "RunID",
    "SubmissionState",
]
