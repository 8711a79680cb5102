"""Domain enums."""
from .record_status import RecordStatus
from .submission_state import SubmissionState

__all__ = ["RecordStatus", "SubmissionState"]
