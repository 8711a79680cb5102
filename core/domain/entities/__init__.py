"""Domain entities."""
from .attachment import AttachmentStage
from .guest import DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME, REQUIRED_FIELDS, GuestRecord

__all__ = [
    "AttachmentStage",
    "DEFAULT_CHECK_IN_TIME",
    "DEFAULT_CHECK_OUT_TIME",
    "REQUIRED_FIELDS",
    "GuestRecord",
]
