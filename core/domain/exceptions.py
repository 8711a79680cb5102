"""
Domain exceptions.

Every pipeline failure is raised as a subclass of GuestflowError. The
``retryable`` class attribute tells RetryPolicy whether another attempt
can succeed.
"""
from typing import Optional


class GuestflowError(Exception):
    """Base class for pipeline errors."""

    retryable: bool = False


class ValidationError(GuestflowError):
    """A guest record is missing a required field."""

    def __init__(self, record_id: str, missing: list[str]):
        self.record_id = record_id
        self.missing = list(missing)
        super().__init__(
            f"Record {record_id} is missing required fields: {', '.join(self.missing)}"
        )


class AttachmentFetchError(GuestflowError):
    """A supporting document could not be materialized locally."""

    retryable = True

    def __init__(self, ref: str, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"Failed to fetch attachment {ref}: {reason}")


class PortalError(GuestflowError):
    """Base class for failures raised by the portal automation engine."""

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        transition: Optional[str] = None,
        diagnostic: Optional[str] = None,
    ):
        self.record_id = record_id
        self.transition = transition
        self.diagnostic = diagnostic
        super().__init__(message)


class AuthenticationError(PortalError):
    """The portal rejected the supplied credentials. Never retried."""

    retryable = False


class AutomationStepError(PortalError):
    """A portal step after authentication failed."""

    retryable = True


class SubmissionTimeoutError(AutomationStepError):
    """A portal step or the submission acknowledgement did not finish in time."""


class EngineReuseError(GuestflowError):
    """A single-use automation engine was asked to submit twice."""


class PersistenceError(GuestflowError):
    """Writing back to the record store failed."""

    def __init__(self, record_id: str, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Failed to persist status for {record_id}: {reason}")


class RecordStoreUnavailableError(GuestflowError):
    """The record store could not be read."""

    retryable = True


class RunInProgressError(GuestflowError):
    """A run was requested while another run holds the run lock."""


__all__ = [
    "GuestflowError",
    "ValidationError",
    "AttachmentFetchError",
    "PortalError",
    "AuthenticationError",
    "AutomationStepError",
    "SubmissionTimeoutError",
    "EngineReuseError",
    "PersistenceError",
    "RecordStoreUnavailableError",
    "RunInProgressError",
]
