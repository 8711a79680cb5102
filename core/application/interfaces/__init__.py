"""Application layer interfaces."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from core.domain import GuestRecord, RecordStatus
from core.domain.value_objects import PortalCredentials

if TYPE_CHECKING:
    from orchestration.models import RunReport


class ISheetValuesClient(ABC):
    """
    Interface for a tabular values API (A1 ranges in, rows of strings out).

    Implementations raise SheetsApiError on any transport or API failure.
    """

    @abstractmethod
    async def get_values(self, range_: str) -> list[list[str]]:
        """
        Read a range.

        Args:
            range_: A1 notation range, e.g. ``Guests!A:Z``

        Returns:
            Rows of cell values; trailing empty cells may be omitted
        """
        pass

    @abstractmethod
    async def batch_update(self, data: list[dict[str, Any]]) -> None:
        """
        Write several ranges in one request.

        Args:
            data: List of ``{"range": ..., "values": [[...]]}`` dicts
        """
        pass


class IRecordStore(ABC):
    """
    Interface for the external record store holding guest submissions.

    The orchestrator is assumed to be the only writer of status columns.
    """

    @abstractmethod
    async def list_pending(self) -> list[GuestRecord]:
        """
        Return valid records with status New, oldest submission first.

        Raises:
            RecordStoreUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def get_record(self, record_id: str) -> Optional[GuestRecord]:
        """
        Read one record by id, whatever its status.

        Returns:
            GuestRecord, or None if no such record exists

        Raises:
            RecordStoreUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def update_status(
        self, record_id: str, status: RecordStatus, notes: str = ""
    ) -> None:
        """
        Write a status, notes and last-processed timestamp for one record.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    async def update_sync_flags(
        self,
        record_id: str,
        portal_synced: Optional[bool] = None,
        downstream_synced: Optional[bool] = None,
    ) -> None:
        """
        Write the downstream-sync flags, when the store keeps them.

        Default implementation - stores without sync columns do nothing.
        """
        pass


class IRemoteSessionDriver(ABC):
    """
    Interface for one interactive session with the remote portal.

    How a named field is located on the page is left to the implementation.
    A driver instance serves exactly one submission attempt.
    """

    @abstractmethod
    async def start(self) -> None:
        """Open the underlying session (browser, connection, ...)."""
        pass

    @abstractmethod
    async def authenticate(self, credentials: PortalCredentials) -> None:
        """Log in. Raises on rejected credentials."""
        pass

    @abstractmethod
    async def select_context(self, context_id: str) -> None:
        """Switch to the operational context (managed property) the guest belongs to."""
        pass

    @abstractmethod
    async def navigate_to_submission_surface(self) -> None:
        """Open the guest submission form."""
        pass

    @abstractmethod
    async def set_field(self, name: str, value: str) -> None:
        """Write one logical form field."""
        pass

    @abstractmethod
    async def attach_file(self, local_path: Path) -> None:
        """Attach a supporting document to the open form."""
        pass

    @abstractmethod
    async def submit(self) -> None:
        """Trigger submission of the open form."""
        pass

    @abstractmethod
    async def await_confirmation(self, timeout: float) -> bool:
        """
        Wait for the portal's acknowledgement.

        Args:
            timeout: Maximum wait in seconds

        Returns:
            True if acknowledged within the timeout, False otherwise
        """
        pass

    @abstractmethod
    async def capture_diagnostic(self, tag: str) -> Optional[str]:
        """
        Snapshot the current session state.

        Returns:
            Location of the stored artifact, or None if nothing was captured
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the session. Safe to call more than once."""
        pass


class IRunLock(ABC):
    """Single-flight lock guarding orchestrator runs."""

    @abstractmethod
    async def try_acquire(self, holder: str) -> bool:
        """
        Acquire the lock without waiting.

        Args:
            holder: Identifier of the run taking the lock

        Returns:
            True if acquired, False if another holder owns it
        """
        pass

    @abstractmethod
    async def release(self, holder: str) -> None:
        """Release the lock if held by holder."""
        pass

    @abstractmethod
    async def is_held(self) -> bool:
        """Return True if a live holder owns the lock."""
        pass


class IReportSink(ABC):
    """Destination for finished run reports."""

    @abstractmethod
    async def save(self, report: "RunReport") -> Optional[str]:
        """
        Persist a run report.

        Returns:
            Location of the stored report, if the sink has one
        """
        pass


__all__ = [
    "IRecordStore",
    "IRemoteSessionDriver",
    "IReportSink",
    "IRunLock",
    "ISheetValuesClient",
]
