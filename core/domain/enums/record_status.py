"""
Record Status Enum.

Lifecycle values stored in the record store's Status column.
"""
from enum import Enum


class RecordStatus(str, Enum):
    """Guest record lifecycle status."""

    NEW = "New"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"
    BATCHED = "Batched"

    @classmethod
    def parse(cls, value: str) -> "RecordStatus":
        """
        Parse a status cell.

        An empty cell reads as New. Matching is case-insensitive.

        Raises:
            ValueError: If the value is not a known status
        """
        text = (value or "").strip()
        if not text:
            return cls.NEW
        for status in cls:
            if status.value.lower() == text.lower():
                return status
        raise ValueError(f"Unknown record status: {value!r}")

    def can_transition_to(self, target: "RecordStatus") -> bool:
        """Return True if moving from this status to target is allowed."""
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS = {
    RecordStatus.NEW: frozenset({RecordStatus.PROCESSING}),
    RecordStatus.PROCESSING: frozenset({RecordStatus.COMPLETED, RecordStatus.FAILED}),
    RecordStatus.COMPLETED: frozenset({RecordStatus.BATCHED}),
    RecordStatus.FAILED: frozenset(),
    RecordStatus.BATCHED: frozenset(),
}
