"""Attachment stage entity."""
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AttachmentStage:
    """
    A supporting document materialized locally for one submission attempt.

    Owned by the attempt that created it; never shared across records.
    """

    record_id: str
    ref: str
    local_path: Path

    def exists(self) -> bool:
        return self.local_path.exists()
