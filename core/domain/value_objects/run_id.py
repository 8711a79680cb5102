"""Run identifier value object."""

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class RunID:
    """Unique identifier for one orchestrator run."""

    value: UUID

    @classmethod
    def generate(cls) -> "RunID":
        """Generate a new RunID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
