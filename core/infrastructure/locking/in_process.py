"""In-process run lock."""
import time
from collections.abc import Callable
from typing import Optional

from core.application.interfaces import IRunLock
from guestflow_sdk.logging import get_logger

logger = get_logger(__name__)


class InProcessRunLock(IRunLock):
    """
    Run lock owned by one process.

    Check-and-set happens without an intervening await, so it is atomic
    on the event loop. With a lease, a holder that never released is
    replaced once the lease has run out.
    """

    def __init__(
        self,
        lease_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lease_seconds = lease_seconds
        self._clock = clock
        self._holder: Optional[str] = None
        self._acquired_at = 0.0

    @property
    def holder(self) -> Optional[str]:
        return self._holder

    def _expired(self) -> bool:
        if self._lease_seconds is None:
            return False
        return self._clock() - self._acquired_at >= self._lease_seconds

    async def try_acquire(self, holder: str) -> bool:
        if self._holder is not None:
            if not self._expired():
                return False
            logger.warning(f"Run lock lease of {self._holder} expired, handing over to {holder}")
        self._holder = holder
        self._acquired_at = self._clock()
        return True

    async def release(self, holder: str) -> None:
        if self._holder == holder:
            self._holder = None

    async def is_held(self) -> bool:
        return self._holder is not None and not self._expired()
