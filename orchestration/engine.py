"""PortalAutomationEngine - drives one portal session through the guest submission steps."""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.application.interfaces import IRemoteSessionDriver
from core.domain import GuestRecord, SubmissionState
from core.domain.exceptions import (
    AuthenticationError,
    AutomationStepError,
    EngineReuseError,
    PortalError,
    SubmissionTimeoutError,
)
from core.domain.value_objects import PortalCredentials
from guestflow_sdk.logging import get_logger
from guestflow_sdk.utils.datetime import utc_now

from .models import SubmissionAttempt, SubmissionResult

# Extra time granted on top of the driver's own confirmation wait.
CONFIRMATION_GRACE_SECONDS = 5.0

DriverFactory = Callable[[], IRemoteSessionDriver]


class PortalAutomationEngine:
    """
    Single-use state machine for one submission attempt.

    Disconnected -> Authenticated -> ContextSelected -> FormReady
    -> Submitted -> Confirmed | Rejected

    The engine never retries. Authentication failures surface as
    AuthenticationError; every later failure is an AutomationStepError
    (SubmissionTimeoutError for timeouts and missing acknowledgements).
    A diagnostic snapshot is captured before any error leaves the engine.
    """

    def __init__(
        self,
        driver: IRemoteSessionDriver,
        credentials: PortalCredentials,
        context_id: str,
        step_timeout: float = 90.0,
        confirmation_timeout: float = 15.0,
    ) -> None:
        """
        Initialize engine.

        Args:
            driver: Fresh, unopened remote session driver
            credentials: Portal login credentials
            context_id: Default operational context (managed property)
            step_timeout: Upper bound in seconds for each remote step
            confirmation_timeout: Wait in seconds for the submission acknowledgement
        """
        self._driver = driver
        self._credentials = credentials
        self._context_id = context_id
        self._step_timeout = step_timeout
        self._confirmation_timeout = confirmation_timeout
        self._used = False
        self._attempt: Optional[SubmissionAttempt] = None
        self._logger = get_logger("orchestration.engine")

    @property
    def attempt(self) -> Optional[SubmissionAttempt]:
        return self._attempt

    async def submit(
        self, record: GuestRecord, attachment: Optional[Path] = None
    ) -> SubmissionResult:
        """
        Submit one guest record through a fresh portal session.

        Args:
            record: Guest record to submit
            attachment: Staged local document, if any

        Returns:
            SubmissionResult in the Confirmed state

        Raises:
            AuthenticationError: Session could not be established or login was rejected
            AutomationStepError: Any later step failed
            EngineReuseError: The engine was already used
        """
        if self._used:
            raise EngineReuseError("PortalAutomationEngine instances are single-use")
        self._used = True

        attempt = SubmissionAttempt(record_id=record.id, started_at=utc_now())
        self._attempt = attempt
        self._logger.info(f"Submitting {record.full_name} ({record.id}) to portal")

        try:
            async with self._transition(attempt, SubmissionState.AUTHENTICATED, AuthenticationError):
                await self._bounded(self._driver.start())
                await self._bounded(self._driver.authenticate(self._credentials))

            context_id = record.property_number or self._context_id
            async with self._transition(attempt, SubmissionState.CONTEXT_SELECTED, AutomationStepError):
                await self._bounded(self._driver.select_context(context_id))

            async with self._transition(attempt, SubmissionState.FORM_READY, AutomationStepError):
                await self._bounded(self._driver.navigate_to_submission_surface())

            async with self._transition(attempt, SubmissionState.SUBMITTED, AutomationStepError):
                await self._fill_form(record)
                attempt.attachment_submitted = await self._attach(record, attachment)
                await self._bounded(self._driver.submit())

            await self._await_confirmation(attempt)
        finally:
            await self._close_driver()

        self._logger.info(f"✓ Portal confirmed submission for {record.full_name} ({record.id})")
        return SubmissionResult(
            record_id=record.id,
            state=attempt.state,
            attachment_submitted=attempt.attachment_submitted,
        )

    @asynccontextmanager
    async def _transition(
        self,
        attempt: SubmissionAttempt,
        target: SubmissionState,
        error_cls: type[PortalError],
    ) -> AsyncIterator[None]:
        """Run one transition; advance on success, capture and classify on failure."""
        transition = f"{attempt.state.value}->{target.value}"
        try:
            yield
        except asyncio.CancelledError:
            raise
        except PortalError as exc:
            await self._annotate(attempt, transition, exc)
            raise
        except asyncio.TimeoutError as exc:
            cls = error_cls if error_cls is AuthenticationError else SubmissionTimeoutError
            error = cls(f"Timed out after {self._step_timeout:.0f}s during {transition}")
            await self._annotate(attempt, transition, error)
            raise error from exc
        except Exception as exc:
            error = error_cls(f"{transition} failed: {exc}")
            await self._annotate(attempt, transition, error)
            raise error from exc
        attempt.advance(target)

    async def _fill_form(self, record: GuestRecord) -> None:
        for name, value in record.portal_fields():
            try:
                await self._bounded(self._driver.set_field(name, value))
            except asyncio.TimeoutError as exc:
                raise SubmissionTimeoutError(f"Timed out setting field {name}") from exc
            except Exception as exc:
                raise AutomationStepError(f"Failed to set field {name}: {exc}") from exc
        self._logger.info(f"✓ Guest form filled for {record.id}")

    async def _attach(self, record: GuestRecord, attachment: Optional[Path]) -> bool:
        """Attach the staged document. Failures are logged and never fatal."""
        if attachment is None:
            self._logger.info(f"No attachment staged for {record.id}, submitting without it")
            return False
        if not attachment.exists():
            self._logger.warning(f"Staged attachment not found: {attachment}")
            return False
        try:
            await self._bounded(self._driver.attach_file(attachment))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._logger.warning(
                f"Attachment upload failed for {record.id}, continuing without it: {exc}"
            )
            return False
        return True

    async def _await_confirmation(self, attempt: SubmissionAttempt) -> None:
        transition = f"{attempt.state.value}->{SubmissionState.CONFIRMED.value}"
        try:
            confirmed = await asyncio.wait_for(
                self._driver.await_confirmation(self._confirmation_timeout),
                timeout=self._confirmation_timeout + CONFIRMATION_GRACE_SECONDS,
            )
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            confirmed = False
        except Exception as exc:
            attempt.advance(SubmissionState.REJECTED)
            error = AutomationStepError(f"Waiting for confirmation failed: {exc}")
            await self._annotate(attempt, transition, error)
            raise error from exc

        if not confirmed:
            attempt.advance(SubmissionState.REJECTED)
            error = SubmissionTimeoutError(
                f"No acknowledgement within {self._confirmation_timeout:.0f}s"
            )
            await self._annotate(attempt, transition, error)
            raise error
        attempt.advance(SubmissionState.CONFIRMED)

    async def _annotate(
        self, attempt: SubmissionAttempt, transition: str, error: PortalError
    ) -> None:
        """Tag the error with the record and transition and attach a diagnostic snapshot."""
        error.record_id = attempt.record_id
        if error.transition is None:
            error.transition = transition
        if error.diagnostic is None:
            tag = f"{attempt.record_id}-{transition.replace('->', '-to-')}"
            error.diagnostic = await self._capture(tag)
            if error.diagnostic:
                attempt.diagnostics.append(error.diagnostic)
        self._logger.error(f"Portal step {transition} failed for {attempt.record_id}: {error}")

    async def _capture(self, tag: str) -> Optional[str]:
        try:
            return await self._bounded(self._driver.capture_diagnostic(tag))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._logger.warning(f"Could not capture diagnostic {tag}: {exc}")
            return None

    async def _close_driver(self) -> None:
        try:
            await self._bounded(self._driver.close())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._logger.warning(f"Error closing portal session: {exc}")

    async def _bounded(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self._step_timeout)


@dataclass
class PortalEngineFactory:
    """Builds a fresh engine, with a fresh driver session, for every attempt."""

    driver_factory: DriverFactory
    credentials: PortalCredentials
    context_id: str
    step_timeout: float = 90.0
    confirmation_timeout: float = 15.0

    def __call__(self) -> PortalAutomationEngine:
        return PortalAutomationEngine(
            driver=self.driver_factory(),
            credentials=self.credentials,
            context_id=self.context_id,
            step_timeout=self.step_timeout,
            confirmation_timeout=self.confirmation_timeout,
        )
