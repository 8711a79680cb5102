"""Fake remote session driver recording every call."""
import asyncio
from pathlib import Path
from typing import Optional

from core.application.interfaces import IRemoteSessionDriver
from core.domain.value_objects import PortalCredentials


class FakeSessionDriver(IRemoteSessionDriver):
    """
    Scriptable portal session.

    ``errors`` maps a method name to the exception it raises; methods in
    ``hang`` never return, to exercise step timeouts.
    """

    def __init__(
        self,
        errors: Optional[dict[str, Exception]] = None,
        hang: tuple[str, ...] = (),
        confirm: bool = True,
        field_errors: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.errors = dict(errors or {})
        self.hang = set(hang)
        self.confirm = confirm
        self.field_errors = dict(field_errors or {})
        self.calls: list[str] = []
        self.fields: dict[str, str] = {}
        self.context_id: Optional[str] = None
        self.attached: Optional[Path] = None
        self.diagnostics: list[str] = []
        self.closed = False

    async def _step(self, name: str) -> None:
        self.calls.append(name)
        if name in self.hang:
            await asyncio.Event().wait()
        if name in self.errors:
            raise self.errors[name]

    async def start(self) -> None:
        await self._step("start")

    async def authenticate(self, credentials: PortalCredentials) -> None:
        await self._step("authenticate")

    async def select_context(self, context_id: str) -> None:
        await self._step("select_context")
        self.context_id = context_id

    async def navigate_to_submission_surface(self) -> None:
        await self._step("navigate_to_submission_surface")

    async def set_field(self, name: str, value: str) -> None:
        await self._step("set_field")
        if name in self.field_errors:
            raise self.field_errors[name]
        self.fields[name] = value

    async def attach_file(self, local_path: Path) -> None:
        await self._step("attach_file")
        self.attached = local_path

    async def submit(self) -> None:
        await self._step("submit")

    async def await_confirmation(self, timeout: float) -> bool:
        await self._step("await_confirmation")
        return self.confirm

    async def capture_diagnostic(self, tag: str) -> Optional[str]:
        self.calls.append("capture_diagnostic")
        location = f"diagnostics/{tag}.png"
        self.diagnostics.append(location)
        return location

    async def close(self) -> None:
        self.calls.append("close")
        self.closed = True
