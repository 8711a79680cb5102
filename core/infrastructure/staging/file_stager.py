"""
File Stager.

Materializes a guest's supporting document under a per-record directory
for the duration of one submission attempt.
"""
import asyncio
import re
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

import aiohttp

from core.domain import AttachmentStage
from core.domain.exceptions import AttachmentFetchError
from guestflow_sdk.logging import get_logger
from orchestration.retry import RetryPolicy

logger = get_logger(__name__)

DEFAULT_FILENAME = "passport_document"
CHUNK_SIZE = 64 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def _safe_name(value: str) -> str:
    return _UNSAFE_CHARS.sub("_", value).strip("._") or DEFAULT_FILENAME


def filename_from_url(url: str) -> str:
    """Last path segment of url, sanitized; ``passport_document`` when empty."""
    name = unquote(urlparse(url).path.rsplit("/", 1)[-1])
    return _safe_name(name) if name else DEFAULT_FILENAME


class FileStager:
    """
    Stages attachments into ``<download_dir>/<record_id>/``.

    A failed fetch never raises: stage() returns None and the submission
    goes ahead without the document. Files are removed by release() after
    a successful submission and kept after a failed one.
    """

    def __init__(
        self,
        download_dir: Union[Path, str],
        retry_policy: Optional[RetryPolicy] = None,
        timeout_seconds: float = 60.0,
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        """
        Initialize stager.

        Args:
            download_dir: Root of the ephemeral staging area
            retry_policy: Short retry around remote downloads
            timeout_seconds: Total timeout for one download
            session_factory: aiohttp session factory
        """
        self._root = Path(download_dir)
        self._retry = retry_policy or RetryPolicy(max_attempts=2, base_delay_seconds=1.0)
        self._timeout_seconds = timeout_seconds
        self._session_factory = session_factory

    @property
    def root(self) -> Path:
        return self._root

    def record_dir(self, record_id: str) -> Path:
        return self._root / _safe_name(record_id)

    async def stage(self, record_id: str, ref: Optional[str]) -> Optional[AttachmentStage]:
        """
        Fetch ref into the record's staging directory.

        Args:
            record_id: Owning record; namespaces the staged file
            ref: Remote URL, ``file://`` URI or local path

        Returns:
            AttachmentStage, or None if ref is empty or the fetch failed
        """
        ref = (ref or "").strip()
        if not ref:
            return None

        target_dir = self.record_dir(record_id)
        scheme = urlparse(ref).scheme.lower()
        try:
            if scheme in ("http", "https"):
                logger.info(f"Downloading attachment for {record_id}: {ref}")
                local_path = await self._retry.run(lambda: self._download(ref, target_dir))
            else:
                source = Path(unquote(urlparse(ref).path)) if scheme == "file" else Path(ref)
                local_path = await self._copy_local(ref, source.expanduser(), target_dir)
        except AttachmentFetchError as exc:
            logger.warning(f"{exc}. Continuing without attachment")
            return None

        logger.info(f"✓ Staged attachment: {local_path}")
        return AttachmentStage(record_id=record_id, ref=ref, local_path=local_path)

    async def release(self, stage: Union[AttachmentStage, Path, str, None]) -> None:
        """
        Delete a staged file. Idempotent; a missing file is not an error.

        The record's directory is removed once empty.
        """
        if stage is None:
            return
        path = stage.local_path if isinstance(stage, AttachmentStage) else Path(stage)
        try:
            path.unlink(missing_ok=True)
            parent = path.parent
            if parent != self._root and parent.is_dir() and not any(parent.iterdir()):
                parent.rmdir()
        except OSError as exc:
            logger.error(f"Error cleaning up file {path}: {exc}")
            return
        logger.info(f"Cleaned up file: {path}")

    async def purge(self, record_id: str) -> int:
        """
        Operator cleanup: remove every file retained for a record.

        Returns:
            Number of files removed
        """
        target_dir = self.record_dir(record_id)
        if not target_dir.exists():
            return 0
        removed = sum(1 for item in target_dir.rglob("*") if item.is_file())
        await asyncio.to_thread(shutil.rmtree, target_dir)
        logger.info(f"Purged {removed} retained file(s) for {record_id}")
        return removed

    async def _download(self, url: str, target_dir: Path) -> Path:
        target = target_dir / filename_from_url(url)
        partial = target.with_name(target.name + ".part")
        timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            async with self._session_factory(timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise AttachmentFetchError(url, f"HTTP {response.status}")
                    with partial.open("wb") as handle:
                        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                            handle.write(chunk)
            partial.replace(target)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            _discard(partial)
            raise AttachmentFetchError(url, str(exc) or type(exc).__name__) from exc
        except AttachmentFetchError:
            _discard(partial)
            raise
        return target

    async def _copy_local(self, ref: str, source: Path, target_dir: Path) -> Path:
        if not source.is_file():
            raise AttachmentFetchError(ref, "file not found")
        target = target_dir / _safe_name(source.name)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.copy2, source, target)
        except OSError as exc:
            raise AttachmentFetchError(ref, str(exc)) from exc
        return target


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(f"Could not remove partial download {path}: {exc}")
