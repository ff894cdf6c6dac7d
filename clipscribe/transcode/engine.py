"""
clipscribe.transcode.engine - FFmpeg engine and its shared handle.

The engine exposes named scratch slots (files inside a private working
directory) plus an exec call. Slots are overwritten on every run, so all
access goes through an EngineHandle, which loads the engine lazily and
lets one session at a time touch the slots.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import shutil
import tempfile
import threading
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Protocol

from clipscribe.exceptions import DependencyError, TranscodeError

logger = logging.getLogger(__name__)

FFMPEG_INSTALL_HINT = "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)"


class TranscodeEngine(Protocol):
    """Minimal interface of a media engine with named I/O slots."""

    async def load(self) -> None: ...

    async def write_file(self, name: str, data: bytes) -> None: ...

    async def exec(self, args: Sequence[str]) -> None: ...

    async def read_file(self, name: str) -> bytes: ...

    async def delete_file(self, name: str) -> None: ...

    def close(self) -> None: ...


class FFmpegEngine:
    """TranscodeEngine backed by the local ffmpeg binary."""

    def __init__(self, binary: str = "ffmpeg") -> None:
        self.binary = binary
        self._executable: str | None = None
        self._workdir: Path | None = None

    @property
    def loaded(self) -> bool:
        return self._workdir is not None

    async def load(self) -> None:
        """Resolve the ffmpeg executable and create the scratch directory.

        Raises:
            DependencyError: If ffmpeg cannot be found
        """
        executable = shutil.which(self.binary)
        if not executable:
            raise DependencyError("ffmpeg", f"'{self.binary}' not found in PATH", FFMPEG_INSTALL_HINT)

        self._executable = executable
        self._workdir = Path(tempfile.mkdtemp(prefix="clipscribe-"))
        logger.debug("FFmpeg engine loaded: %s (scratch %s)", executable, self._workdir)

    def _slot(self, name: str) -> Path:
        if self._workdir is None:
            raise TranscodeError("FFmpeg engine is not loaded")
        if Path(name).name != name:
            raise TranscodeError(f"Invalid slot name: {name!r}")
        return self._workdir / name

    async def write_file(self, name: str, data: bytes) -> None:
        await asyncio.to_thread(self._slot(name).write_bytes, data)

    async def exec(self, args: Sequence[str]) -> None:
        """Run ffmpeg with the scratch directory as working directory.

        Args:
            args: FFmpeg arguments, referring to slots by name

        Raises:
            TranscodeError: If ffmpeg exits with a non-zero status
        """
        if self._executable is None or self._workdir is None:
            raise TranscodeError("FFmpeg engine is not loaded")

        cmd = [self._executable, "-y", "-hide_banner", *args]
        logger.debug("Running: %s", " ".join(cmd))

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=self._workdir,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()

        if proc.returncode != 0:
            tail = stderr.decode(errors="replace").strip().splitlines()[-5:]
            raise TranscodeError(f"FFmpeg exited with status {proc.returncode}: {' '.join(tail)}")

    async def read_file(self, name: str) -> bytes:
        path = self._slot(name)
        if not path.exists():
            raise TranscodeError(f"FFmpeg produced no '{name}'")
        return await asyncio.to_thread(path.read_bytes)

    async def delete_file(self, name: str) -> None:
        self._slot(name).unlink(missing_ok=True)

    def close(self) -> None:
        """Remove the scratch directory."""
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None
            self._executable = None


class EngineHandle:
    """Owns one engine: loads it at most once and serializes slot access.

    One threading.Lock covers every thread and event loop using the handle.
    Async callers wait for it in a worker thread, not on their loop.
    """

    def __init__(self, engine: TranscodeEngine) -> None:
        self.engine = engine
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    @asynccontextmanager
    async def session(self) -> AsyncIterator[TranscodeEngine]:
        """Hold the engine exclusively, loading it first if needed.

        Raises:
            TranscodeError: If the engine fails to load
        """
        await asyncio.to_thread(self._lock.acquire)
        try:
            if not self._loaded:
                try:
                    await self.engine.load()
                except TranscodeError:
                    raise
                except Exception as e:
                    raise TranscodeError(f"Transcoding engine failed to load: {e}") from e
                self._loaded = True
            yield self.engine
        finally:
            self._lock.release()

    def close(self) -> None:
        """Release the engine's resources; the next session loads it again."""
        with self._lock:
            if self._loaded:
                self.engine.close()
                self._loaded = False


_shared_handle: EngineHandle | None = None
_shared_guard = threading.Lock()


def shared_engine(
    binary: str = "ffmpeg",
    factory: Callable[[str], TranscodeEngine] = FFmpegEngine,
) -> EngineHandle:
    """Return the process-wide engine handle, creating it on first use.

    The binary of the first call wins; later calls reuse the same handle,
    which is closed when the interpreter exits.
    """
    global _shared_handle
    if _shared_handle is None:
        with _shared_guard:
            if _shared_handle is None:
                _shared_handle = EngineHandle(factory(binary))
                atexit.register(_shared_handle.close)
    return _shared_handle
