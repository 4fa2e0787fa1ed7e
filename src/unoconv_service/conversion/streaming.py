import asyncio
import codecs
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from pathlib import Path

from .. import config
from ..errors import ConversionError, InvalidOption
from .runner import STDERR_DRAIN_SEC

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ConversionStream:
    """Converter standard output, delivered while the conversion runs.

    Iterate with ``async for``. Chunks are ``bytes``, or ``str`` for text
    output. When the converter exits with a non-zero status or wrote to
    standard error, ConversionError is raised after the data already produced
    has been yielded, so consumers must expect an error after partial output.
    The input file is deleted as soon as the converter exits, whether or not
    the output was read.
    """

    def __init__(self, proc: asyncio.subprocess.Process, input_path: str, *, text: bool = False) -> None:
        self._proc = proc
        self._input_path = input_path
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace") if text else None
        self._errors = bytearray()
        self._error: ConversionError | None = None
        self._stderr_task = asyncio.create_task(self._drain_stderr(proc.stderr))  # type: ignore[arg-type]
        self._watcher = asyncio.create_task(self._watch())
        self._consumed = False

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def is_text(self) -> bool:
        return self._decoder is not None

    async def _drain_stderr(self, stream: asyncio.StreamReader) -> None:
        while chunk := await stream.read(CHUNK_SIZE):
            self._errors.extend(chunk)

    async def _watch(self) -> int:
        returncode = await self._proc.wait()
        # A spawned soffice may inherit stderr and keep it open after unoconv exits.
        try:
            await asyncio.wait_for(self._stderr_task, STDERR_DRAIN_SEC)
        except asyncio.TimeoutError:
            logger.warning("converter stderr still open after exit (pid %s)", self.pid)
        Path(self._input_path).unlink(missing_ok=True)
        if returncode != 0 or self._errors:
            stderr = self._errors.decode("utf-8", errors="replace")
            logger.error("streamed conversion failed (pid %s, status %s): %s", self.pid, returncode, stderr.strip())
            self._error = ConversionError(stderr, returncode)
        return returncode

    async def wait(self) -> int:
        """Wait for the converter to exit and return its status."""
        return await self._watcher

    def __aiter__(self) -> AsyncIterator[bytes | str]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes | str]:
        if self._consumed:
            raise RuntimeError("conversion stream can only be read once")
        self._consumed = True
        stdout: asyncio.StreamReader = self._proc.stdout  # type: ignore[assignment]
        while chunk := await stdout.read(CHUNK_SIZE):
            if self._decoder is None:
                yield chunk
            else:
                text = self._decoder.decode(chunk)
                if text:
                    yield text
        if self._decoder is not None:
            tail = self._decoder.decode(b"", final=True)
            if tail:
                yield tail
        await self._watcher
        if self._error is not None:
            raise self._error

    async def read(self) -> bytes | str:
        """Collect the whole output."""
        parts = [chunk async for chunk in self]
        if self.is_text:
            return "".join(parts)  # type: ignore[arg-type]
        return b"".join(parts)  # type: ignore[arg-type]

    async def aclose(self) -> None:
        """Stop the converter if it is still running and remove the input."""
        if self._proc.returncode is None:
            try:
                self._proc.kill()
            except ProcessLookupError:
                pass
        await self._watcher
        Path(self._input_path).unlink(missing_ok=True)


async def convert_to_stream(
    input_path: str,
    args: Sequence[str],
    options: Mapping[str, object],
    *,
    command: Sequence[str] = config.UNOCONV_COMMAND,
) -> ConversionStream:
    """Start a conversion that writes to standard output and return its stream.

    Only waits for the process to start. Html output is a directory of files
    and cannot be streamed.
    """
    fmt = options.get("format")
    if fmt == "html":
        raise InvalidOption("format", "html output cannot be streamed")
    argv = [*command, *args, "--stdout", input_path]
    logger.info("%s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ConversionError(f"cannot run converter: {e}") from e
    return ConversionStream(proc, input_path, text=fmt == "txt")
