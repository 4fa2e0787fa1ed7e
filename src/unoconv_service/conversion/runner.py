import asyncio
import logging
import shutil
import uuid
import zipfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from .. import config
from ..errors import ConversionFailed, ConversionTimedOut
from .interfaces import ConversionJob, ProcessReaper

logger = logging.getLogger(__name__)

STDERR_DRAIN_SEC = 2.0


async def _collect(stream: asyncio.StreamReader, sink: bytearray) -> None:
    while chunk := await stream.read(65536):
        sink.extend(chunk)


def resolve_timeout(options: Mapping[str, object], default: float) -> float:
    value = options.get("timeout")
    if isinstance(value, bool) or value is None:
        return default
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return seconds if seconds > 0 else default


def archive_directory(directory: str, archive_path: str) -> None:
    """Zip the contents of ``directory`` with paths relative to it."""
    root = Path(directory)
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for path in sorted(root.rglob("*")):
            if path.is_file():
                zf.write(path, path.relative_to(root).as_posix())


class ConversionRunner:
    """Runs unoconv for one parsed command and waits for its output file.

    Each call spawns an independent child process guarded by its own timer;
    there is no limit on concurrent conversions.
    """

    def __init__(
        self,
        command: Sequence[str] = config.UNOCONV_COMMAND,
        *,
        tmp_dir: str = config.TMP_DIR,
        default_timeout: float = config.CONVERSION_TIMEOUT_SEC,
        reaper: ProcessReaper | None = None,
        isolate_jobs: bool = config.ISOLATE_JOBS,
    ) -> None:
        self._command = list(command)
        self._tmp_dir = Path(tmp_dir)
        self._default_timeout = default_timeout
        self._reaper = reaper
        self._isolate_jobs = isolate_jobs

    def prepare_job(self, input_path: str, options: Mapping[str, object]) -> ConversionJob:
        job_id = uuid.uuid4().hex
        base = self._tmp_dir
        if self._isolate_jobs:
            base = base / f"unoconv-{job_id}"
        fmt = str(options.get("format") or "pdf")
        input_stem = Path(input_path).stem
        output = options.get("output")
        output_stem = Path(output).stem if isinstance(output, str) and output else input_stem

        output_dir = None
        if fmt == "html":
            output_dir = base / input_stem
            output_path = output_dir / f"{output_stem}.{fmt}"
        else:
            output_path = base / f"{output_stem}.{fmt}"

        return ConversionJob(
            job_id=job_id,
            input_path=input_path,
            output_path=str(output_path),
            timeout=resolve_timeout(options, self._default_timeout),
            output_dir=str(output_dir) if output_dir is not None else None,
        )

    async def convert(
        self, input_path: str, args: Sequence[str], options: Mapping[str, object]
    ) -> str:
        """Convert ``input_path`` and return the result file path.

        Html output is collected into a zip archive next to its directory and
        the archive path is returned instead. If the archive cannot be written
        the directory is kept and its path is returned.
        """
        job = self.prepare_job(input_path, options)
        try:
            return await self._run(job, args)
        except Exception:
            await self._reap()
            raise

    async def _run(self, job: ConversionJob, args: Sequence[str]) -> str:
        try:
            Path(job.output_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConversionFailed(f"cannot create output directory: {e}") from e

        argv = [*self._command, *args, "--output", job.output_path, job.input_path]
        logger.info("[%s] %s", job.job_id, " ".join(argv))
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ConversionFailed(f"cannot run converter: {e}") from e

        loop = asyncio.get_running_loop()
        guard = loop.call_later(job.timeout, self._kill, proc, job)
        reader = asyncio.create_task(_collect(proc.stderr, job.errors))  # type: ignore[arg-type]
        try:
            await proc.wait()
        finally:
            guard.cancel()
        # A spawned soffice may inherit stderr and keep it open after unoconv exits.
        try:
            await asyncio.wait_for(reader, STDERR_DRAIN_SEC)
        except asyncio.TimeoutError:
            logger.warning("[%s] converter stderr still open after exit", job.job_id)

        if job.errors:
            raise ConversionFailed(job.errors.decode("utf-8", errors="replace"))
        if not Path(job.output_path).exists():
            raise ConversionTimedOut(job.timeout)
        if job.is_bundle:
            return await self._bundle(job)
        return job.output_path

    @staticmethod
    def _kill(proc: asyncio.subprocess.Process, job: ConversionJob) -> None:
        if proc.returncode is None:
            logger.warning("[%s] conversion exceeded %gs, killing pid %s", job.job_id, job.timeout, proc.pid)
            try:
                proc.kill()
            except ProcessLookupError:
                pass

    async def _bundle(self, job: ConversionJob) -> str:
        output_dir = str(job.output_dir)
        try:
            await asyncio.to_thread(archive_directory, output_dir, job.archive_path)
        except Exception:
            logger.exception("[%s] failed to archive %s, keeping the directory", job.job_id, output_dir)
            try:
                Path(job.archive_path).unlink(missing_ok=True)
            except OSError:
                logger.exception("[%s] failed to remove partial archive %s", job.job_id, job.archive_path)
            return output_dir
        try:
            await asyncio.to_thread(shutil.rmtree, output_dir)
            logger.info("'%s' removed", output_dir)
        except OSError:
            logger.exception("[%s] failed to remove %s", job.job_id, output_dir)
        return job.archive_path

    async def _reap(self) -> None:
        if self._reaper is None:
            return
        try:
            await asyncio.to_thread(self._reaper.kill_orphans)
        except Exception:
            logger.exception("failed to reap converter worker processes")
