import logging
import subprocess
from collections.abc import Sequence

import psutil

from .. import config
from .interfaces import ConverterListener, ProcessReaper

logger = logging.getLogger(__name__)


class PsutilReaper(ProcessReaper):
    """Kills LibreOffice workers left behind by a failed conversion.

    A hung soffice.bin blocks every later unoconv call, so after a failure all
    processes running the worker binary are terminated, not only the ones the
    failed job started.
    """

    def __init__(self, command_path: str = config.SOFFICE_BIN) -> None:
        self._command_path = command_path

    def _matches(self, proc: psutil.Process) -> bool:
        exe = proc.info.get("exe")
        cmdline = proc.info.get("cmdline") or []
        return exe == self._command_path or (bool(cmdline) and cmdline[0] == self._command_path)

    def kill_orphans(self) -> list[int]:
        killed: list[int] = []
        for proc in psutil.process_iter(["pid", "exe", "cmdline"]):
            if not self._matches(proc):
                continue
            logger.info("PID: %s, COMMAND: %s", proc.pid, self._command_path)
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                # exited on its own between listing and kill
                continue
            logger.info("Process %s has been killed", proc.pid)
            killed.append(proc.pid)
        return killed


class UnoconvListener(ConverterListener):
    """Keeps a ``unoconv --listener`` office instance running for faster conversions."""

    def __init__(self, command: Sequence[str] = config.UNOCONV_COMMAND) -> None:
        self._command = list(command)
        self._proc: subprocess.Popen[bytes] | None = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> None:
        if self.running:
            return
        logger.info("# starting unoconv listener...")
        self._proc = subprocess.Popen(
            [*self._command, "--listener"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def stop(self, timeout: float = 10.0) -> None:
        if self._proc is None:
            logger.warning("# unoconv listener is not started")
            return
        logger.info("# stopping unoconv listener")
        if self._proc.poll() is None:
            self._proc.terminate()
            try:
                self._proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                self._proc.kill()
                self._proc.wait()
        self._proc = None
