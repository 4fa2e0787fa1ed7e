import sys
from pathlib import Path

import pytest

from fake_unoconv import HELP
from unoconv_service.conversion import ConversionRunner, parse_help_text

FAKE_UNOCONV = [sys.executable, str(Path(__file__).with_name("fake_unoconv.py"))]


class RecordingReaper:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self._error = error

    def kill_orphans(self) -> list[int]:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return []


@pytest.fixture
def fake_command() -> list[str]:
    return list(FAKE_UNOCONV)


@pytest.fixture
def catalog():
    return parse_help_text(HELP)


@pytest.fixture
def reaper() -> RecordingReaper:
    return RecordingReaper()


@pytest.fixture
def runner(tmp_path, fake_command, reaper) -> ConversionRunner:
    return ConversionRunner(fake_command, tmp_dir=str(tmp_path / "out"), reaper=reaper, isolate_jobs=False)


@pytest.fixture
def make_input(tmp_path):
    def _make(name: str, content: bytes = b"document body") -> str:
        path = tmp_path / "in" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return str(path)

    return _make
