from dataclasses import dataclass, field
from typing import Protocol


class ProcessReaper(Protocol):
    def kill_orphans(self) -> list[int]:
        """Terminate leftover converter worker processes and return their pids.
        This is a blocking call; callers should offload to threads if needed.
        """


class ConverterListener(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


@dataclass
class ConversionJob:
    job_id: str
    input_path: str
    output_path: str
    timeout: float
    # Set only for html output, which unoconv writes as a directory of files.
    output_dir: str | None = None
    errors: bytearray = field(default_factory=bytearray)

    @property
    def is_bundle(self) -> bool:
        return self.output_dir is not None

    @property
    def archive_path(self) -> str:
        return f"{self.output_dir}.zip"
