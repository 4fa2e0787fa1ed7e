from collections.abc import Sequence

from .. import config
from .adapters import PsutilReaper, UnoconvListener
from .catalog import Catalog, build_catalog
from .commands import ParsedCommand, parse_command
from .interfaces import ConverterListener
from .runner import ConversionRunner
from .streaming import ConversionStream, convert_to_stream


class ConverterService:
    """Core entry point for front-ends (HTTP or others).

    Owns the option catalog, which must be built before any command is
    accepted; use ``create()`` to get a ready service. Commands are validated
    before a converter process is started, so InvalidOption never costs a
    subprocess.
    """

    def __init__(
        self,
        catalog: Catalog,
        runner: ConversionRunner,
        *,
        command: Sequence[str] = config.UNOCONV_COMMAND,
        listener: ConverterListener | None = None,
    ) -> None:
        self._catalog = catalog
        self._runner = runner
        self._command = list(command)
        self._listener = listener

    @classmethod
    async def create(
        cls,
        command: Sequence[str] = config.UNOCONV_COMMAND,
        *,
        start_listener: bool = config.START_LISTENER,
    ) -> "ConverterService":
        catalog = await build_catalog(command)
        runner = ConversionRunner(command, reaper=PsutilReaper())
        listener = UnoconvListener(command) if start_listener else None
        return cls(catalog, runner, command=command, listener=listener)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def help_text(self) -> str:
        return self._catalog.help_text

    def parse_command(self, command: str) -> ParsedCommand:
        return parse_command(self._catalog, command)

    async def convert(self, input_path: str, command: str) -> str:
        parsed = self.parse_command(command)
        return await self._runner.convert(input_path, parsed.args, parsed.options)

    async def convert_to_stream(self, input_path: str, command: str) -> ConversionStream:
        parsed = self.parse_command(command)
        return await convert_to_stream(input_path, parsed.args, parsed.options, command=self._command)

    def start(self) -> None:
        if self._listener is not None:
            self._listener.start()

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
