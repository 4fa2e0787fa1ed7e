import argparse
import asyncio
import logging
import sys

from . import config
from .conversion import ConverterService
from .errors import ConverterError

logger = logging.getLogger(__name__)


async def _convert(service: ConverterService, input_path: str, command: str, stream: bool) -> None:
    if not stream:
        print(await service.convert(input_path, command))
        return
    out = sys.stdout.buffer
    conversion = await service.convert_to_stream(input_path, command)
    async for chunk in conversion:
        out.write(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
    out.flush()


async def _main(args: argparse.Namespace) -> int:
    service = await ConverterService.create(start_listener=args.listener)
    service.start()
    try:
        if args.action == "help":
            print(service.help_text, end="")
        else:
            await _convert(service, args.input, args.command, args.stream)
    finally:
        service.stop()
    return 0


def run(argv: list[str] | None = None) -> None:
    """Command line front-end for the conversion core.

    ``unoconv-service help`` prints the supported options;
    ``unoconv-service convert report.docx format/pdf`` converts a file and
    prints the result path (``--stream`` writes the document to stdout and
    deletes the input afterwards).
    """
    parser = argparse.ArgumentParser(prog="unoconv-service")
    parser.add_argument("--listener", action="store_true", default=config.START_LISTENER,
                        help="keep a unoconv listener running during the command")
    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("help", help="show converter options")
    conv = sub.add_parser("convert", help="convert a document")
    conv.add_argument("input")
    conv.add_argument("command", nargs="?", default="", help="e.g. format/pdf/output/result.pdf")
    conv.add_argument("--stream", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        code = asyncio.run(_main(args))
    except ConverterError as e:
        logger.error("%s", e)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    run()
