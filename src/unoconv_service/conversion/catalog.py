import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from .. import config
from ..errors import CatalogUnavailable

logger = logging.getLogger(__name__)

# "  -f, --format=format      specify the output format"
HELP_LINE = re.compile(r"^\s+(?:-([a-zA-Z]),\s)?--([a-z]+)(?:=([a-z=]+))?\s+(.+)$")

PUBLIC_OPTIONS = frozenset(
    {"export", "format", "field", "import", "filter", "output", "password"}
)

OPTION_COLUMN = 17


@dataclass(frozen=True)
class OptionDescriptor:
    option: str
    short: str | None = None
    has_value: bool = False
    is_public: bool = False


@dataclass(frozen=True)
class Catalog:
    """Options understood by the converter, parsed from its ``--help`` output."""

    options: tuple[OptionDescriptor, ...]
    help_text: str

    def find(self, name: str) -> OptionDescriptor | None:
        for opt in self.options:
            if opt.option == name or opt.short == name:
                return opt
        return None

    @property
    def public_options(self) -> tuple[OptionDescriptor, ...]:
        return tuple(o for o in self.options if o.is_public)


def _help_header(base_url: str) -> list[str]:
    url = f"{base_url}/convert/format/pdf/output/newname.pdf"
    return [
        "unoconv-server, a simple RESTful server for converting documents",
        "  please visit https://github.com/alphakevin/unoconv-server",
        "",
        "converting:",
        "  upload with multipart/form-data:",
        f"    curl -F file=@example.docx {url} > result.pdf",
        "  upload raw:",
        "    curl -X POST \\",
        '      -T "example.docx" \\',
        '      -H "Content-Type: application/vnd.openxmlformats-officedocument.wordprocessingml.document" \\',
        '      -H "Content-Disposition: attachment; filename=\\"example.docx\\"" \\',
        f"      {url} > result.pdf",
        "",
        "converter options:",
    ]


def _help_line(opt: OptionDescriptor, description: str) -> str:
    short = f"/{opt.short}," if opt.short else "   "
    name = f"{opt.option}/<value>" if opt.has_value else opt.option
    return f"  {short} /{name:<{OPTION_COLUMN}}  {description}"


def parse_help_text(text: str, *, base_url: str = config.HELP_BASE_URL) -> Catalog:
    """Build a catalog from converter help output.

    Lines that do not describe an option are skipped. A long or short name
    that was already seen keeps its first definition.
    """
    options: list[OptionDescriptor] = []
    seen_long: set[str] = set()
    seen_short: set[str] = set()
    help_lines = _help_header(base_url)

    for line in text.splitlines():
        m = HELP_LINE.match(line)
        if not m:
            continue
        short, option, value, description = m.groups()
        if option in seen_long:
            continue
        if short in seen_short:
            short = None
        opt = OptionDescriptor(
            option=option,
            short=short,
            has_value=bool(value),
            is_public=option in PUBLIC_OPTIONS,
        )
        options.append(opt)
        seen_long.add(option)
        if short:
            seen_short.add(short)
        if opt.is_public:
            help_lines.append(_help_line(opt, description.strip()))

    help_lines.append("")
    return Catalog(options=tuple(options), help_text="\n".join(help_lines))


async def build_catalog(
    command: Sequence[str] = config.UNOCONV_COMMAND,
    *,
    base_url: str = config.HELP_BASE_URL,
) -> Catalog:
    """Ask the converter for its help text and parse it.

    Must complete before any command is parsed; a failure here means the
    service cannot run.
    """
    logger.info("reading converter options: %s --help", " ".join(command))
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            "--help",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CatalogUnavailable(f"cannot run converter {command[0]!r}: {e}") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise CatalogUnavailable(
            f"converter --help exited with status {proc.returncode}: "
            f"{stderr.decode('utf-8', errors='replace').strip()}"
        )
    # unoconv prints its usage on standard error
    text = (stderr or stdout).decode("utf-8", errors="replace")
    catalog = parse_help_text(text, base_url=base_url)
    if not catalog.options:
        raise CatalogUnavailable("converter --help did not list any options")
    logger.info(
        "converter catalog ready: %d options, %d public",
        len(catalog.options),
        len(catalog.public_options),
    )
    return catalog
