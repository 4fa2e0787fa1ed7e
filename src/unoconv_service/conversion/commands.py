from dataclasses import dataclass, field

from ..errors import InvalidOption
from .catalog import Catalog

DEFAULT_FORMAT = "pdf"

# Caller-facing format names that unoconv spells differently.
FORMAT_ALIASES = {"txt": "text"}


@dataclass
class ParsedCommand:
    args: list[str] = field(default_factory=list)
    options: dict[str, str | bool] = field(default_factory=dict)

    @property
    def format(self) -> str:
        return str(self.options["format"])


def parse_command(catalog: Catalog, command: str) -> ParsedCommand:
    """Translate ``format/pdf/output/name.pdf`` into converter arguments.

    Tokens alternate between option names (long or short, as listed in the
    catalog) and, for options taking a value, that value. Options are stored
    under their long name. Raises InvalidOption on the first unknown name or
    on a trailing option with no value; nothing is skipped.
    """
    tokens = [t for t in command.split("/") if t]
    parsed = ParsedCommand()

    while tokens:
        name = tokens.pop(0)
        opt = catalog.find(name)
        if opt is None:
            raise InvalidOption(name)

        prefix = "-" if len(name) == 1 else "--"
        parsed.args.append(f"{prefix}{name}")

        if not opt.has_value:
            parsed.options[opt.option] = True
            continue

        if not tokens:
            raise InvalidOption(name, f"missing value for option '{name}'")
        value = tokens.pop(0)
        if opt.option == "format":
            parsed.args.append(FORMAT_ALIASES.get(value, value))
        else:
            parsed.args.append(value)
        parsed.options[opt.option] = value

    parsed.options.setdefault("format", DEFAULT_FORMAT)
    return parsed
