"""
Domain layer for unoconv-backed conversion.
Provides the option catalog, command parser, subprocess runners and a
service facade so front-ends (HTTP or others) can share the same core logic.
"""

from .adapters import PsutilReaper, UnoconvListener
from .catalog import Catalog, OptionDescriptor, build_catalog, parse_help_text
from .commands import ParsedCommand, parse_command
from .interfaces import ConversionJob, ConverterListener, ProcessReaper
from .runner import ConversionRunner
from .service import ConverterService
from .streaming import ConversionStream, convert_to_stream
