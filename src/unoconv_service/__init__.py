"""
unoconv service package.

Wraps the ``unoconv`` command line converter: parses its help text into an
option catalog, translates path-style commands (``format/pdf/output/x.pdf``)
into converter arguments and supervises the conversion subprocesses.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
