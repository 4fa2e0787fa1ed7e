import os
import shlex
import tempfile


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


# Converter invocation; split like a shell would so wrappers such as
# "python3 /usr/bin/unoconv" work.
UNOCONV_COMMAND = shlex.split(os.getenv("UNOCONV_COMMAND", "unoconv"))
# LibreOffice worker binary spawned by unoconv, matched when reaping.
SOFFICE_BIN = os.getenv("SOFFICE_BIN", "/usr/lib/libreoffice/program/soffice.bin")

TMP_DIR = os.getenv("TMP_DIR", tempfile.gettempdir())
CONVERSION_TIMEOUT_SEC = float(os.getenv("CONVERSION_TIMEOUT_SEC", "600"))
# Give every job its own directory under TMP_DIR instead of sharing it.
ISOLATE_JOBS = _flag("ISOLATE_JOBS")
START_LISTENER = _flag("START_LISTENER")

HELP_BASE_URL = os.getenv("HELP_BASE_URL", "http://127.0.0.1:4000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
