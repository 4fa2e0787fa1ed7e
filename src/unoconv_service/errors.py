class ConverterError(Exception):
    """Base class for every error raised by the conversion core."""


class CatalogUnavailable(ConverterError):
    """The converter's help text could not be obtained."""


class InvalidOption(ConverterError):
    def __init__(self, option: str, message: str | None = None) -> None:
        self.option = option
        super().__init__(message or f"invalid option '{option}'")


class ConversionFailed(ConverterError):
    """The converter wrote diagnostics to standard error."""

    def __init__(self, stderr: str) -> None:
        self.stderr = stderr
        super().__init__(stderr)


class ConversionTimedOut(ConverterError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"No result from conversion (probably timed out after {timeout:g}s)")


class ConversionError(ConverterError):
    """Raised from a conversion stream, possibly after data was already delivered."""

    def __init__(self, stderr: str, returncode: int | None = None) -> None:
        self.stderr = stderr
        self.returncode = returncode
        message = stderr.strip() or f"converter exited with status {returncode}"
        super().__init__(message)
