"""Error taxonomy of the relay. HTTP handlers map these to status codes."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every error raised by cosirelay."""


class ValidationError(RelayError):
    """A config field outside its allowed range/set, or a malformed body."""

    def __init__(self, field: str, value, reason: str = ""):
        self.field = field
        self.value = value
        msg = f"invalid {field.replace('_', ' ')}: {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class EnumerationError(RelayError):
    """Host port listing failed."""


class SendError(RelayError):
    """Terminal failure of a send operation."""


class NoPortAvailableError(SendError):
    """None of the candidate ports could be opened."""

    def __init__(self, attempted: list[str], last_error: BaseException | None):
        self.attempted = list(attempted)
        self.last_error = last_error
        super().__init__(f"failed to open any serial port: no port available: {last_error}")


class WriteError(SendError):
    """Writing to an opened port failed. The port has been closed."""

    def __init__(self, port: str, cause: BaseException):
        self.port = port
        super().__init__(f"failed to write to serial port {port}: {cause}")
