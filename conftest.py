import os

# без файлов в logs/ во время тестов
os.environ.setdefault("COSIRELAY_LOG_TO_FILE", "0")

import serial

from cosirelay.errors import EnumerationError


class FakePort:
    """In-memory stand-in for an opened ``serial.Serial``."""

    def __init__(self, name: str, reply: bytes = b"", write_error: Exception | None = None,
                 short_write: int | None = None):
        self.name = name
        self.timeout = None
        self.written = bytearray()
        self.closed = False
        self._reply = bytearray(reply)
        self._write_error = write_error
        self._short_write = short_write

    @property
    def in_waiting(self) -> int:
        return len(self._reply)

    def write(self, data: bytes) -> int:
        if self._write_error is not None:
            raise self._write_error
        n = len(data) if self._short_write is None else self._short_write
        self.written += data[:n]
        return n

    def read(self, size: int = 1) -> bytes:
        chunk = bytes(self._reply[:size])
        del self._reply[:size]
        return chunk

    def close(self):
        self.closed = True


class FakeOpener:
    """
    Opens ``FakePort`` for names in ``available``; everything else fails the
    way pyserial does for a missing or busy device.
    """

    def __init__(self, available=(), reply: bytes = b"", write_error=None, short_write=None):
        self.available = set(available)
        self.reply = reply
        self.write_error = write_error
        self.short_write = short_write
        self.attempts = []
        self.ports = []
        self.configs = []

    def __call__(self, name, cfg):
        self.attempts.append(name)
        self.configs.append(cfg)
        if name not in self.available:
            raise serial.SerialException(f"could not open port {name!r}: [Errno 2] No such file or directory")
        port = FakePort(name, self.reply, self.write_error, self.short_write)
        self.ports.append(port)
        return port


def fixed_ports(*names):
    return lambda: list(names)


def broken_enumerator():
    raise EnumerationError("failed to list ports: permission denied")
