"""
In-memory state of the relay: active serial line parameters and the last
saved program. Nothing here survives a restart.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager

from .enums import FlowControl, Parity
from .errors import ValidationError
from .models import SerialConfig, SerialConfigUpdate

log = logging.getLogger("cosirelay.state")


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer. Writers are not starved."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def validate_update(candidate: SerialConfigUpdate) -> None:
    """Raise ``ValidationError`` for the first present field out of range."""
    if candidate.baud_rate is not None and candidate.baud_rate <= 0:
        raise ValidationError("baud_rate", candidate.baud_rate, "must be positive")
    if candidate.data_bits is not None and not 5 <= candidate.data_bits <= 8:
        raise ValidationError("data_bits", candidate.data_bits, "must be 5-8")
    if candidate.stop_bits is not None and candidate.stop_bits not in (1, 2):
        raise ValidationError("stop_bits", candidate.stop_bits, "must be 1 or 2")
    if candidate.parity and candidate.parity not in {p.value for p in Parity}:
        raise ValidationError("parity", candidate.parity, "must be none, even or odd")
    if candidate.flow_control and candidate.flow_control not in {f.value for f in FlowControl}:
        raise ValidationError("flow_control", candidate.flow_control,
                              "must be none, rts_cts or xon_xoff")


class ConfigStore:
    """
    Holds the single process-wide ``SerialConfig``.

    ``get`` returns a copy, so callers can never mutate the stored instance.
    ``update`` validates the whole candidate before touching anything and
    swaps in a fully merged config under the write lock.
    """

    def __init__(self, initial: SerialConfig | None = None):
        self._cfg = initial.model_copy() if initial else SerialConfig()
        self._lock = ReadWriteLock()

    def get(self) -> SerialConfig:
        with self._lock.read_locked():
            return self._cfg.model_copy()

    def update(self, candidate: SerialConfigUpdate) -> SerialConfig:
        validate_update(candidate)

        # пустые строки и None = поле не передано
        changes = {
            name: value
            for name, value in candidate.model_dump().items()
            if value is not None and value != ""
        }

        with self._lock.write_locked():
            merged = self._cfg.model_dump()
            merged.update(changes)
            self._cfg = SerialConfig(**merged)
            cfg = self._cfg.model_copy()

        log.info("Serial config updated: Port=%s, Baud=%d, Data=%d, Parity=%s, Stop=%d, Flow=%s",
                 cfg.port_name, cfg.baud_rate, cfg.data_bits,
                 cfg.parity, cfg.stop_bits, cfg.flow_control)
        return cfg


class ProgramStore:
    """Single slot for the last saved program."""

    def __init__(self, program: str = ""):
        self._program = program
        self._lock = threading.Lock()

    def get(self) -> str:
        with self._lock:
            return self._program

    def save(self, program: str) -> None:
        with self._lock:
            self._program = program
        log.info("Program saved (length): %d", len(program))
