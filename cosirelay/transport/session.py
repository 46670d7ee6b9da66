"""
session.py – одна отправка программы в контроллер.
* нормализация переводов строк (контроллер понимает только CR)
* одна запись, одно чтение с таймаутом, порт закрывается всегда
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import serial

from ..config import get_settings
from ..errors import EnumerationError, WriteError
from ..logging_config import log_exchange_summary, log_hex_data
from ..models import SerialConfig, SerialResult
from .driver import Opener, SerialPort, open_first_available, open_serial
from .ports import list_ports, resolve_candidates

_log = logging.getLogger("cosirelay.transport.session")

CR = "\r"


def normalize_program(program: str) -> str:
    """CRLF и одиночный CR → LF, пустые строки выкидываем, склеиваем через CR."""
    program = program.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line for line in program.split("\n") if line.strip()]
    return CR.join(lines)


class SerialTransport:
    """
    Отправка программы: выбор порта → открытие → запись → чтение → закрытие.

    ``enumerator`` и ``opener`` подменяются в тестах, по умолчанию
    это pyserial.
    """

    def __init__(self,
                 enumerator: Callable[[], List[str]] = list_ports,
                 opener: Opener = open_serial,
                 read_timeout: float | None = None,
                 read_buffer_size: int | None = None):
        settings = get_settings()
        self._enumerate = enumerator
        self._opener = opener
        self.read_timeout = settings.read_timeout if read_timeout is None else read_timeout
        self.read_buffer_size = read_buffer_size or settings.read_buffer_size

    def list_ports(self) -> List[str]:
        """Порты, которые видит система. ``EnumerationError`` пробрасывается."""
        return self._enumerate()

    def available_ports(self) -> List[str]:
        """То же, но ошибка перечисления не фатальна."""
        try:
            return self.list_ports()
        except EnumerationError as e:
            _log.warning("Error listing ports: %s", e)
            return []

    def send(self, program: str, cfg: SerialConfig,
             env_override: Optional[str] = None) -> SerialResult:
        ports = self.available_ports()
        _log.info("Available ports: %s", ports)
        _log.info("Using serial config: Port=%s, Baud=%d, Data=%d, Parity=%s, Stop=%d",
                  cfg.port_name, cfg.baud_rate, cfg.data_bits, cfg.parity, cfg.stop_bits)

        preferred = env_override or cfg.port_name
        candidates = resolve_candidates(preferred, ports)
        _log.debug("Candidate ports: %s", candidates)

        port, name = open_first_available(candidates, cfg, self._opener)
        try:
            payload = (normalize_program(program) + CR).encode()
            written = self._write(port, name, payload)
            reply = self._read_reply(port, name)
        finally:
            self._close(port, name)

        return SerialResult(
            result="sent",
            length=len(program),
            serial_port=name,
            serial_written=written,
            serial_reply=reply,
        )

    # ───── приватные шаги ──────────────────────────────────────
    def _write(self, port: SerialPort, name: str, payload: bytes) -> int:
        log_hex_data(_log, logging.DEBUG, f"SENDING to {name}", payload)
        _log.info("Writing to %s: %r", name, payload)
        try:
            written = port.write(payload)
        except (serial.SerialException, OSError) as e:
            _log.error("Write to %s failed: %s", name, e)
            raise WriteError(name, e) from e

        # короткая запись – не ошибка, сообщаем как есть
        written = len(payload) if written is None else written
        log_exchange_summary(_log, "TX", name, f"{written}/{len(payload)} bytes")
        return written

    def _read_reply(self, port: SerialPort, name: str) -> Optional[str]:
        port.timeout = self.read_timeout
        try:
            # ждём первый байт до таймаута, потом забираем то, что уже пришло
            buf = port.read(1)
            if buf:
                extra = min(port.in_waiting, self.read_buffer_size - len(buf))
                if extra > 0:
                    buf += port.read(extra)
        except (serial.SerialException, OSError) as e:
            _log.warning("Read from %s failed: %s", name, e)
            return None

        if not buf:
            _log.info("No reply from %s within %.1fs", name, self.read_timeout)
            return None

        log_hex_data(_log, logging.DEBUG, f"RECEIVED from {name}", buf)
        reply = buf.decode(errors="replace")
        log_exchange_summary(_log, "RX", name, repr(reply))
        return reply

    @staticmethod
    def _close(port: SerialPort, name: str) -> None:
        try:
            port.close()
        except (serial.SerialException, OSError) as e:
            _log.warning("Closing %s failed: %s", name, e)
        else:
            _log.debug("Closed %s", name)
