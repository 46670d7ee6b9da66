"""
driver.py – открытие COM-порта с параметрами из ``SerialConfig``.
* маппинг parity / stopbits / flow control на константы pyserial
* перебор кандидатов до первого успешно открытого порта
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence, Tuple

import serial

from ..config import get_settings
from ..errors import NoPortAvailableError
from ..models import SerialConfig

_log = logging.getLogger("cosirelay.transport.driver")

PARITY = {
    "even": serial.PARITY_EVEN,
    "odd":  serial.PARITY_ODD,
}


class SerialPort(Protocol):
    """То, что сессии нужно от открытого порта."""
    timeout: float | None

    @property
    def in_waiting(self) -> int: ...

    def write(self, data: bytes) -> int | None: ...

    def read(self, size: int = 1) -> bytes: ...

    def close(self) -> None: ...


Opener = Callable[[str, SerialConfig], SerialPort]


def parse_parity(parity: str) -> str:
    """"even"/"odd" → соответствующий режим, всё остальное → без чётности."""
    return PARITY.get(parity, serial.PARITY_NONE)


def parse_stop_bits(stop_bits: int) -> float:
    return serial.STOPBITS_TWO if stop_bits == 2 else serial.STOPBITS_ONE


def open_serial(name: str, cfg: SerialConfig) -> serial.Serial:
    """Открыть реальный порт. Ошибки pyserial пробрасываются как есть."""
    return serial.Serial(
        port=name,
        baudrate=cfg.baud_rate,
        bytesize=cfg.data_bits,
        parity=parse_parity(cfg.parity),
        stopbits=parse_stop_bits(cfg.stop_bits),
        rtscts=cfg.flow_control == "rts_cts",
        xonxoff=cfg.flow_control == "xon_xoff",
        write_timeout=get_settings().write_timeout,
    )


def open_first_available(candidates: Sequence[str], cfg: SerialConfig,
                         opener: Opener = open_serial) -> Tuple[SerialPort, str]:
    """
    Пробуем кандидатов по порядку, первый успех выигрывает.
    Если не открылся ни один – ``NoPortAvailableError`` с последней ошибкой.
    """
    last_err: BaseException | None = None

    for name in candidates:
        if not name:
            last_err = ValueError("empty port name")
            _log.warning("Skipping empty port name")
            continue

        _log.info("Attempting to open %s with baud=%d, data=%d, parity=%s, stop=%d, flow=%s",
                  name, cfg.baud_rate, cfg.data_bits, cfg.parity, cfg.stop_bits, cfg.flow_control)
        try:
            port = opener(name, cfg)
        except (serial.SerialException, OSError, ValueError) as e:
            last_err = e
            _log.info("Failed to open %s: %s", name, e)
            continue

        _log.info("Successfully opened %s with baud rate %d", name, cfg.baud_rate)
        return port, name

    raise NoPortAvailableError(list(candidates), last_err) from last_err
