"""
ports.py – какие порты видит система и в каком порядке их пробовать.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from serial.tools import list_ports as _list_ports

from ..errors import EnumerationError

_log = logging.getLogger("cosirelay.transport.ports")

# Порты, которые пробуем всегда, даже если ОС их не показала
DEFAULT_PORTS = ("COM1", "COM2")


def list_ports() -> List[str]:
    """Device names of every serial port the host currently exposes, sorted."""
    try:
        ports = sorted(p.device for p in _list_ports.comports())
    except Exception as e:
        raise EnumerationError(f"failed to list ports: {e}") from e
    _log.debug("Available ports: %s", ports)
    return ports


def describe_ports() -> List[tuple[str, str]]:
    """(device, description) pairs, for diagnostics."""
    try:
        ports = [(p.device, p.description) for p in _list_ports.comports()]
    except Exception as e:
        raise EnumerationError(f"failed to list ports: {e}") from e
    ports.sort(key=lambda x: x[0])
    return ports


def resolve_candidates(preferred: str, enumerated: Sequence[str]) -> List[str]:
    """
    Упорядоченный список портов для попыток открытия.

    ``preferred`` всегда первый (даже пустой), затем COM1/COM2,
    затем всё, что нашла ОС. Без повторов.
    """
    candidates = [preferred]
    for name in (*DEFAULT_PORTS, *enumerated):
        if name not in candidates:
            candidates.append(name)
    return candidates
