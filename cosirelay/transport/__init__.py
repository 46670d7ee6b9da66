from .driver import open_first_available, open_serial, parse_parity, parse_stop_bits
from .ports import describe_ports, list_ports, resolve_candidates
from .session import SerialTransport, normalize_program

__all__ = [
    "SerialTransport",
    "describe_ports",
    "list_ports",
    "normalize_program",
    "open_first_available",
    "open_serial",
    "parse_parity",
    "parse_stop_bits",
    "resolve_candidates",
]
