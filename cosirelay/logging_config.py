# cosirelay/logging_config.py
"""
Логирование cosirelay: консоль + ротируемые файлы в logs/.
serial_transport.log получает только записи транспорта (TX/RX, открытие портов).
"""

import logging
import logging.handlers
import os
from pathlib import Path

TRANSPORT_LOGGER = "cosirelay.transport"

LOG_DIR = Path("logs")

_DETAILED = logging.Formatter(
    fmt="%(asctime)s.%(msecs)03d [%(name)28s] %(levelname)8s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
_CONSOLE = logging.Formatter(
    fmt="%(asctime)s [%(name)20s] %(levelname)5s: %(message)s",
    datefmt="%H:%M:%S",
)

# уровни отдельных логгеров поверх корневого
LOGGER_LEVELS = {
    TRANSPORT_LOGGER: logging.DEBUG,
    "API":            logging.INFO,
    "uvicorn":        logging.INFO,
    "uvicorn.access": logging.WARNING,
    "asyncio":        logging.WARNING,
}


def _rotating(filename: str, level: int, max_mb: int, backups: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        LOG_DIR / filename, maxBytes=max_mb * 1024 * 1024, backupCount=backups
    )
    handler.setLevel(level)
    handler.setFormatter(_DETAILED)
    return handler


def setup_logging(log_level: str = "DEBUG", log_to_file: bool = True):
    """Переустановить все хэндлеры корневого логгера."""
    level = getattr(logging, log_level.upper())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(_CONSOLE)
    root.addHandler(console)

    if log_to_file:
        LOG_DIR.mkdir(exist_ok=True)
        root.addHandler(_rotating("cosirelay.log", level, 10, 5))

        transport = _rotating("serial_transport.log", logging.DEBUG, 5, 10)
        transport.addFilter(lambda record: record.name.startswith(TRANSPORT_LOGGER))
        root.addHandler(transport)

    for name, lvl in LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(lvl)

    logging.getLogger("LoggingSetup").info(
        "Logging initialized: level=%s, files=%s", log_level,
        LOG_DIR.absolute() if log_to_file else "off")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_hex_data(logger: logging.Logger, level: int, message: str, data: bytes, max_bytes: int = 64):
    """Hex-дамп байтов; длинные буферы режутся до начала и конца."""
    if not logger.isEnabledFor(level):
        return

    if len(data) <= max_bytes:
        logger.log(level, "%s (%d bytes): %s", message, len(data), data.hex().upper())
    else:
        half = max_bytes // 2
        logger.log(level, "%s (%d bytes): %s...%s", message, len(data),
                   data[:half].hex().upper(), data[-half:].hex().upper())


def log_exchange_summary(logger: logging.Logger, direction: str, port: str, details: str = ""):
    """>>> для TX, <<< для RX."""
    marker = ">>>" if direction == "TX" else "<<<"
    logger.info("%s %s: %s %s", marker, port, direction, details)


if os.getenv("COSIRELAY_AUTO_LOGGING", "1") == "1":
    setup_logging(
        os.getenv("COSIRELAY_LOG_LEVEL", "DEBUG"),
        os.getenv("COSIRELAY_LOG_TO_FILE", "1") == "1",
    )
