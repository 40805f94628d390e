"""
Configuración de logging para la aplicación.
"""
import logging
import sys
from typing import Optional

from app.config import LOG_LEVEL, LOG_FORMAT

# loggers de librerías y el nivel mínimo con el que se dejan pasar
QUIET_LOGGERS = {
    # un stream abierto genera una sola linea de access log, no aporta
    "uvicorn.access": logging.WARNING,
    # sse-starlette loguea cada chunk en DEBUG (un evento cada 2s por cliente)
    "sse_starlette.sse": logging.INFO,
}


def setup_logging(log_level: Optional[str] = None) -> int:
    """
    Configura el logging a stdout.

    Returns:
        Nivel numérico aplicado
    """
    numeric_level = getattr(logging, (log_level or LOG_LEVEL).upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    for name, min_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(numeric_level, min_level))

    return numeric_level


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
