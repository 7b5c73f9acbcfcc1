"""
Configuración de logging de la aplicación.
Un único logger de paquete ('tubegrab') con salida a consola y, opcionalmente, a archivo.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import settings

LOGGER_NAME = "tubegrab"
LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configura el logger del paquete.

    Solo añade handlers la primera vez, de modo que llamadas repetidas
    (recargas, tests) no dupliquen la salida.

    Args:
        level: Nivel de log (default desde settings)
        log_file: Archivo de log opcional (default desde settings)

    Returns:
        Logger raíz del paquete
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level or settings.LOG_LEVEL, logging.INFO))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or settings.LOG_FILE
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Evitar propagación duplicada hacia el logger raíz de uvicorn
    logger.propagate = False
    return logger
