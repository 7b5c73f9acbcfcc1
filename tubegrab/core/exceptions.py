"""
Excepciones personalizadas de la aplicación.
Proporciona excepciones específicas del dominio para mejor manejo de errores.
Cada excepción lleva el código HTTP con el que se presenta al cliente.
"""
from typing import Optional

from .constants import (
    ERROR_VALIDATION,
    ERROR_INVALID_URL,
    ERROR_FETCH_INFO,
    ERROR_PARSE_INFO,
    ERROR_DOWNLOAD,
    ERROR_JOB_CONFLICT,
    ERROR_UNEXPECTED_PREFIX,
)


class TubeGrabException(Exception):
    """Excepción base para todas las excepciones de TubeGrab."""

    status_code: int = 500
    # Los detalles solo se exponen en modo debug salvo que la excepción lo indique
    expose_details: bool = False

    def __init__(self, message: str, details: Optional[str] = None):
        """
        Args:
            message: Mensaje principal del error (visible por el cliente)
            details: Detalles de diagnóstico (solo se exponen en modo debug)
        """
        self.message = message
        self.details = details
        full_message = f"{message}"
        if details:
            full_message += f" - {details}"
        super().__init__(full_message)


class InvalidURLException(TubeGrabException):
    """Se lanza cuando la URL falta o no es una URL absoluta válida."""

    status_code = 422
    expose_details = True

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None):
        details = [ERROR_INVALID_URL]
        if url:
            details.append(f"URL: {url}")
        if reason:
            details.append(reason)
        super().__init__(ERROR_VALIDATION, " | ".join(details))


class MetadataFetchException(TubeGrabException):
    """Se lanza cuando yt-dlp termina con error al pedir los metadatos."""

    status_code = 400

    def __init__(self, stderr: Optional[str] = None, exit_code: Optional[int] = None):
        self.exit_code = exit_code
        super().__init__(ERROR_FETCH_INFO, stderr or None)


class MetadataParseException(TubeGrabException):
    """Se lanza cuando la salida de yt-dlp no es el JSON esperado."""

    status_code = 500

    def __init__(self, reason: Optional[str] = None):
        super().__init__(ERROR_PARSE_INFO, reason)


class DownloadFailedException(TubeGrabException):
    """Se lanza cuando una descarga falla."""

    status_code = 400

    def __init__(self, reason: Optional[str] = None, exit_code: Optional[int] = None, timed_out: bool = False):
        self.exit_code = exit_code
        self.timed_out = timed_out
        details = []
        if timed_out:
            details.append("Tiempo de espera agotado")
        if exit_code is not None:
            details.append(f"Código de salida: {exit_code}")
        if reason:
            details.append(reason)
        super().__init__(ERROR_DOWNLOAD, " | ".join(details) if details else None)


class UnexpectedErrorException(TubeGrabException):
    """Envuelve errores inesperados capturados en el borde de la petición."""

    status_code = 500

    def __init__(self, reason: str):
        super().__init__(f"{ERROR_UNEXPECTED_PREFIX}{reason}")


class JobConflictException(TubeGrabException):
    """Se lanza cuando ya hay una descarga en curso con el mismo job_id."""

    status_code = 409

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(ERROR_JOB_CONFLICT, f"job_id: {job_id}")
