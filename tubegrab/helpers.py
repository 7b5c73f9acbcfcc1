"""
Utilidades y helpers de la aplicación.
Funciones auxiliares para nombres de archivo y textos.
"""
import re

from .core.config import settings
from .core.constants import FILENAME_UNSAFE_PATTERN


class FileNameHelper:
    """Helper para nombres de archivo entregados al cliente."""

    @staticmethod
    def sanitize_title(title: str) -> str:
        """
        Convierte el título de un video en un nombre de archivo descargable.

        Todo carácter fuera de [A-Za-z0-9_- ] se reemplaza por '_' y se
        añade la extensión de salida. El resultado es seguro dentro de las
        comillas de Content-Disposition.

        Args:
            title: Título devuelto por yt-dlp

        Returns:
            Nombre de archivo (ej: "My Video_ Part _1_.mp4")
        """
        safe = re.sub(FILENAME_UNSAFE_PATTERN, "_", (title or "").strip())
        return f"{safe}.{settings.OUTPUT_EXTENSION}"


class TextHelper:
    """Helper para operaciones con texto."""

    @staticmethod
    def truncate_text(text: str, max_lines: int = None) -> str:
        """
        Trunca un texto manteniendo solo las últimas N líneas.

        Args:
            text: Texto a truncar
            max_lines: Número máximo de líneas (default desde settings)

        Returns:
            Texto truncado
        """
        if not text:
            return ""

        if max_lines is None:
            max_lines = settings.MAX_LOG_LINES

        lines = text.strip().splitlines()
        if len(lines) <= max_lines:
            return "\n".join(lines)
        return "\n".join(lines[-max_lines:])

    @staticmethod
    def bytes_to_mb(size_bytes: int) -> float:
        """Convierte bytes a MB redondeando a dos decimales."""
        return round(size_bytes / 1024 / 1024, 2)
