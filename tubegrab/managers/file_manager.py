"""
Gestor de archivos temporales.
Centraliza la creación de rutas únicas de descarga y su limpieza.
"""
import logging
import re
import time
import uuid
from pathlib import Path
from typing import Optional, Union

from ..core.config import settings
from ..core.constants import TEMP_FILE_TOKEN_PATTERN

logger = logging.getLogger(__name__)


class FileManager:
    """
    Gestor de operaciones con archivos.
    Responsable de generar y limpiar los archivos temporales de descarga.
    """

    @staticmethod
    def get_temp_dir() -> Path:
        """Retorna el directorio temporal, creándolo si no existe."""
        path = Path(settings.TMP_DIR)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def create_temp_path() -> Path:
        """
        Genera una ruta temporal única para una descarga.

        El archivo no se crea: lo escribe yt-dlp. El token aleatorio evita
        colisiones entre peticiones concurrentes.

        Returns:
            Ruta del tipo <tmp>/yt_<token>.mp4
        """
        token = uuid.uuid4().hex
        filename = f"{settings.TEMP_FILE_PREFIX}{token}.{settings.OUTPUT_EXTENSION}"
        return FileManager.get_temp_dir() / filename

    @staticmethod
    def get_file_size(path: Path) -> int:
        """Tamaño del archivo en bytes, 0 si no existe."""
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return 0

    @staticmethod
    def remove_quietly(path: Union[str, Path]) -> bool:
        """
        Elimina un archivo si existe.

        Args:
            path: Ruta del archivo

        Returns:
            True si se eliminó
        """
        try:
            Path(path).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete temp file path={path} error={e}")
            return False

    @staticmethod
    def remove_job_files(temp_path: Path) -> int:
        """
        Elimina el archivo temporal y los parciales que yt-dlp deja al lado
        (<stem>.part, <stem>.f137.mp4, <stem>.temp.mp4, ...).

        Args:
            temp_path: Ruta temporal generada para el job

        Returns:
            Número de archivos eliminados
        """
        removed = 0
        if FileManager.remove_quietly(temp_path):
            removed += 1

        parent = temp_path.parent
        if not parent.exists():
            return removed

        for sibling in parent.glob(f"{temp_path.stem}.*"):
            if sibling.is_file() and FileManager.remove_quietly(sibling):
                removed += 1

        return removed

    @staticmethod
    def cleanup_stale_temp_files(max_age_minutes: int, now: Optional[float] = None) -> int:
        """
        Elimina archivos temporales de descarga abandonados.

        Solo toca archivos con nombre de descarga propio (yt_<token>.*) y más
        antiguos que max_age_minutes, de modo que ni las descargas en curso ni
        archivos ajenos con el mismo prefijo se ven afectados.

        Args:
            max_age_minutes: Antigüedad mínima para eliminar
            now: Timestamp de referencia (default: ahora)

        Returns:
            Número de archivos eliminados
        """
        temp_dir = Path(settings.TMP_DIR)
        if not temp_dir.exists():
            return 0

        cutoff = (now if now is not None else time.time()) - max_age_minutes * 60
        removed = 0
        own_name = re.compile(re.escape(settings.TEMP_FILE_PREFIX) + TEMP_FILE_TOKEN_PATTERN)

        for path in temp_dir.glob(f"{settings.TEMP_FILE_PREFIX}*"):
            if not own_name.match(path.name):
                continue
            try:
                if not path.is_file() or path.stat().st_mtime >= cutoff:
                    continue
            except FileNotFoundError:
                continue

            if FileManager.remove_quietly(path):
                removed += 1

        return removed


# Instancia global
file_manager = FileManager()
