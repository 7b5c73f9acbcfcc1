"""
Configuración centralizada de la aplicación.
Este módulo contiene todas las configuraciones del proyecto.
Los valores se leen del entorno (y de un archivo .env si existe).
"""
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .enums import ToolName

# Cargar variables de entorno desde .env antes de leerlas
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


class Settings:
    """Configuración centralizada de la aplicación."""

    # Directorio temporal propio (dentro del temporal del sistema); la limpieza
    # periódica solo recorre este directorio
    TMP_DIR: Path = Path(os.getenv("TUBEGRAB_TMP_DIR") or Path(tempfile.gettempdir()) / "tubegrab")

    # Archivos temporales de descarga
    TEMP_FILE_PREFIX: str = "yt_"
    OUTPUT_EXTENSION: str = "mp4"
    OUTPUT_MEDIA_TYPE: str = "video/mp4"
    FALLBACK_FILENAME: str = "video.mp4"

    # Configuración de procesos (segundos)
    DOWNLOAD_TIMEOUT: float = _env_float("DOWNLOAD_TIMEOUT", 600.0)
    TITLE_TIMEOUT: float = _env_float("TITLE_TIMEOUT", 60.0)
    INFO_TIMEOUT: Optional[float] = _env_float("INFO_TIMEOUT", None)
    JOB_TERMINATION_TIMEOUT: float = 5.0

    # Salida de diagnóstico
    DEBUG: bool = _env_bool("APP_DEBUG", False)
    MAX_LOG_LINES: int = 200
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None

    # Servidor
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _env_int("PORT", 8000)
    RELOAD: bool = _env_bool("RELOAD", False)
    WORKERS: int = _env_int("WORKERS", 1)

    # API Info
    APP_TITLE: str = "TubeGrab API"
    APP_DESCRIPTION: str = "REST API to inspect and download videos using yt-dlp and ffmpeg"
    APP_VERSION: str = "1.0.0"

    # Binarios externos: variable de entorno con la ruta personalizada
    TOOL_ENV_OVERRIDES: Dict[ToolName, str] = {
        ToolName.FETCHER: "YT_DLP_PATH",
        ToolName.MUXER: "FFMPEG_PATH",
    }

    # Binarios externos: rutas de instalación habituales, en orden de preferencia
    TOOL_CANDIDATES: Dict[ToolName, List[str]] = {
        ToolName.FETCHER: [
            "/usr/local/bin/yt-dlp",
            "/usr/bin/yt-dlp",
            "/opt/homebrew/bin/yt-dlp",
            "/home/forge/.local/bin/yt-dlp",
            str(Path.home() / ".local" / "bin" / "yt-dlp"),
        ],
        ToolName.MUXER: [
            "/usr/bin/ffmpeg",
            "/opt/homebrew/bin/ffmpeg",
            "/usr/local/bin/ffmpeg",
        ],
    }

    # Binarios externos: nombre del comando resuelto por PATH
    TOOL_COMMANDS: Dict[ToolName, str] = {
        ToolName.FETCHER: "yt-dlp",
        ToolName.MUXER: "ffmpeg",
    }


class CleanupSettings:
    """Configuración de la limpieza periódica de temporales."""

    TEMP_CLEANUP_ENABLED: bool = _env_bool("TEMP_CLEANUP_ENABLED", True)
    TEMP_CLEANUP_INTERVAL_MINUTES: int = _env_int("TEMP_CLEANUP_INTERVAL_MINUTES", 30)
    # Debe superar DOWNLOAD_TIMEOUT para no borrar descargas en curso
    TEMP_MAX_AGE_MINUTES: int = _env_int("TEMP_MAX_AGE_MINUTES", 120)
    PROGRESS_TTL_SECONDS: int = _env_int("PROGRESS_TTL_SECONDS", 3600)


settings = Settings()
cleanup_settings = CleanupSettings()
