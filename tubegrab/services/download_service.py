"""
Servicio de descarga de video.
Descarga con yt-dlp (que usa ffmpeg para unir audio y video) a un archivo
temporal único, y resuelve el nombre con el que se entrega al cliente.
"""
import logging
import uuid
from pathlib import Path
from typing import List, Optional

from ..core.config import settings
from ..core.constants import (
    YTDLP_DEFAULT_FORMAT,
    YTDLP_SELECTED_FORMAT_TEMPLATE,
    YTDLP_MERGE_OUTPUT_FORMAT,
)
from ..core.exceptions import DownloadFailedException
from ..helpers import FileNameHelper, TextHelper
from ..managers import job_manager, file_manager
from .command_builder import CommandBuilder
from .executable_locator import executable_locator, ExecutableLocator
from .process_runner import process_runner, ProcessRunner

logger = logging.getLogger(__name__)


class DownloadResult:
    """Resultado de una descarga lista para entregarse."""

    def __init__(self, job_id: str, path: Path, filename: str, size_bytes: int, elapsed: float):
        self.job_id = job_id
        self.path = path
        self.filename = filename
        self.size_bytes = size_bytes
        self.elapsed = elapsed


class DownloadService:
    """
    Servicio para descargar un video como MP4.

    Cada descarga usa una ruta temporal propia, de modo que peticiones
    concurrentes nunca comparten archivos. El archivo resultante lo borra
    quien lo entrega (ver routes.youtube) una vez enviado.
    """

    def __init__(
        self,
        locator: ExecutableLocator = executable_locator,
        runner: ProcessRunner = process_runner,
    ):
        self.locator = locator
        self.runner = runner

    @staticmethod
    def format_selector(format_id: Optional[str]) -> str:
        """
        Expresión de formato para yt-dlp.

        Con format_id: ese stream de video + mejor audio, o lo mejor disponible.
        Sin él: mejor MP4 + mejor M4A, luego mejor video + mejor audio, luego lo mejor.
        """
        if format_id:
            return YTDLP_SELECTED_FORMAT_TEMPLATE.format(format_id=format_id)
        return YTDLP_DEFAULT_FORMAT

    def build_command(self, url: str, output_path: Path, format_id: Optional[str] = None) -> List[str]:
        """
        Construye el comando yt-dlp para descargar video.

        Args:
            url: URL del video
            output_path: Archivo temporal de salida
            format_id: format_id elegido (opcional)

        Returns:
            Lista con el comando y argumentos
        """
        return (
            CommandBuilder(self.locator.fetcher())
            .option("--ffmpeg-location", self.locator.muxer())
            .flag("--no-playlist")
            .flag("--no-warnings")
            .flag("--newline")
            .option("-f", self.format_selector(format_id))
            .option("--merge-output-format", YTDLP_MERGE_OUTPUT_FORMAT)
            .option("-o", str(output_path))
            .positional(url)
            .build()
        )

    def build_title_command(self, url: str) -> List[str]:
        return (
            CommandBuilder(self.locator.fetcher())
            .flag("--get-title")
            .flag("--no-playlist")
            .positional(url)
            .build()
        )

    def resolve_filename(self, url: str) -> str:
        """
        Nombre de archivo para el cliente a partir del título del video.

        Returns:
            Título saneado con extensión .mp4, o "video.mp4" si no se pudo obtener
        """
        result = self.runner.run(self.build_title_command(url), timeout=settings.TITLE_TIMEOUT)
        if not result.ok:
            logger.warning(
                f"Failed to fetch video title, using fallback name url={url} "
                f"exit_code={result.returncode} stderr={TextHelper.truncate_text(result.stderr, 20)!r}"
            )
            return settings.FALLBACK_FILENAME
        return FileNameHelper.sanitize_title(result.stdout)

    def download(
        self,
        url: str,
        format_id: Optional[str] = None,
        resolution: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> DownloadResult:
        """
        Descarga un video a un archivo temporal único.

        Args:
            url: URL validada del video
            format_id: format_id elegido (opcional)
            resolution: Etiqueta de resolución elegida (solo para logs)
            job_id: Token para el seguimiento de progreso (se genera si falta)

        Returns:
            DownloadResult con la ruta temporal y el nombre de entrega

        Raises:
            DownloadFailedException: Si yt-dlp falla, se agota el tiempo o no produce archivo
            JobConflictException: Si job_id ya tiene una descarga en curso
        """
        job_id = job_id or uuid.uuid4().hex[:8]
        job_manager.start_progress(job_id)
        temp_path = file_manager.create_temp_path()

        try:
            command = self.build_command(url, temp_path, format_id)
            logger.info(
                f"Starting download job_id={job_id} url={url} format_id={format_id} "
                f"resolution={resolution} temp_file={temp_path} command={CommandBuilder.quote(command)}"
            )
            result = self.runner.run_streaming(
                command,
                on_line=lambda line: job_manager.update_from_line(job_id, line),
                timeout=settings.DOWNLOAD_TIMEOUT,
                job_id=job_id,
            )
        except Exception:
            file_manager.remove_job_files(temp_path)
            job_manager.fail_progress(job_id)
            logger.exception(f"Download runner raised job_id={job_id} url={url}")
            raise

        if not result.ok:
            file_manager.remove_job_files(temp_path)
            job_manager.fail_progress(job_id)
            diagnostics = TextHelper.truncate_text(result.diagnostics)
            logger.error(
                f"Download failed job_id={job_id} url={url} exit_code={result.returncode} "
                f"timed_out={result.timed_out} error={diagnostics!r}"
            )
            raise DownloadFailedException(
                reason=diagnostics or None,
                exit_code=result.returncode,
                timed_out=result.timed_out,
            )

        if not temp_path.exists():
            file_manager.remove_job_files(temp_path)
            job_manager.fail_progress(job_id)
            logger.error(f"Download produced no file job_id={job_id} url={url} temp_file={temp_path}")
            raise DownloadFailedException(reason="No se generó el archivo de salida")

        size_bytes = file_manager.get_file_size(temp_path)
        logger.info(
            f"Download completed job_id={job_id} url={url} "
            f"duration_seconds={round(result.elapsed, 2)} size_mb={TextHelper.bytes_to_mb(size_bytes)} "
            f"temp_file={temp_path}"
        )

        try:
            filename = self.resolve_filename(url)
        except Exception:
            file_manager.remove_job_files(temp_path)
            job_manager.fail_progress(job_id)
            raise
        job_manager.finish_progress(job_id)

        return DownloadResult(
            job_id=job_id,
            path=temp_path,
            filename=filename,
            size_bytes=size_bytes,
            elapsed=result.elapsed,
        )


# Instancia global
download_service = DownloadService()
